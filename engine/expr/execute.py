"""
Evaluation of compiled expression trees against the metrics and log backends.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Mapping, Union

import numpy as np

from engine.exceptions import ExecutionError
from engine.results import Result, ResultSet, Series, Value
from engine.tags import TagSet

log = logging.getLogger(__name__)

Squelched = Callable[[TagSet], bool]
Operand = Union[float, str, ResultSet]


def never_squelched(_group: TagSet) -> bool:
    return False


@dataclass
class EvalState:
    metrics: Any
    search: Any
    reference_time: datetime
    autods: int = 0
    unjoined_ok: bool = False
    squelched: Squelched = never_squelched


def _logical_and(a, b):
    return np.logical_and(a != 0, b != 0)


def _logical_or(a, b):
    return np.logical_or(a != 0, b != 0)


_OPS: dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: np.add,
    ast.Sub: np.subtract,
    ast.Mult: np.multiply,
    ast.Div: np.true_divide,
    ast.Mod: np.mod,
    ast.Pow: np.power,
    ast.Gt: np.greater,
    ast.GtE: np.greater_equal,
    ast.Lt: np.less,
    ast.LtE: np.less_equal,
    ast.Eq: np.equal,
    ast.NotEq: np.not_equal,
    ast.And: _logical_and,
    ast.Or: _logical_or,
}


def _apply_values(op: Callable, a: Value, b: Value) -> Value:
    with np.errstate(all="ignore"):
        if isinstance(a, Series) and isinstance(b, Series):
            common, ia, ib = np.intersect1d(a.timestamps, b.timestamps, return_indices=True)
            out = op(a.values[ia], b.values[ib])
            return Series(timestamps=common, values=np.asarray(out, dtype=float))
        if isinstance(a, Series):
            return Series(timestamps=a.timestamps, values=np.asarray(op(a.values, b), dtype=float))
        if isinstance(b, Series):
            return Series(timestamps=b.timestamps, values=np.asarray(op(a, b.values), dtype=float))
        return float(op(np.float64(a), np.float64(b)))


def _joinable(a: TagSet, b: TagSet) -> bool:
    return a.subset(b) or b.subset(a)


def union(op: Callable, left: ResultSet, right: ResultSet, unjoined_ok: bool) -> ResultSet:
    """Pair every left/right result whose groups nest and apply ``op``.

    The joined result carries the larger of the two groups. A result left
    without a partner is an error unless ``unjoined_ok`` is set, in which
    case it is dropped.
    """
    if not left or not right:
        return []
    out: ResultSet = []
    joined_right: set[int] = set()
    for a in left:
        matched = False
        for idx, b in enumerate(right):
            if not _joinable(a.group, b.group):
                continue
            matched = True
            joined_right.add(idx)
            group = b.group if a.group.subset(b.group) else a.group
            out.append(Result(value=_apply_values(op, a.value, b.value), group=group))
        if not matched and not unjoined_ok:
            raise ExecutionError(f"unjoined group {a.group}")
    if not unjoined_ok:
        for idx, b in enumerate(right):
            if idx not in joined_right:
                raise ExecutionError(f"unjoined group {b.group}")
    return out


def _binary(op: Callable, left: Operand, right: Operand, state: EvalState) -> Operand:
    if isinstance(left, list) and isinstance(right, list):
        return union(op, left, right, state.unjoined_ok)
    if isinstance(left, list):
        return [Result(value=_apply_values(op, r.value, right), group=r.group) for r in left]
    if isinstance(right, list):
        return [Result(value=_apply_values(op, left, r.value), group=r.group) for r in right]
    return _apply_values(op, left, right)


def _unary(node: ast.UnaryOp, operand: Operand) -> Operand:
    if isinstance(node.op, ast.USub):
        fn = np.negative
    elif isinstance(node.op, ast.UAdd):
        fn = np.positive
    elif isinstance(node.op, ast.Not):
        def fn(v):
            return np.equal(v, 0)
    else:
        raise ExecutionError(f"unsupported unary operator {type(node.op).__name__}")

    def _one(v: Value) -> Value:
        if isinstance(v, Series):
            return Series(timestamps=v.timestamps, values=np.asarray(fn(v.values), dtype=float))
        return float(fn(np.float64(v)))

    if isinstance(operand, list):
        return [Result(value=_one(r.value), group=r.group) for r in operand]
    return _one(operand)


async def evaluate(node: ast.AST, state: EvalState, funcs: Mapping[str, Any]) -> Operand:
    if isinstance(node, ast.Expression):
        return await evaluate(node.body, state, funcs)
    if isinstance(node, ast.Constant):
        if isinstance(node.value, str):
            return node.value
        return float(node.value)
    if isinstance(node, ast.Call):
        name = node.func.id  # type: ignore[attr-defined]
        func = funcs[name]
        args: List[Operand] = []
        for expected, arg in zip(func.args, node.args):
            value = await evaluate(arg, state, funcs)
            # scalars passed where a number set is expected become one ungrouped result
            if expected.is_set and isinstance(value, float):
                value = [Result(value=value)]
            args.append(value)
        log.debug("evaluate call=%s args=%d", name, len(args))
        return await func.impl(state, *args)
    if isinstance(node, ast.UnaryOp):
        return _unary(node, await evaluate(node.operand, state, funcs))
    if isinstance(node, ast.BinOp):
        left = await evaluate(node.left, state, funcs)
        right = await evaluate(node.right, state, funcs)
        return _binary(_OPS[type(node.op)], left, right, state)
    if isinstance(node, ast.Compare):
        left = await evaluate(node.left, state, funcs)
        right = await evaluate(node.comparators[0], state, funcs)
        return _binary(_OPS[type(node.ops[0])], left, right, state)
    if isinstance(node, ast.BoolOp):
        op = _OPS[type(node.op)]
        acc = await evaluate(node.values[0], state, funcs)
        for value in node.values[1:]:
            acc = _binary(op, acc, await evaluate(value, state, funcs), state)
        return acc
    raise ExecutionError(f"unsupported syntax: {type(node).__name__}")


def as_result_set(value: Operand) -> ResultSet:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        raise ExecutionError("expression returned a string")
    return [Result(value=float(value))]


async def run(
    root: ast.AST,
    funcs: Mapping[str, Any],
    state: EvalState,
) -> ResultSet:
    return as_result_set(await evaluate(root, state, funcs))
