"""
Expression compilation: parse expression text, check it against a function set and infer its return type.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import ast
import logging
from datetime import datetime
from typing import Any, Optional

from engine.enums import ReturnType
from engine.exceptions import ExpressionError
from engine.expr.execute import EvalState, Squelched, never_squelched, run
from engine.expr.funcs import FuncSet
from engine.results import ResultSet

log = logging.getLogger(__name__)

_BIN_OPS = (ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Mod, ast.Pow)
_CMP_OPS = (ast.Gt, ast.GtE, ast.Lt, ast.LtE, ast.Eq, ast.NotEq)


def _combine(node: ast.AST, left: ReturnType, right: ReturnType) -> ReturnType:
    if ReturnType.string in (left, right):
        raise ExpressionError(f"operator {type(node).__name__} does not accept strings")
    if ReturnType.series in (left, right):
        return ReturnType.series
    if ReturnType.number in (left, right):
        return ReturnType.number
    return ReturnType.scalar


def _check(node: ast.AST, funcs: FuncSet) -> ReturnType:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, str):
            return ReturnType.string
        if isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
            return ReturnType.scalar
        raise ExpressionError(f"unsupported literal {node.value!r}")

    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name):
            raise ExpressionError("only plain function calls are supported")
        name = node.func.id
        func = funcs.get(name)
        if func is None:
            raise ExpressionError(f"unknown function {name}")
        if node.keywords:
            raise ExpressionError(f"{name}: keyword arguments are not supported")
        if len(node.args) != len(func.args):
            raise ExpressionError(f"{name}: expected {len(func.args)} arguments, got {len(node.args)}")
        for idx, (expected, arg) in enumerate(zip(func.args, node.args), start=1):
            actual = _check(arg, funcs)
            if not expected.accepts(actual):
                raise ExpressionError(
                    f"{name}: argument {idx}: expected {expected.value}, got {actual.value}"
                )
        return func.returns

    if isinstance(node, ast.UnaryOp):
        operand = _check(node.operand, funcs)
        if operand is ReturnType.string:
            raise ExpressionError("unary operators do not accept strings")
        return operand

    if isinstance(node, ast.BinOp):
        if not isinstance(node.op, _BIN_OPS):
            raise ExpressionError(f"unsupported operator {type(node.op).__name__}")
        return _combine(node, _check(node.left, funcs), _check(node.right, funcs))

    if isinstance(node, ast.Compare):
        if len(node.ops) != 1 or not isinstance(node.ops[0], _CMP_OPS):
            raise ExpressionError("chained or unsupported comparison")
        return _combine(node, _check(node.left, funcs), _check(node.comparators[0], funcs))

    if isinstance(node, ast.BoolOp):
        kind = _check(node.values[0], funcs)
        for value in node.values[1:]:
            kind = _combine(node, kind, _check(value, funcs))
        return kind

    raise ExpressionError(f"unsupported syntax: {type(node).__name__}")


class Expression:
    """A compiled, type-checked expression bound to the function set it was compiled with."""

    def __init__(self, text: str, root: ast.Expression, funcs: FuncSet, return_type: ReturnType):
        self.text = text
        self.root = root
        self.funcs = funcs
        self.return_type = return_type

    def __str__(self) -> str:
        return ast.unparse(self.root)

    def __repr__(self) -> str:
        return f"Expression({self.text!r}, returns={self.return_type.value})"

    async def execute(
        self,
        backends: Any,
        search: Any,
        reference_time: datetime,
        autods: int = 0,
        unjoined_ok: bool = False,
        squelched: Optional[Squelched] = None,
    ) -> ResultSet:
        state = EvalState(
            metrics=getattr(backends, "metrics", None),
            search=search,
            reference_time=reference_time,
            autods=autods,
            unjoined_ok=unjoined_ok,
            squelched=squelched or never_squelched,
        )
        return await run(self.root, self.funcs, state)


def compile_expression(text: str, funcs: FuncSet) -> Expression:
    try:
        root = ast.parse(str(text).strip(), mode="eval")
    except SyntaxError as exc:
        raise ExpressionError(f"syntax error: {exc.msg}") from exc
    return_type = _check(root.body, funcs)
    if return_type is ReturnType.string:
        raise ExpressionError("expression must return a number, scalar or series")
    log.debug("compiled expression %r returns %s", text, return_type.value)
    return Expression(text, root, funcs, return_type)
