"""
Built-in expression function set: backend queries and series reductions.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Mapping, Tuple

import numpy as np

from config import settings
from engine.durations import window
from engine.enums import ReturnType
from engine.exceptions import ExecutionError
from engine.expr.execute import EvalState, Squelched
from engine.results import Result, ResultSet, Series
from engine.tags import TagSet

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Func:
    args: Tuple[ReturnType, ...]
    returns: ReturnType
    impl: Callable[..., Awaitable[Any]]


FuncSet = Mapping[str, Func]


def step_for(begin: datetime, end: datetime, autods: int) -> str:
    if autods > 0:
        span = max(0.0, (end - begin).total_seconds())
        seconds = max(settings.query_min_step_seconds, math.ceil(span / autods))
    else:
        seconds = settings.query_step_seconds
    return f"{int(seconds)}s"


def results_from_matrix(payload: Dict[str, Any], squelched: Squelched) -> ResultSet:
    """Convert a Prometheus-style ``query_range`` response into series results."""
    data = payload.get("data", {}) if isinstance(payload, dict) else {}
    rows = data.get("result", [])
    if not isinstance(rows, list):
        log.warning("results_from_matrix: 'data.result' is not a list: %s", type(rows).__name__)
        return []

    out: ResultSet = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        labels = {k: v for k, v in (row.get("metric") or {}).items() if k != "__name__"}
        group = TagSet(labels)
        if squelched(group):
            log.debug("results_from_matrix: squelched group %s", group)
            continue
        if "values" in row:
            series = Series.from_pairs(row.get("values") or [])
        else:
            series = Series.from_pairs([row["value"]] if row.get("value") else [])
        out.append(Result(value=series, group=group))
    return out


async def _q(state: EvalState, query: str, start: str, end: str) -> ResultSet:
    if state.metrics is None:
        raise ExecutionError("q: no metrics backend configured")
    try:
        begin, finish = window(state.reference_time, start, end)
    except ValueError as exc:
        raise ExecutionError(f"q: {exc}") from exc
    payload = await state.metrics.query_range(
        query=query,
        start=int(begin.timestamp()),
        end=int(finish.timestamp()),
        step=step_for(begin, finish, state.autods),
    )
    return results_from_matrix(payload, state.squelched)


async def _lc(state: EvalState, query: str, start: str, end: str) -> ResultSet:
    if state.search is None:
        raise ExecutionError("lc: no log search backend configured")
    try:
        begin, finish = window(state.reference_time, start, end)
    except ValueError as exc:
        raise ExecutionError(f"lc: {exc}") from exc
    payload = await state.search.query_metric(
        query, begin, finish, step_for(begin, finish, state.autods)
    )
    return results_from_matrix(payload, state.squelched)


def _reduction(fn: Callable[[np.ndarray], float]) -> Callable[..., Awaitable[ResultSet]]:
    async def impl(_state: EvalState, results: ResultSet) -> ResultSet:
        out: ResultSet = []
        for r in results:
            values = r.value.values if isinstance(r.value, Series) else np.asarray([r.value], dtype=float)
            out.append(Result(value=float(fn(values)) if values.size else math.nan, group=r.group))
        return out

    return impl


def _dev(values: np.ndarray) -> float:
    if values.size < 2:
        return 0.0
    return float(np.std(values, ddof=1))


async def _percentile(_state: EvalState, results: ResultSet, p: float) -> ResultSet:
    if not 0.0 <= p <= 1.0:
        raise ExecutionError(f"percentile: p must be within [0, 1], got {p}")
    out: ResultSet = []
    for r in results:
        values = r.value.values
        out.append(Result(
            value=float(np.percentile(values, p * 100.0)) if values.size else math.nan,
            group=r.group,
        ))
    return out


async def _abs(_state: EvalState, results: ResultSet) -> ResultSet:
    return [Result(value=abs(float(r.value)), group=r.group) for r in results]


async def _nv(_state: EvalState, results: ResultSet, fallback: float) -> ResultSet:
    if results:
        return results
    return [Result(value=float(fallback))]


_S = ReturnType.series
_N = ReturnType.number
_SC = ReturnType.scalar
_STR = ReturnType.string

_BUILTINS: Dict[str, Func] = {
    "q": Func(args=(_STR, _STR, _STR), returns=_S, impl=_q),
    "lc": Func(args=(_STR, _STR, _STR), returns=_S, impl=_lc),
    "avg": Func(args=(_S,), returns=_N, impl=_reduction(np.mean)),
    "min": Func(args=(_S,), returns=_N, impl=_reduction(np.min)),
    "max": Func(args=(_S,), returns=_N, impl=_reduction(np.max)),
    "sum": Func(args=(_S,), returns=_N, impl=_reduction(np.sum)),
    "median": Func(args=(_S,), returns=_N, impl=_reduction(np.median)),
    "dev": Func(args=(_S,), returns=_N, impl=_reduction(_dev)),
    "first": Func(args=(_S,), returns=_N, impl=_reduction(lambda v: v[0])),
    "last": Func(args=(_S,), returns=_N, impl=_reduction(lambda v: v[-1])),
    "len": Func(args=(_S,), returns=_N, impl=_reduction(lambda v: v.size)),
    "percentile": Func(args=(_S, _SC), returns=_N, impl=_percentile),
    "abs": Func(args=(_N,), returns=_N, impl=_abs),
    "nv": Func(args=(_N, _SC), returns=_N, impl=_nv),
}


def builtin_funcs() -> Dict[str, Func]:
    return dict(_BUILTINS)
