"""
Execution dispatch: run a resolved expression through the evaluation engine for one render pass.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Optional

from config import SCALAR_AUTODS
from engine.exceptions import ExecutionError
from engine.expr.execute import Squelched
from engine.resolver import ResolvedExpression
from engine.results import ResultSet

log = logging.getLogger(__name__)


async def execute(
    resolved: ResolvedExpression,
    backends: Any,
    reference_time: datetime,
    unjoined_ok: bool = False,
    search: Any = None,
    squelched: Optional[Squelched] = None,
    autods: int = SCALAR_AUTODS,
) -> ResultSet:
    """Evaluate ``resolved`` at ``reference_time``.

    ``autods`` is the downsample hint: 0 for scalar use, the graph bucket
    count when the result feeds a graph. Failures are wrapped with the
    original input and never retried here.
    """
    started = time.monotonic()
    try:
        results = await resolved.expression.execute(
            backends,
            search,
            reference_time,
            autods=autods,
            unjoined_ok=unjoined_ok,
            squelched=squelched,
        )
    except Exception as exc:
        log.debug("execute %s failed: %s", resolved.source, exc)
        raise ExecutionError(f"{resolved.source}: {exc}") from exc
    log.debug(
        "execute %s results=%d autods=%d elapsed=%.3fs",
        resolved.display, len(results), autods, time.monotonic() - started,
    )
    return results
