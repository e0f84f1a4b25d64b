"""
Left-join correlation: align N result sets into a matrix anchored on the rows of the first set.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from engine.exceptions import JoinArgumentError
from engine.results import Result, ResultSet, missing

log = logging.getLogger(__name__)

Matrix = List[List[Result]]


def check_arity(count: int) -> None:
    if count < 2:
        raise JoinArgumentError(f"need at least two expressions, got {count}")


def left_join(result_sets: Sequence[ResultSet]) -> Matrix:
    """Best-effort join of ``result_sets`` on the first set's tag groups.

    Each row starts with one element of the first set. Column ``c`` holds the
    first element of ``result_sets[c]`` whose group is a superset of the
    anchor's group, or a NaN placeholder when there is none. A candidate may
    fill several rows or none; no scoring beyond iteration order.
    """
    check_arity(len(result_sets))
    anchors, others = result_sets[0], result_sets[1:]
    matrix: Matrix = []
    for anchor in anchors:
        row: List[Result] = [anchor]
        for candidates in others:
            cell = next((r for r in candidates if anchor.group.subset(r.group)), None)
            row.append(cell if cell is not None else missing())
        matrix.append(row)
    log.debug("left_join rows=%d cols=%d", len(matrix), len(result_sets))
    return matrix
