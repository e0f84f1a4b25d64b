"""
Result values produced by expression evaluation: numbers or time series annotated with the tag group they belong to.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np

from engine.tags import EMPTY, TagSet


@dataclass(frozen=True, eq=False)
class Series:
    timestamps: np.ndarray
    values: np.ndarray

    @classmethod
    def from_pairs(cls, pairs: Iterable[Sequence]) -> Series:
        ts: list[float] = []
        vals: list[float] = []
        for p in pairs:
            try:
                t, v = float(p[0]), float(p[1])
            except (ValueError, TypeError, IndexError):
                continue
            ts.append(t)
            vals.append(v)
        order = np.argsort(np.asarray(ts, dtype=float), kind="stable")
        return cls(
            timestamps=np.asarray(ts, dtype=float)[order],
            values=np.asarray(vals, dtype=float)[order],
        )

    def __len__(self) -> int:
        return int(self.values.size)

    def pairs(self) -> List[Tuple[float, float]]:
        return list(zip(self.timestamps.tolist(), self.values.tolist()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Series):
            return NotImplemented
        return np.array_equal(self.timestamps, other.timestamps) and np.array_equal(
            self.values, other.values, equal_nan=True
        )

    __hash__ = None  # type: ignore[assignment]


Value = Union[float, Series]


@dataclass(frozen=True)
class Result:
    value: Value
    group: TagSet = field(default=EMPTY)

    @property
    def is_series(self) -> bool:
        return isinstance(self.value, Series)

    @property
    def is_nan(self) -> bool:
        return isinstance(self.value, float) and math.isnan(self.value)


ResultSet = List[Result]


def missing() -> Result:
    """Placeholder for a correlation cell that found no partner.

    Carries NaN so that templates reading ``.value`` never hit a missing
    reference; the group is empty.
    """
    return Result(value=math.nan, group=EMPTY)
