"""
Enumerations for expression return types and alert status.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from enum import Enum


class ReturnType(str, Enum):
    number = "number"
    series = "series"
    scalar = "scalar"
    string = "string"

    def accepts(self, other: ReturnType) -> bool:
        # a literal scalar is broadcast wherever a number set is expected
        if self is other:
            return True
        return self is ReturnType.number and other is ReturnType.scalar

    @property
    def is_set(self) -> bool:
        return self in (ReturnType.number, ReturnType.series)


class Status(str, Enum):
    normal = "normal"
    warning = "warning"
    critical = "critical"
    unknown = "unknown"
