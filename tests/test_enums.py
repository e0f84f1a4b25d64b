"""
Test cases for the expression return types and alert statuses.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.enums import ReturnType, Status


def test_number_accepts_scalar():
    assert ReturnType.number.accepts(ReturnType.scalar)
    assert ReturnType.number.accepts(ReturnType.number)
    assert not ReturnType.series.accepts(ReturnType.number)
    assert not ReturnType.scalar.accepts(ReturnType.number)


def test_set_types():
    assert {t for t in ReturnType if t.is_set} == {ReturnType.number, ReturnType.series}


def test_status_values():
    assert [s.value for s in Status] == ["normal", "warning", "critical", "unknown"]
