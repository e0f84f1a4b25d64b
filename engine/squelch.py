"""
Squelch rules: tag patterns that suppress matching alert groups from evaluation results.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import fnmatch
from typing import Dict, Iterable, List, Mapping

from engine.expr.execute import Squelched
from engine.tags import TagSet

Squelch = Dict[str, str]


def rule_matches(rule: Mapping[str, str], group: Mapping[str, str]) -> bool:
    if not rule:
        return False
    for key, pattern in rule.items():
        value = group.get(key)
        if value is None or not fnmatch.fnmatchcase(value, pattern):
            return False
    return True


def squelch_predicate(*rule_sets: Iterable[Squelch]) -> Squelched:
    rules: List[Squelch] = [dict(rule) for rules in rule_sets for rule in rules]

    def squelched(group: TagSet) -> bool:
        return any(rule_matches(rule, group) for rule in rules)

    return squelched
