"""
Lookup tables: per-tag-group values keyed by name, resolved at render time.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import fnmatch
import logging
from typing import Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

from engine.exceptions import LookupMiss, UnknownLookupTable
from engine.tags import TagSet

log = logging.getLogger(__name__)


class LookupEntry(BaseModel):
    # tag key -> glob pattern, e.g. {"host": "web-*"}
    tags: Dict[str, str] = Field(default_factory=dict)
    values: Dict[str, str] = Field(default_factory=dict)

    def matches(self, group: Mapping[str, str]) -> bool:
        """True when every pattern matches the group's value for its key.

        A key absent from ``group`` never matches, not even ``*``.
        """
        for key, pattern in self.tags.items():
            value = group.get(key)
            if value is None or not fnmatch.fnmatchcase(value, pattern):
                return False
        return True


class LookupTable(BaseModel):
    name: str
    entries: List[LookupEntry] = Field(default_factory=list)

    def get(self, key: str, group: Mapping[str, str]) -> Optional[str]:
        """First entry that matches ``group`` and defines ``key`` wins."""
        for entry in self.entries:
            if key in entry.values and entry.matches(group):
                return entry.values[key]
        return None


def lookup(
    tables: Mapping[str, LookupTable],
    table: str,
    key: str,
    group: Union[str, TagSet],
) -> str:
    tags = TagSet.coerce(group)
    found = tables.get(table)
    if found is None:
        raise UnknownLookupTable(f"unknown lookup table {table}")
    value = found.get(key, tags)
    if value is None:
        log.debug("lookup miss table=%s key=%s group=%s", table, key, tags)
        raise LookupMiss(f"no entry for key {key} in table {table} for tagset {tags}")
    return value
