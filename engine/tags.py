"""
Tag groups: the dimensional coordinates (label sets) that identify a series, with subset comparison and tag-placeholder rewriting.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional, Union

from engine.exceptions import TagParseError

_BLOCK_RE = re.compile(r"\{([^{}]*)\}")
_MATCHER_RE = re.compile(
    r"""\s*([a-zA-Z_][a-zA-Z0-9_.]*)\s*(=~|!~|!=|=)\s*("(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|[^,"']*?)\s*(?:,|$)"""
)


class TagSet(Mapping):
    """Immutable mapping of tag key to tag value.

    Ordering is irrelevant: two sets with the same pairs compare and hash
    equal, and ``str()`` renders keys sorted, e.g. ``{dc=1,host=a}``.
    """

    __slots__ = ("_tags", "_hash")

    def __init__(self, tags: Optional[Union[Mapping, Dict[str, Any]]] = None, **kwargs: Any):
        merged: Dict[str, str] = {}
        for source in (tags or {}, kwargs):
            for key, value in source.items():
                merged[str(key)] = str(value)
        self._tags = merged
        self._hash: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> TagSet:
        """Parse ``k=v,k=v`` (optionally wrapped in braces) into a TagSet."""
        raw = str(text).strip()
        if raw.startswith("{") and raw.endswith("}"):
            raw = raw[1:-1].strip()
        if not raw:
            return cls()
        tags: Dict[str, str] = {}
        for part in raw.split(","):
            key, sep, value = part.partition("=")
            key, value = key.strip(), value.strip()
            if not sep or not key or not value:
                raise TagParseError(f"invalid tag {part.strip()!r} in {text!r}")
            if key in tags:
                raise TagParseError(f"duplicate tag {key!r} in {text!r}")
            tags[key] = value
        return cls(tags)

    @classmethod
    def coerce(cls, value: Union[str, Mapping, None]) -> TagSet:
        if isinstance(value, TagSet):
            return value
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, Mapping):
            return cls(value)
        raise TagParseError(f"expected tag string or tag set, got {type(value).__name__} ({value!r})")

    def __getitem__(self, key: str) -> str:
        return self._tags[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TagSet):
            return self._tags == other._tags
        if isinstance(other, Mapping):
            return self._tags == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._tags.items()))
        return self._hash

    def subset(self, other: Mapping) -> bool:
        """True when every pair of this set also appears in ``other``."""
        for key, value in self._tags.items():
            if other.get(key) != value:
                return False
        return True

    def merge(self, other: Mapping) -> TagSet:
        return TagSet(self._tags, **{str(k): v for k, v in other.items()})

    def tags(self) -> str:
        return ",".join(f"{k}={self._tags[k]}" for k in sorted(self._tags))

    def __str__(self) -> str:
        return "{" + self.tags() + "}"

    def __repr__(self) -> str:
        return f"TagSet({self.tags()!r})"


EMPTY = TagSet()


def _quote(value: str, like: str) -> str:
    if like.startswith("'"):
        return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"
    if like.startswith('"'):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return value


def _rewrite_block(body: str, group: Mapping) -> Optional[str]:
    if not body.strip():
        return None
    pos = 0
    parts: list[str] = []
    while pos < len(body):
        m = _MATCHER_RE.match(body, pos)
        if m is None or m.end() == pos:
            return None
        key, op, value = m.group(1), m.group(2), m.group(3)
        if key in group:
            parts.append(f"{key}={_quote(str(group[key]), value)}")
        else:
            parts.append(f"{key}{op}{value}")
        pos = m.end()
    return ",".join(parts)


def replace_tags(text: str, group: Mapping) -> str:
    """Substitute ``group`` values into every tag block of ``text``.

    Only keys already named in a block are rewritten, so
    ``up{host=~".*"}`` with ``host=web01`` becomes ``up{host="web01"}``.
    Blocks that are not tag lists are left untouched.
    """
    if not group:
        return text

    def _sub(match: re.Match) -> str:
        rewritten = _rewrite_block(match.group(1), group)
        if rewritten is None:
            return match.group(0)
        return "{" + rewritten + "}"

    return _BLOCK_RE.sub(_sub, text)
