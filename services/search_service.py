"""
Log search service backing template log queries and the lc() expression function.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Tuple

from config import settings
from datasources.base import LogsConnector
from engine.durations import window
from engine.exceptions import InputError, SearchError

log = logging.getLogger(__name__)


def _quote(value: str) -> str:
    return '"' + str(value).replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_selector(index_root: str, keystring: str) -> str:
    """Stream selector for ``index_root`` narrowed by ``k:v,k:v`` pairs.

    An index root wrapped in braces is used as a selector as is; a bare value
    is matched against the configured index label.
    """
    matchers: List[str] = []
    root = str(index_root or "").strip()
    if root.startswith("{") and root.endswith("}"):
        inner = root[1:-1].strip()
        if inner:
            matchers.append(inner)
    elif root:
        matchers.append(f"{settings.search_index_label}={_quote(root)}")

    for part in str(keystring or "").split(","):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition(":")
        if not sep or not key.strip():
            raise InputError(f"invalid key string element {part!r}, expected key:value")
        matchers.append(f"{key.strip()}={_quote(value.strip())}")

    if not matchers:
        raise InputError("log search needs an index root or a key string")
    return "{" + ",".join(matchers) + "}"


def build_query(index_root: str, keystring: str, filter: str) -> str:
    query = build_selector(index_root, keystring)
    text = str(filter or "").strip()
    if not text:
        return query
    if text.startswith("|"):
        return f"{query} {text}"
    return f"{query} |= {_quote(text)}"


def _entries(payload: Dict[str, Any]) -> List[Tuple[int, str]]:
    rows = (payload.get("data") or {}).get("result") or []
    out: List[Tuple[int, str]] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        for value in row.get("values") or []:
            try:
                out.append((int(value[0]), str(value[1])))
            except (TypeError, ValueError, IndexError):
                log.warning("log search: skipping malformed entry %r", value)
    out.sort(key=lambda item: item[0], reverse=True)
    return out


class LogSearch:
    def __init__(self, logs: LogsConnector):
        self.logs = logs

    async def query(
        self,
        now: datetime,
        index_root: str,
        keystring: str,
        filter: str,
        sduration: str,
        eduration: str,
        size: int,
    ) -> List[Any]:
        """Newest-first documents matching the query, one per JSON log line."""
        query = build_query(index_root, keystring, filter)
        try:
            begin, end = window(now, sduration, eduration)
        except ValueError as exc:
            raise InputError(str(exc)) from exc
        limit = size if size and size > 0 else settings.search_default_size
        limit = min(limit, settings.search_max_size)

        payload = await self.logs.query_range(
            query=query,
            start=int(begin.timestamp()),
            end=int(end.timestamp()),
            limit=limit,
        )
        docs: List[Any] = []
        for idx, (_, line) in enumerate(_entries(payload)[:limit]):
            try:
                docs.append(json.loads(line))
            except ValueError as exc:
                raise SearchError(f"document {idx}: {exc}") from exc
        log.debug("log search %s returned %d documents", query, len(docs))
        return docs

    async def query_metric(self, query: str, begin: datetime, end: datetime, step: str) -> Dict[str, Any]:
        return await self.logs.query_range(
            query=query,
            start=int(begin.timestamp()),
            end=int(end.timestamp()),
            step=step,
            direction="forward",
        )
