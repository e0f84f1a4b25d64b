"""
Metric metadata store: named attributes recorded per metric and tag set.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping

from config import METADATA_TTL
from engine.tags import TagSet
from store import keys
from store.client import redis_delete, redis_hgetall, redis_hset

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetadataEntry:
    metric: str
    tags: TagSet
    name: str
    value: Any


async def put(metric: str, tags: Mapping[str, str], name: str, value: Any) -> None:
    tagset = TagSet.coerce(tags)
    await redis_hset(
        keys.metadata(metric),
        keys.metadata_field(tagset, name),
        json.dumps(value),
        ttl=METADATA_TTL,
    )


async def load(metric: str) -> List[MetadataEntry]:
    raw = await redis_hgetall(keys.metadata(metric))
    entries: List[MetadataEntry] = []
    for field in sorted(raw):
        try:
            pairs, name = json.loads(field)
            value = json.loads(raw[field])
            tagset = TagSet(dict(pairs))
        except (TypeError, ValueError) as exc:
            log.warning("metadata %s: skipping unreadable field %r: %s", metric, field, exc)
            continue
        entries.append(MetadataEntry(metric=metric, tags=tagset, name=name, value=value))
    return entries


async def get_metadata(metric: str, group: TagSet) -> List[MetadataEntry]:
    """Entries of ``metric`` recorded for a tag set contained in ``group``."""
    return [entry for entry in await load(metric) if entry.tags.subset(group)]


async def clear(metric: str) -> None:
    await redis_delete(keys.metadata(metric))
