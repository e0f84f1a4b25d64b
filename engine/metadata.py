"""
Metadata resolution for templates: all entries of a metric, or one named attribute.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, List, Union

from engine.tags import TagSet

MetadataSource = Callable[[str, TagSet], Awaitable[List[Any]]]


async def get_meta(source: MetadataSource, metric: str, name: str, group: Union[str, TagSet]) -> Any:
    tags = TagSet.coerce(group)
    entries = await source(metric, tags)
    if not name:
        return entries
    for entry in entries:
        if entry.name == name:
            return entry.value
    return None
