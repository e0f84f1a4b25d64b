"""
Test cases for the metric metadata store and template metadata access.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import pytest

from engine.exceptions import TagParseError
from engine.metadata import get_meta
from engine.tags import TagSet
from store import keys, metadata
from store.client import _fallback


@pytest.mark.asyncio
async def test_put_and_load_round_trip():
    await metadata.put("os.cpu", {"host": "a"}, "desc", "CPU usage")
    await metadata.put("os.cpu", {}, "unit", "percent")
    entries = await metadata.load("os.cpu")
    assert {(e.tags, e.name, e.value) for e in entries} == {
        (TagSet(host="a"), "desc", "CPU usage"),
        (TagSet(), "unit", "percent"),
    }


@pytest.mark.asyncio
async def test_get_metadata_matches_contained_tag_sets():
    await metadata.put("os.cpu", {"host": "a"}, "desc", "A")
    await metadata.put("os.cpu", {"host": "b"}, "desc", "B")
    await metadata.put("os.cpu", {}, "unit", "percent")
    found = await metadata.get_metadata("os.cpu", TagSet(host="a", dc="1"))
    assert sorted((e.name, e.value) for e in found) == [("desc", "A"), ("unit", "percent")]


@pytest.mark.asyncio
async def test_unreadable_fields_are_skipped():
    await metadata.put("os.mem", {"host": "a"}, "desc", "ok")
    _fallback[keys.metadata("os.mem")]["garbage"] = "1"
    entries = await metadata.load("os.mem")
    assert [e.value for e in entries] == ["ok"]


@pytest.mark.asyncio
async def test_clear():
    await metadata.put("os.cpu", {}, "unit", "percent")
    await metadata.clear("os.cpu")
    assert await metadata.load("os.cpu") == []


@pytest.mark.asyncio
async def test_get_meta_all_or_named():
    await metadata.put("os.cpu", {"host": "a"}, "desc", "CPU usage")
    await metadata.put("os.cpu", {"host": "a"}, "unit", "percent")
    everything = await get_meta(metadata.get_metadata, "os.cpu", "", "host=a")
    assert len(everything) == 2
    assert await get_meta(metadata.get_metadata, "os.cpu", "unit", "host=a") == "percent"
    assert await get_meta(metadata.get_metadata, "os.cpu", "owner", "host=a") is None


@pytest.mark.asyncio
async def test_context_get_meta_uses_configured_source(make_context):
    seen = []

    async def source(metric, group):
        seen.append((metric, group))
        return []

    ctx = make_context(metadata=source)
    assert await ctx.get_meta("os.cpu", "", "host=z") == []
    assert seen == [("os.cpu", TagSet(host="z"))]


@pytest.mark.asyncio
async def test_tag_values_with_separators_round_trip():
    await metadata.put("disk.used", {"mount": "/a,b", "host": "x=y"}, "desc", "Disk usage")
    found = await metadata.get_metadata("disk.used", TagSet(mount="/a,b", host="x=y"))
    assert [(e.tags, e.name, e.value) for e in found] == [
        (TagSet(mount="/a,b", host="x=y"), "desc", "Disk usage"),
    ]
    assert await get_meta(metadata.get_metadata, "disk.used", "desc", TagSet(mount="/a,b", host="x=y")) == "Disk usage"


@pytest.mark.asyncio
async def test_malformed_group_fails_before_the_source_is_queried():
    seen = []

    async def source(metric, group):
        seen.append((metric, group))
        return []

    with pytest.raises(TagParseError):
        await get_meta(source, "os.cpu", "", "host")
    with pytest.raises(TagParseError):
        await get_meta(source, "os.cpu", "desc", "host=a,host=b")
    assert seen == []
