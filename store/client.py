"""
Client code for Redis hash access, with an in-memory fallback if Redis is unavailable.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Optional

from config import REDIS_URL, settings

log = logging.getLogger(__name__)

_redis_client: Any = None
_fallback: dict[str, dict[str, str]] = {}
_using_fallback = False
_init_lock = asyncio.Lock()
_retry_after_monotonic: float = 0.0

_OP_TIMEOUT_SECONDS = 0.5


async def get_redis() -> Any:
    global _redis_client, _using_fallback, _retry_after_monotonic

    if _redis_client is not None:
        return _redis_client
    if time.monotonic() < _retry_after_monotonic:
        _using_fallback = True
        return None

    async with _init_lock:
        if _redis_client is not None:
            return _redis_client
        try:
            import redis.asyncio as aioredis

            client = aioredis.from_url(
                REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=_OP_TIMEOUT_SECONDS,
                socket_timeout=_OP_TIMEOUT_SECONDS,
            )
            await asyncio.wait_for(client.ping(), timeout=_OP_TIMEOUT_SECONDS)
        except Exception as exc:
            _retry_after_monotonic = time.monotonic() + max(0.0, settings.store_redis_retry_cooldown_seconds)
            if not _using_fallback:
                log.warning("Redis unavailable (%s); metadata kept in memory", exc)
                _using_fallback = True
            return None
        _redis_client = client
        _using_fallback = False
        log.info("Redis connected: %s", REDIS_URL)
        return _redis_client


def _fallback_hash(key: str) -> Optional[dict[str, str]]:
    if key in _fallback:
        return _fallback[key]
    if sum(len(h) for h in _fallback.values()) >= settings.store_fallback_max_items:
        return None
    return _fallback.setdefault(key, {})


async def redis_hgetall(key: str) -> Dict[str, str]:
    client = await get_redis()
    if client is None:
        return dict(_fallback.get(key, {}))
    try:
        return await asyncio.wait_for(client.hgetall(key), timeout=_OP_TIMEOUT_SECONDS)
    except Exception as exc:
        log.debug("Redis HGETALL error %s: %s", key, exc)
        return dict(_fallback.get(key, {}))


async def redis_hset(key: str, field: str, value: str, ttl: Optional[int] = None) -> None:
    client = await get_redis()
    if client is not None:
        try:
            pipe = client.pipeline()
            pipe.hset(key, field, value)
            if ttl:
                pipe.expire(key, ttl)
            await asyncio.wait_for(pipe.execute(), timeout=_OP_TIMEOUT_SECONDS)
            return
        except Exception as exc:
            log.debug("Redis HSET error %s: %s", key, exc)
    bucket = _fallback_hash(key)
    if bucket is not None:
        bucket[field] = value


async def redis_delete(key: str) -> None:
    client = await get_redis()
    _fallback.pop(key, None)
    if client is None:
        return
    try:
        await asyncio.wait_for(client.delete(key), timeout=_OP_TIMEOUT_SECONDS)
    except Exception as exc:
        log.debug("Redis DEL error %s: %s", key, exc)
