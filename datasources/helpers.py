"""
Shared HTTP helpers for data source connectors and template passthrough calls.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from datasources.exceptions import DataSourceUnavailable, InvalidQuery, QueryTimeout

log = logging.getLogger(__name__)


async def fetch_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = 30,
    invalid_msg: str = "query failed",
    timeout_msg: str = "query timed out",
    unavailable_msg: str = "Cannot reach data source at",
) -> Dict[str, Any]:
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            return resp.json()
    except httpx.HTTPStatusError as e:
        raise InvalidQuery(f"{invalid_msg} [{e.response.status_code}]: {e.response.text}") from e
    except httpx.TimeoutException as e:
        raise QueryTimeout(timeout_msg) from e
    except httpx.RequestError as e:
        raise DataSourceUnavailable(f"{unavailable_msg} {url}") from e


async def passthrough(
    method: str,
    url: str,
    content: Optional[str] = None,
    content_type: Optional[str] = None,
    timeout: float = 10.0,
) -> str:
    """Perform a request on behalf of a template and return text, never raising.

    Responses with status >= 300 become ``"<url>: returned <status>"``;
    transport failures become their error text.
    """
    headers = {"Content-Type": content_type} if content_type else None
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.request(method, url, content=content, headers=headers)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        log.debug("passthrough %s %s failed: %s", method, url, e)
        return str(e) or type(e).__name__
    if resp.status_code >= 300:
        return f"{url}: returned {resp.status_code} {resp.reason_phrase}".rstrip()
    return resp.text
