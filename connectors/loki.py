"""
Loki Connector

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Any, Dict, Optional

from config import settings
from datasources.base import LogsConnector
from datasources.exceptions import DataSourceUnavailable, QueryTimeout
from datasources.helpers import fetch_json
from datasources.retry import retry


class LokiConnector(LogsConnector):

    def __init__(
        self,
        base_url: str,
        tenant_id: str,
        timeout: int = settings.connector_timeout,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(tenant_id, base_url, timeout, headers)

    @retry(attempts=3, delay=0.5, backoff=2.0, exceptions=(DataSourceUnavailable, QueryTimeout))
    async def query_range(
        self,
        query: str,
        start: int,
        end: int,
        limit: Optional[int] = None,
        step: Optional[str] = None,
        direction: str = "backward",
    ) -> Dict[str, Any]:
        # Loki takes nanosecond epochs; callers pass seconds
        url = f"{self.base_url}/loki/api/v1/query_range"
        params: Dict[str, Any] = {
            "query": query,
            "start": int(start) * 1_000_000_000,
            "end": int(end) * 1_000_000_000,
            "direction": direction,
        }
        if limit is not None:
            params["limit"] = limit
        if step is not None:
            params["step"] = step
        return await fetch_json(
            url,
            params=params,
            headers=self._headers(),
            timeout=self.timeout,
            invalid_msg="Loki query failed",
            timeout_msg="Loki query timed out",
            unavailable_msg="Cannot reach Loki at",
        )
