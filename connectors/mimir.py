"""
Mimir Connector

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Any, Dict, Optional

from config import settings
from datasources.base import MetricsConnector
from datasources.exceptions import DataSourceUnavailable, QueryTimeout
from datasources.helpers import fetch_json
from datasources.retry import retry


class MimirConnector(MetricsConnector):
    api_prefix = "/prometheus"

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
        step: str,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{self.api_prefix}/api/v1/query_range"
        params: Dict[str, Any] = {"query": query, "start": start, "end": end, "step": step}
        return await fetch_json(
            url,
            params=params,
            headers=self._headers(),
            timeout=self.timeout,
            invalid_msg="Mimir query failed",
            timeout_msg="Mimir query timed out",
            unavailable_msg="Cannot reach Mimir at",
        )
