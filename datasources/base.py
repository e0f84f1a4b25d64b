"""
Base connectors for the metrics and log backends queried during a render pass.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class BaseConnector(ABC):
    def __init__(self, tenant_id: str, base_url: str, timeout: int = 30, headers: Optional[Dict[str, str]] = None):
        self.tenant_id = tenant_id
        self.base_url = str(base_url).rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}

    def _headers(self) -> Dict[str, str]:
        """Tenant-scoped header set applied to every outbound request."""
        return {**self.headers, "X-Scope-OrgID": self.tenant_id}


class MetricsConnector(BaseConnector):
    @abstractmethod
    async def query_range(
        self,
        query: str,
        start: int,
        end: int,
        step: str,
    ) -> Dict[str, Any]: ...


class LogsConnector(BaseConnector):
    @abstractmethod
    async def query_range(
        self,
        query: str,
        start: int,
        end: int,
        limit: Optional[int] = None,
        step: Optional[str] = None,
        direction: str = "backward",
    ) -> Dict[str, Any]: ...
