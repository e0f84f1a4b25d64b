"""
Provider bundling the metrics and log connectors of one tenant; this is the backend handle a run history carries.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Dict

from .data_config import DataSourceSettings
from .factory import DataSourceFactory


class DataSourceProvider:
    def __init__(self, tenant_id: str, settings: DataSourceSettings):
        self.tenant_id = tenant_id
        self.settings = settings
        self.logs = DataSourceFactory.create_logs(settings, tenant_id)
        self.metrics = DataSourceFactory.create_metrics(settings, tenant_id)


_providers: Dict[str, DataSourceProvider] = {}


def get_provider(tenant_id: str) -> DataSourceProvider:
    provider = _providers.get(tenant_id)
    if provider is None:
        provider = DataSourceProvider(tenant_id=tenant_id, settings=DataSourceSettings())
        _providers[tenant_id] = provider
    return provider
