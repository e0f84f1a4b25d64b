"""
Factory for creating data source connectors based on configuration.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from config import LOGS_BACKEND_LOKI, METRICS_BACKEND_MIMIR, METRICS_BACKEND_VICTORIAMETRICS
from connectors.loki import LokiConnector
from connectors.mimir import MimirConnector
from connectors.victoria import VictoriaMetricsConnector
from datasources.exceptions import UnsupportedBackend


class DataSourceFactory:

    @staticmethod
    def create_logs(config, tenant_id):
        if config.logs_backend == LOGS_BACKEND_LOKI:
            return LokiConnector(config.loki_url, tenant_id, timeout=config.connector_timeout)
        raise UnsupportedBackend(f"Unsupported logs backend: {config.logs_backend!r}")

    @staticmethod
    def create_metrics(config, tenant_id):
        if config.metrics_backend == METRICS_BACKEND_MIMIR:
            return MimirConnector(config.mimir_url, tenant_id, timeout=config.connector_timeout)
        if config.metrics_backend == METRICS_BACKEND_VICTORIAMETRICS:
            if not config.victoriametrics_url:
                raise UnsupportedBackend("VictoriaMetrics backend selected without a URL")
            return VictoriaMetricsConnector(config.victoriametrics_url, tenant_id, timeout=config.connector_timeout)
        raise UnsupportedBackend(f"Unsupported metrics backend: {config.metrics_backend!r}")
