"""
Constants and configuration for Certain Notify.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
from typing import Optional

from pydantic_settings import BaseSettings


REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
METADATA_TTL: int = int(os.getenv("METADATA_TTL", "2592000"))

LOGS_BACKEND_LOKI = "loki"
METRICS_BACKEND_MIMIR = "mimir"
METRICS_BACKEND_VICTORIAMETRICS = "victoriametrics"

NOTIFY_HOSTNAME = os.getenv("NOTIFY_HOSTNAME", "localhost:8070")

NOTIFY_LOGS_BACKEND = os.getenv("NOTIFY_LOGS_BACKEND", LOGS_BACKEND_LOKI).lower()
NOTIFY_LOGS_LOKI_URL = os.getenv("NOTIFY_LOGS_LOKI_URL", "http://loki:3100").rstrip("/")

NOTIFY_METRICS_BACKEND = os.getenv("NOTIFY_METRICS_BACKEND", METRICS_BACKEND_MIMIR).lower()
NOTIFY_METRICS_MIMIR_URL = os.getenv("NOTIFY_METRICS_MIMIR_URL", "http://mimir:9009").rstrip("/")
NOTIFY_METRICS_VICTORIAMETRICS_URL = os.getenv("NOTIFY_METRICS_VICTORIAMETRICS_URL", "").rstrip("/")

NOTIFY_CONNECTOR_TIMEOUT = int(os.getenv("NOTIFY_CONNECTOR_TIMEOUT", "30"))

# tenant defaults
NOTIFY_DEFAULT_TENANT_ID = os.getenv("NOTIFY_DEFAULT_TENANT_ID", "anonymous")

# graph rendering
GRAPH_WIDTH = 800
GRAPH_HEIGHT = 600
GRAPH_PNG_CONTENT_TYPE = "image/png"

# downsample hint handed to the evaluation engine; 0 means "no downsampling"
SCALAR_AUTODS = 0
GRAPH_AUTODS = 1000


class Settings(BaseSettings):
    hostname: str = NOTIFY_HOSTNAME

    logs_backend: str = NOTIFY_LOGS_BACKEND
    loki_url: str = NOTIFY_LOGS_LOKI_URL

    metrics_backend: str = NOTIFY_METRICS_BACKEND
    mimir_url: str = NOTIFY_METRICS_MIMIR_URL
    victoriametrics_url: Optional[str] = (
        NOTIFY_METRICS_VICTORIAMETRICS_URL or None
    )

    connector_timeout: int = NOTIFY_CONNECTOR_TIMEOUT

    # default tenant (used by the provider factory and tests)
    default_tenant_id: str = NOTIFY_DEFAULT_TENANT_ID

    # graph dimensions and the bucket count graphs are downsampled to
    graph_width: int = GRAPH_WIDTH
    graph_height: int = GRAPH_HEIGHT
    graph_autods: int = GRAPH_AUTODS

    # range query step used when no downsample hint is given
    query_step_seconds: int = 60
    # lower bound for steps derived from a downsample hint
    query_min_step_seconds: int = 1

    # log search defaults; a bare index root is matched against this stream label
    search_index_label: str = "job"
    search_default_size: int = 100
    search_max_size: int = 5000

    # passthrough HTTP helpers exposed to templates
    http_passthrough_timeout: float = 10.0

    # store
    store_redis_retry_cooldown_seconds: float = 10.0
    store_fallback_max_items: int = 10_000

    model_config = {
        "env_prefix": "NOTIFY_",
        "extra": "ignore",
    }


settings = Settings()
