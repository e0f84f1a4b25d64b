"""
Data source settings for the metrics and log backends.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings
from config import (
    LOGS_BACKEND_LOKI,
    METRICS_BACKEND_MIMIR,
    METRICS_BACKEND_VICTORIAMETRICS,
    NOTIFY_LOGS_BACKEND,
    NOTIFY_LOGS_LOKI_URL,
    NOTIFY_METRICS_BACKEND,
    NOTIFY_METRICS_MIMIR_URL,
    NOTIFY_METRICS_VICTORIAMETRICS_URL,
    NOTIFY_CONNECTOR_TIMEOUT,
)


class DataSourceSettings(BaseSettings):
    logs_backend: str = NOTIFY_LOGS_BACKEND
    metrics_backend: str = NOTIFY_METRICS_BACKEND
    loki_url: str = NOTIFY_LOGS_LOKI_URL
    mimir_url: str = NOTIFY_METRICS_MIMIR_URL
    victoriametrics_url: Optional[str] = NOTIFY_METRICS_VICTORIAMETRICS_URL or None
    connector_timeout: int = NOTIFY_CONNECTOR_TIMEOUT

    @field_validator("loki_url", "mimir_url", "victoriametrics_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        return str(v).rstrip("/") if v is not None else v

    @field_validator("logs_backend", mode="before")
    @classmethod
    def validate_logs_backend(cls, v: str) -> str:
        value = str(v or "").strip().lower()
        if value not in {LOGS_BACKEND_LOKI}:
            raise ValueError(f"Unsupported logs backend: {value!r}")
        return value

    @field_validator("metrics_backend", mode="before")
    @classmethod
    def validate_metrics_backend(cls, v: str) -> str:
        value = str(v or "").strip().lower()
        if value not in {METRICS_BACKEND_MIMIR, METRICS_BACKEND_VICTORIAMETRICS}:
            raise ValueError(f"Unsupported metrics backend: {value!r}")
        return value

    model_config = {"env_prefix": "NOTIFY_", "extra": "ignore"}
