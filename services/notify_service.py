"""
Notification service that renders an alert's templates against tenant-aware data providers.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from config import settings
from datasources.provider import get_provider
from render.graph import Grapher
from render.models import Alert, Notification, RenderDeps, RunHistory, State
from render.templates import render_notification
from services.search_service import LogSearch

log = logging.getLogger(__name__)


def build_deps(tenant_id: Optional[str] = None, **overrides: Any) -> RenderDeps:
    provider = get_provider(tenant_id or settings.default_tenant_id)
    fields = {"grapher": Grapher(), "search": LogSearch(provider.logs)}
    fields.update(overrides)
    return RenderDeps(**fields)


def run_history(tenant_id: Optional[str] = None, start: Optional[datetime] = None) -> RunHistory:
    return RunHistory(
        start=start or datetime.now(timezone.utc),
        backends=get_provider(tenant_id or settings.default_tenant_id),
    )


async def notify(
    alert: Alert,
    state: State,
    deps: RenderDeps,
    history: RunHistory,
    is_email: bool = True,
) -> Notification:
    note = await render_notification(deps, history, alert, state, is_email=is_email)
    log.info(
        "rendered %s notification for %s (attachments=%d, errors=%s)",
        "email" if is_email else "web", state.alert_key, len(note.attachments), sorted(note.errors) or "none",
    )
    return note
