"""
Template execution for alert notifications: subject, body and the fallback rendering used when either fails.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional, Tuple

from jinja2 import Environment, StrictUndefined
from jinja2 import Template as JinjaTemplate

from render.context import RenderContext
from render.models import Alert, Attachment, Notification, RenderDeps, RunHistory, State

log = logging.getLogger(__name__)

_body_env = Environment(autoescape=True, enable_async=True, undefined=StrictUndefined)
_subject_env = Environment(autoescape=False, enable_async=True, undefined=StrictUndefined)

_ERROR_BODY = _body_env.from_string("""
<p>There was a runtime error processing alert {{ state.alert_key }} using the {{ template_name }} template. The following errors occurred:</p>
{% if subject_error %}
    <p>Subject: {{ subject_error }}</p>
{% endif %}
{% if body_error %}
    <p>Body: {{ body_error }}</p>
{% endif %}
<p>Use <a href="{{ rule() }}">this link</a> to the rule page to correct this.</p>
<h2>Generic Alert Information</h2>
<p>Status: {{ state.last.status.value if state.last else "unknown" }}</p>
<p>Alert: {{ state.alert_key }}</p>
<h3>Computations</h3>
<table>
    <tr>
        <th style="text-align:left">Expression</th>
        <th style="text-align:left">Value</th>
    </tr>
{% for c in state.computations %}
    <tr>
        <td style="text-align:left">{{ c.text }}</td>
        <td style="text-align:left">{{ c.value }}</td>
    </tr>
{% endfor %}
</table>""")


@lru_cache(maxsize=256)
def _body_template(source: str) -> JinjaTemplate:
    return _body_env.from_string(source)


@lru_cache(maxsize=256)
def _subject_template(source: str) -> JinjaTemplate:
    return _subject_env.from_string(source)


async def execute_body(
    deps: RenderDeps,
    run_history: RunHistory,
    alert: Alert,
    state: State,
    is_email: bool,
) -> Tuple[Optional[str], List[Attachment]]:
    t = alert.template
    if t is None or t.body is None:
        return None, []
    ctx = RenderContext(deps, run_history, alert, state, is_email=is_email)
    body = await _body_template(t.body).render_async(**ctx.namespace())
    return body, ctx.take_attachments()


async def execute_subject(
    deps: RenderDeps,
    run_history: RunHistory,
    alert: Alert,
    state: State,
) -> Optional[str]:
    t = alert.template
    if t is None or t.subject is None:
        return None
    ctx = RenderContext(deps, run_history, alert, state, is_email=False)
    text = await _subject_template(t.subject).render_async(**ctx.namespace())
    return " ".join(text.split())


async def execute_bad_template(
    subject_error: Optional[BaseException],
    body_error: Optional[BaseException],
    deps: RenderDeps,
    run_history: RunHistory,
    alert: Alert,
    state: State,
) -> Tuple[str, str]:
    failed = [part for part, err in (("subject", subject_error), ("body", body_error)) if err is not None]
    subject = f"error: template rendering error in the {' and '.join(failed)} for alert {state.alert_key}"
    ctx = RenderContext(deps, run_history, alert, state, is_email=True)
    body = await _ERROR_BODY.render_async(
        subject_error=subject_error,
        body_error=body_error,
        template_name=alert.template.name if alert.template else "",
        **ctx.namespace(),
    )
    return subject, body


async def render_notification(
    deps: RenderDeps,
    run_history: RunHistory,
    alert: Alert,
    state: State,
    is_email: bool = True,
) -> Notification:
    """Render subject and body, falling back to the error rendering on failure.

    A failing expression, lookup or graph only affects this notification.
    """
    subject_error: Optional[Exception] = None
    body_error: Optional[Exception] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    attachments: List[Attachment] = []

    try:
        subject = await execute_subject(deps, run_history, alert, state)
    except Exception as exc:
        log.warning("subject render failed for %s: %s", state.alert_key, exc)
        subject_error = exc
    try:
        body, attachments = await execute_body(deps, run_history, alert, state, is_email)
    except Exception as exc:
        log.warning("body render failed for %s: %s", state.alert_key, exc)
        body_error = exc

    if subject_error is None and body_error is None:
        return Notification(subject=subject or "", body=body or "", attachments=attachments)

    bad_subject, bad_body = await execute_bad_template(
        subject_error, body_error, deps, run_history, alert, state,
    )
    errors = {
        part: str(err)
        for part, err in (("subject", subject_error), ("body", body_error))
        if err is not None
    }
    return Notification(subject=bad_subject, body=bad_body, attachments=[], errors=errors)
