"""
Notification rendering: the per-pass context exposed to templates, graph rasterization and template execution.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from render.context import RenderContext
from render.models import Alert, Attachment, Notification, RenderDeps, RunHistory, State, Template
from render.templates import execute_bad_template, execute_body, execute_subject, render_notification

__all__ = [
    "RenderContext",
    "Alert", "Attachment", "Notification", "RenderDeps", "RunHistory", "State", "Template",
    "execute_bad_template", "execute_body", "execute_subject", "render_notification",
]
