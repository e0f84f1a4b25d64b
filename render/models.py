"""
Inputs and outputs of a render pass: alert definitions, fired state, run history, the dependency bundle and attachments.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from config import settings
from engine.enums import Status
from engine.expr import FuncSet, builtin_funcs
from engine.expr.execute import Squelched
from engine.lookup import LookupTable
from engine.metadata import MetadataSource
from engine.squelch import Squelch, squelch_predicate
from engine.tags import EMPTY, TagSet
from store.metadata import get_metadata


@dataclass(frozen=True)
class Attachment:
    filename: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class Template:
    name: str
    subject: Optional[str] = None
    body: Optional[str] = None


@dataclass(frozen=True)
class Alert:
    name: str
    template: Optional[Template] = None
    unjoined_ok: bool = False
    squelch: Tuple[Squelch, ...] = ()


@dataclass(frozen=True)
class Computation:
    text: str
    value: Any


@dataclass(frozen=True)
class Event:
    status: Status
    time: datetime


@dataclass
class State:
    alert: str
    group: TagSet = EMPTY
    computations: List[Computation] = field(default_factory=list)
    history: List[Event] = field(default_factory=list)

    @property
    def alert_key(self) -> str:
        return f"{self.alert}{self.group}"

    @property
    def last(self) -> Optional[Event]:
        return self.history[-1] if self.history else None


@dataclass(frozen=True)
class RunHistory:
    # evaluation reference time of the run; query windows are relative to it
    start: datetime
    backends: Any


@dataclass(frozen=True)
class RenderDeps:
    """Read-only collaborators and configuration shared by render passes."""

    grapher: Any
    funcs: FuncSet = field(default_factory=builtin_funcs)
    lookups: Mapping[str, LookupTable] = field(default_factory=dict)
    squelch: Tuple[Squelch, ...] = ()
    hostname: str = settings.hostname
    search: Any = None
    metadata: MetadataSource = get_metadata
    alert_sources: Mapping[str, str] = field(default_factory=dict)
    template_sources: Mapping[str, str] = field(default_factory=dict)

    def alert_squelched(self, alert: Alert) -> Squelched:
        return squelch_predicate(self.squelch, alert.squelch)


@dataclass(frozen=True)
class Notification:
    subject: str
    body: str
    attachments: List[Attachment] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
