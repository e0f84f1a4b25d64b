"""
Rendering context: the object templates call into while one alert notification is being formatted.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import base64
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode, urlunsplit

from markupsafe import Markup

from config import GRAPH_PNG_CONTENT_TYPE, SCALAR_AUTODS, settings
from datasources.helpers import passthrough
from engine import dispatch
from engine.correlation import Matrix, check_arity, left_join
from engine.exceptions import NoResults, SearchError
from engine.lookup import lookup
from engine.metadata import get_meta
from engine.resolver import as_input, resolve, scope_text
from engine.results import ResultSet
from engine.tags import TagSet
from render.models import Alert, Attachment, RenderDeps, RunHistory, State

log = logging.getLogger(__name__)


class RenderContext:
    """State of one render pass.

    A context is built for exactly one notification and is not shared.
    Email passes create an attachment list up front; graphs rendered during
    the pass append to it and the caller collects it with
    :meth:`take_attachments` once the template has been evaluated.
    """

    def __init__(
        self,
        deps: RenderDeps,
        run_history: RunHistory,
        alert: Alert,
        state: State,
        is_email: bool = False,
    ):
        self.deps = deps
        self.run_history = run_history
        self.alert = alert
        self.state = state
        self._attachments: Optional[List[Attachment]] = [] if is_email else None

    @property
    def group(self) -> TagSet:
        return self.state.group

    @property
    def attachments(self) -> Tuple[Attachment, ...]:
        return tuple(self._attachments or ())

    def is_email(self) -> bool:
        return self._attachments is not None

    def take_attachments(self) -> List[Attachment]:
        return list(self._attachments or [])

    async def _eval(self, v: Any, filter: bool, series: bool, autods: int) -> Tuple[ResultSet, str]:
        resolved = resolve(
            v,
            self.deps.funcs,
            group=self.group if filter else None,
            series=series,
        )
        results = await dispatch.execute(
            resolved,
            self.run_history.backends,
            self.run_history.start,
            unjoined_ok=self.alert.unjoined_ok,
            search=self.deps.search,
            squelched=self.deps.alert_squelched(self.alert),
            autods=autods,
        )
        return results, resolved.display

    async def eval(self, v: Any) -> Any:
        """Value of the first result of ``v`` scoped to this context's group."""
        results, _ = await self._eval(v, True, False, SCALAR_AUTODS)
        if not results:
            raise NoResults("no results returned")
        return results[0].value

    async def eval_all(self, v: Any) -> ResultSet:
        results, _ = await self._eval(v, False, False, SCALAR_AUTODS)
        return results

    async def _graph(self, v: Any, filter: bool) -> Markup:
        results, title = await self._eval(v, filter, True, settings.graph_autods)
        width, height = settings.graph_width, settings.graph_height
        if self._attachments is not None:
            data = await asyncio.to_thread(
                self.deps.grapher.render_png, results, title, self.run_history.start, width, height,
            )
            name = f"{len(self._attachments) + 1}.png"
            self._attachments.append(Attachment(filename=name, content_type=GRAPH_PNG_CONTENT_TYPE, data=data))
            log.debug("graph %s attached as %s (%d bytes)", title, name, len(data))
            return Markup('<img alt="{}" src="cid:{}" />').format(str(as_input(v)), name)
        svg = await asyncio.to_thread(
            self.deps.grapher.render_svg, results, title, datetime.now(timezone.utc), width, height,
        )
        return Markup(svg)

    async def graph(self, v: Any) -> Markup:
        return await self._graph(v, True)

    async def graph_all(self, v: Any) -> Markup:
        return await self._graph(v, False)

    def lookup(self, table: str, key: str) -> str:
        return self.lookup_all(table, key, self.group)

    def lookup_all(self, table: str, key: str, group: Union[str, TagSet]) -> str:
        return lookup(self.deps.lookups, table, key, group)

    async def get_meta(self, metric: str, name: str, group: Union[str, TagSet]) -> Any:
        return await get_meta(self.deps.metadata, metric, name, group)

    async def left_join(self, *exprs: Any) -> Matrix:
        check_arity(len(exprs))
        result_sets: List[ResultSet] = []
        for v in exprs:
            results, _ = await self._eval(v, False, False, SCALAR_AUTODS)
            result_sets.append(results)
        return left_join(result_sets)

    def _link(self, path: str, params: Dict[str, str]) -> str:
        return urlunsplit(("http", self.deps.hostname, path, urlencode(params), ""))

    def ack(self) -> str:
        return self._link("/action", {"type": "ack", "key": self.state.alert_key})

    def host_view(self, host: str) -> str:
        return self._link("/host", {"time": "1d-ago", "host": host})

    def expr(self, v: str) -> str:
        scoped = scope_text(str(v), self.group)
        return self._link("/expr", {"expr": base64.b64encode(scoped.encode()).decode()})

    def rule(self) -> str:
        template_name = self.alert.template.name if self.alert.template else ""
        now = datetime.now(timezone.utc)
        return self._link("/rule", {
            "alert": base64.b64encode(self.deps.alert_sources.get(self.alert.name, "").encode()).decode(),
            "template": base64.b64encode(self.deps.template_sources.get(template_name, "").encode()).decode(),
            "fromDate": now.strftime("%Y-%m-%d"),
            "fromTime": now.strftime("%H:%M"),
            "template_group": self.group.tags(),
        })

    async def http_get(self, url: str) -> str:
        return await passthrough("GET", url, timeout=settings.http_passthrough_timeout)

    async def http_post(self, url: str, body_type: str, data: str) -> str:
        return await passthrough(
            "POST", url, content=data, content_type=body_type, timeout=settings.http_passthrough_timeout,
        )

    async def ls_query(self, index_root: str, filter: str, sduration: str, eduration: str, size: int) -> List[Any]:
        keystring = ",".join(f"{k}:{self.group[k]}" for k in sorted(self.group))
        return await self.ls_query_all(index_root, keystring, filter, sduration, eduration, size)

    async def ls_query_all(
        self,
        index_root: str,
        keystring: str,
        filter: str,
        sduration: str,
        eduration: str,
        size: int,
    ) -> List[Any]:
        if self.deps.search is None:
            raise SearchError("log search is not configured")
        return await self.deps.search.query(
            datetime.now(timezone.utc), index_root, keystring, filter, sduration, eduration, size,
        )

    def namespace(self) -> Dict[str, Any]:
        """Names a template sees while it is rendered with this context."""
        return {
            "ctx": self,
            "alert": self.alert,
            "state": self.state,
            "group": self.group,
            "eval": self.eval,
            "eval_all": self.eval_all,
            "graph": self.graph,
            "graph_all": self.graph_all,
            "lookup": self.lookup,
            "lookup_all": self.lookup_all,
            "get_meta": self.get_meta,
            "left_join": self.left_join,
            "is_email": self.is_email,
            "ack": self.ack,
            "host_view": self.host_view,
            "expr": self.expr,
            "rule": self.rule,
            "http_get": self.http_get,
            "http_post": self.http_post,
            "ls_query": self.ls_query,
            "ls_query_all": self.ls_query_all,
        }
