"""
Graph rasterization of series results to PNG (email) and SVG (web) using matplotlib.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import io
import logging
from datetime import datetime, timezone

from matplotlib.figure import Figure

from engine.results import ResultSet, Series

log = logging.getLogger(__name__)


class Grapher:
    def __init__(self, dpi: int = 100):
        self.dpi = dpi

    def _figure(self, results: ResultSet, title: str, when: datetime, width: int, height: int) -> Figure:
        fig = Figure(figsize=(width / self.dpi, height / self.dpi), dpi=self.dpi)
        ax = fig.add_subplot(1, 1, 1)
        plotted = 0
        for r in results:
            if not isinstance(r.value, Series) or not len(r.value):
                continue
            stamps = [datetime.fromtimestamp(t, tz=timezone.utc) for t in r.value.timestamps.tolist()]
            ax.plot(stamps, r.value.values, linewidth=1.2, label=str(r.group) if r.group else None)
            plotted += 1
        if not plotted:
            ax.text(0.5, 0.5, "no data", ha="center", va="center", transform=ax.transAxes)
        elif any(r.group for r in results):
            ax.legend(loc="upper left", fontsize="small")
        ax.set_title(title, fontsize="medium")
        ax.set_xlabel(f"{when.astimezone(timezone.utc):%Y-%m-%d %H:%M:%S} UTC")
        ax.grid(True, alpha=0.3)
        fig.autofmt_xdate()
        fig.tight_layout()
        log.debug("graph %r series=%d", title, plotted)
        return fig

    def render_png(self, results: ResultSet, title: str, start: datetime, width: int, height: int) -> bytes:
        buf = io.BytesIO()
        self._figure(results, title, start, width, height).savefig(buf, format="png")
        return buf.getvalue()

    def render_svg(self, results: ResultSet, title: str, time: datetime, width: int, height: int) -> str:
        buf = io.StringIO()
        self._figure(results, title, time, width, height).savefig(buf, format="svg")
        markup = buf.getvalue()
        # drop the XML prolog and doctype so the markup can be inlined in HTML
        return markup[markup.find("<svg"):]
