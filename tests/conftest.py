import os
import sys
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

# ensure workspace root is on sys.path so our application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from engine.enums import ReturnType
from engine.expr import Func, builtin_funcs
from engine.tags import TagSet
from render.context import RenderContext
from render.models import Alert, RenderDeps, RunHistory, State, Template
from store import client as store_client

REFERENCE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def in_memory_store(monkeypatch):
    """Keep the metadata store in memory and start every test from a clean slate."""
    store_client._fallback.clear()

    async def no_redis():
        return None

    monkeypatch.setattr(store_client, "get_redis", no_redis)
    yield
    store_client._fallback.clear()


class FakeGrapher:
    def __init__(self):
        self.png_calls = []
        self.svg_calls = []

    def render_png(self, results, title, start, width, height):
        self.png_calls.append((title, len(results), start, width, height))
        return f"png-{len(self.png_calls)}".encode()

    def render_svg(self, results, title, time, width, height):
        self.svg_calls.append((title, len(results), width, height))
        return f"<svg><title>{title}</title></svg>"


@pytest.fixture
def grapher():
    return FakeGrapher()


@pytest.fixture
def canned():
    """Build a function set with ``series("name")`` and ``number("name")`` returning canned result sets."""

    def make(sets, calls=None):
        calls = calls if calls is not None else []

        async def _series(state, name):
            calls.append(("series", name, state.autods))
            if name == "fail":
                raise RuntimeError("backend exploded")
            return list(sets.get(name, []))

        async def _number(state, name):
            calls.append(("number", name, state.autods))
            if name == "fail":
                raise RuntimeError("backend exploded")
            return list(sets.get(name, []))

        funcs = builtin_funcs()
        funcs["series"] = Func(args=(ReturnType.string,), returns=ReturnType.series, impl=_series)
        funcs["number"] = Func(args=(ReturnType.string,), returns=ReturnType.number, impl=_number)
        return funcs, calls

    return make


@pytest.fixture
def make_context(grapher, canned):
    def make(
        sets=None,
        group="host=a",
        is_email=False,
        lookups=None,
        search=None,
        metadata=None,
        unjoined_ok=False,
        calls=None,
        template=None,
        backends=None,
    ):
        funcs, _ = canned(sets or {}, calls)
        kwargs = {}
        if metadata is not None:
            kwargs["metadata"] = metadata
        deps = RenderDeps(
            grapher=grapher,
            funcs=funcs,
            lookups=lookups or {},
            hostname="notify.example.com",
            search=search,
            alert_sources={"cpu.high": "alert cpu.high { crit = 1 }"},
            template_sources={"cpu": "template cpu { body = `x` }"},
            **kwargs,
        )
        alert = Alert(
            name="cpu.high",
            template=template or Template(name="cpu"),
            unjoined_ok=unjoined_ok,
        )
        state = State(alert="cpu.high", group=TagSet.parse(group))
        rh = RunHistory(start=REFERENCE_TIME, backends=backends or SimpleNamespace(metrics=None))
        return RenderContext(deps, rh, alert, state, is_email=is_email)

    return make
