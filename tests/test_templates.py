"""
Test cases for subject and body template execution and the fallback error rendering.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import pytest

from engine.enums import Status
from engine.results import Result, Series
from engine.tags import TagSet
from render.models import Computation, Event, Template
from render.templates import execute_bad_template, execute_body, execute_subject, render_notification

from conftest import REFERENCE_TIME

CPU = [Result(Series.from_pairs([(1, 1), (2, 2)]), TagSet(host="a"))]
LOAD = [Result(0.5, TagSet(host="a")), Result(0.9, TagSet(host="b"))]


def parts(ctx):
    return ctx.deps, ctx.run_history, ctx.alert, ctx.state


@pytest.mark.asyncio
async def test_subject_collapses_whitespace(make_context):
    ctx = make_context(
        sets={"load": LOAD},
        template=Template(name="cpu", subject="{{ alert.name }}   on\n  {{ group.host }}: {{ eval(\"number('load')\") }}"),
    )
    assert await execute_subject(*parts(ctx)) == "cpu.high on a: 0.5"


@pytest.mark.asyncio
async def test_missing_templates_render_nothing(make_context):
    ctx = make_context(template=Template(name="cpu"))
    assert await execute_subject(*parts(ctx)) is None
    assert await execute_body(*parts(ctx), is_email=True) == (None, [])


@pytest.mark.asyncio
async def test_email_body_collects_graph_attachments(make_context, grapher):
    body = (
        "<p>{{ eval(\"number('load')\") }}</p>"
        "{{ graph(\"series('cpu')\") }}"
        "{{ graph_all(\"series('cpu')\") }}"
    )
    ctx = make_context(sets={"cpu": CPU, "load": LOAD}, template=Template(name="cpu", body=body))
    text, attachments = await execute_body(*parts(ctx), is_email=True)
    assert text.startswith("<p>0.5</p>")
    assert 'src="cid:1.png"' in text and 'src="cid:2.png"' in text
    assert [a.filename for a in attachments] == ["1.png", "2.png"]
    assert len(grapher.png_calls) == 2


@pytest.mark.asyncio
async def test_web_body_inlines_svg(make_context):
    ctx = make_context(sets={"cpu": CPU}, template=Template(name="cpu", body="{{ graph(\"series('cpu')\") }}"))
    text, attachments = await execute_body(*parts(ctx), is_email=False)
    assert text == "<svg><title>series('cpu')</title></svg>"
    assert attachments == []


@pytest.mark.asyncio
async def test_body_escapes_plain_values(make_context):
    ctx = make_context(group="host=<b>", template=Template(name="cpu", body="{{ group.host }}"))
    text, _ = await execute_body(*parts(ctx), is_email=False)
    assert text == "&lt;b&gt;"


@pytest.mark.asyncio
async def test_left_join_in_template(make_context):
    body = (
        "{% for row in left_join(\"number('load')\", \"number('other')\") %}"
        "{{ row[0].group.host }}={{ row[1].value }};"
        "{% endfor %}"
    )
    ctx = make_context(
        sets={"load": LOAD, "other": [Result(7.0, TagSet(host="a", dc="1"))]},
        template=Template(name="cpu", body=body),
    )
    text, _ = await execute_body(*parts(ctx), is_email=False)
    assert text == "a=7.0;b=nan;"


@pytest.mark.asyncio
async def test_bad_template_rendering(make_context):
    ctx = make_context(template=Template(name="cpu", body="x"))
    ctx.state.computations.append(Computation(text="avg(q('cpu', '1h', ''))", value=0.93))
    ctx.state.history.append(Event(status=Status.critical, time=REFERENCE_TIME))
    subject, body = await execute_bad_template(None, RuntimeError("boom <here>"), *parts(ctx))
    assert subject == "error: template rendering error in the body for alert cpu.high{host=a}"
    assert "Body: boom &lt;here&gt;" in body
    assert "Subject:" not in body
    assert "Status: critical" in body
    assert "0.93" in body
    assert 'href="http://notify.example.com/rule?' in body


@pytest.mark.asyncio
async def test_bad_template_names_both_parts(make_context):
    ctx = make_context()
    subject, body = await execute_bad_template(ValueError("s"), ValueError("b"), *parts(ctx))
    assert "in the subject and body for alert" in subject
    assert "Subject: s" in body and "Body: b" in body


@pytest.mark.asyncio
async def test_render_notification_success(make_context):
    ctx = make_context(
        sets={"cpu": CPU},
        template=Template(name="cpu", subject="{{ alert.name }}", body="{{ graph(\"series('cpu')\") }}"),
    )
    note = await render_notification(*parts(ctx), is_email=True)
    assert note.subject == "cpu.high"
    assert [a.filename for a in note.attachments] == ["1.png"]
    assert note.errors == {}


@pytest.mark.asyncio
async def test_render_notification_falls_back_on_failure(make_context):
    ctx = make_context(
        sets={"load": []},
        template=Template(name="cpu", subject="ok", body="{{ eval(\"number('load')\") }}"),
    )
    note = await render_notification(*parts(ctx), is_email=True)
    assert note.subject == "error: template rendering error in the body for alert cpu.high{host=a}"
    assert note.errors == {"body": "no results returned"}
    assert note.attachments == []
    assert "no results returned" in note.body


@pytest.mark.asyncio
async def test_undefined_names_fail_the_render(make_context):
    ctx = make_context(template=Template(name="cpu", subject="{{ nope }}"))
    note = await render_notification(*parts(ctx))
    assert set(note.errors) == {"subject"}
