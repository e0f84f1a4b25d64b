import pytest

from connectors.loki import LokiConnector
from connectors.mimir import MimirConnector
from connectors.victoria import VictoriaMetricsConnector
from datasources.exceptions import InvalidQuery, QueryTimeout


@pytest.fixture
def captured(monkeypatch):
    calls = []

    async def fake_fetch_json(url, params=None, headers=None, timeout=30, **kwargs):
        calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        return {"status": "success", "data": {"result": []}}

    monkeypatch.setattr("connectors.loki.fetch_json", fake_fetch_json)
    monkeypatch.setattr("connectors.mimir.fetch_json", fake_fetch_json)
    return calls


@pytest.mark.asyncio
async def test_loki_converts_seconds_to_nanoseconds(captured):
    c = LokiConnector("http://loki:3100/", "team-a", timeout=7)
    await c.query_range('{job="api"}', 100, 200, limit=50)
    call = captured[0]
    assert call["url"] == "http://loki:3100/loki/api/v1/query_range"
    assert call["params"] == {
        "query": '{job="api"}',
        "start": 100_000_000_000,
        "end": 200_000_000_000,
        "direction": "backward",
        "limit": 50,
    }
    assert call["headers"]["X-Scope-OrgID"] == "team-a"
    assert call["timeout"] == 7


@pytest.mark.asyncio
async def test_loki_metric_query_passes_step_and_direction(captured):
    c = LokiConnector("http://loki", "t")
    await c.query_range("count_over_time({job=\"a\"}[1m])", 1, 2, step="60s", direction="forward")
    params = captured[0]["params"]
    assert params["step"] == "60s"
    assert params["direction"] == "forward"
    assert "limit" not in params


@pytest.mark.asyncio
async def test_mimir_and_victoria_paths(captured):
    await MimirConnector("http://mimir", "t").query_range("up", 1, 2, "15s")
    await VictoriaMetricsConnector("http://vm:8428", "t").query_range("up", 1, 2, "15s")
    assert captured[0]["url"] == "http://mimir/prometheus/api/v1/query_range"
    assert captured[1]["url"] == "http://vm:8428/api/v1/query_range"
    assert captured[0]["params"] == {"query": "up", "start": 1, "end": 2, "step": "15s"}


@pytest.mark.asyncio
async def test_mimir_retries_timeouts_but_not_bad_queries(monkeypatch):
    attempts = {"timeout": 0, "invalid": 0}

    async def no_sleep(_):
        return None

    async def flaky(url, params=None, **kwargs):
        kind = params["query"]
        attempts[kind] += 1
        if kind == "timeout":
            raise QueryTimeout("Mimir query timed out")
        raise InvalidQuery("Mimir query failed [400]: parse error")

    monkeypatch.setattr("connectors.mimir.fetch_json", flaky)
    monkeypatch.setattr("datasources.retry.asyncio.sleep", no_sleep)
    c = MimirConnector("http://mimir", "t")
    with pytest.raises(QueryTimeout):
        await c.query_range("timeout", 1, 2, "1s")
    with pytest.raises(InvalidQuery):
        await c.query_range("invalid", 1, 2, "1s")
    assert attempts == {"timeout": 3, "invalid": 1}


def test_connector_timeout_defaults_to_settings():
    from config import settings

    assert LokiConnector("http://loki", "t").timeout == settings.connector_timeout
    assert MimirConnector("http://mimir", "t").timeout == settings.connector_timeout
