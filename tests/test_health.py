from __future__ import annotations

import re
import time

import pytest
from fastapi.testclient import TestClient

from railgun_wallet_service.app import create_app

from .conftest import FakeEngine, make_config


@pytest.mark.asyncio
async def test_health_while_initializing(aclient):
    resp = await aclient.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "railgunReady": False, "engineState": "initializing"}


@pytest.mark.asyncio
async def test_health_when_ready(ready_client):
    resp = await ready_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["railgunReady"] is True


@pytest.mark.asyncio
async def test_health_reports_failure_reason(app, aclient):
    app.state.lifecycle.mark_failed("EngineError: sidecar unreachable")
    resp = await aclient.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "railgunReady": False,
        "engineState": "failed",
        "engineError": "EngineError: sidecar unreachable",
    }


@pytest.mark.asyncio
async def test_readyz_follows_engine_state(app, aclient):
    resp = await aclient.get("/readyz")
    assert resp.status_code == 503
    assert resp.json()["engineState"] == "initializing"

    app.state.lifecycle.mark_ready()
    resp = await aclient.get("/readyz")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_version_endpoint(aclient):
    resp = await aclient.get("/version")
    assert resp.status_code == 200
    data = resp.json()
    assert data["service"] == "railgun-wallet-service"
    assert re.match(r"^\d+\.\d+\.\d+", data["version"])
    assert data["git"] is None or isinstance(data["git"], str)


@pytest.mark.asyncio
async def test_request_id_is_echoed(aclient):
    resp = await aclient.get("/health", headers={"X-Request-Id": "req-123"})
    assert resp.headers["x-request-id"] == "req-123"
    resp = await aclient.get("/health")
    assert resp.headers["x-request-id"]


@pytest.mark.asyncio
async def test_metrics_exposes_engine_state(ready_client):
    resp = await ready_client.get("/metrics")
    assert resp.status_code == 200
    assert 'engine_state{state="ready"} 1.0' in resp.text
    assert 'engine_state{state="initializing"} 0.0' in resp.text


# ----------------------------
# Full lifespan (background init)
# ----------------------------


def _wait_for_state(client: TestClient, state: str, timeout: float = 5.0) -> dict:
    deadline = time.monotonic() + timeout
    while True:
        body = client.get("/health").json()
        if body["engineState"] == state or time.monotonic() > deadline:
            return body
        time.sleep(0.02)


def test_lifespan_initializes_engine_in_background(tmp_path):
    engine = FakeEngine()
    cfg = make_config(tmp_path)
    app = create_app(cfg, engine=engine)

    with TestClient(app) as client:
        body = _wait_for_state(client, "ready")
        assert body["railgunReady"] is True
        assert engine.started is not None
        assert engine.started["poi_node_urls"] == ["https://ppoi-agg.horsewithsixlegs.xyz"]
        assert engine.prover == "snarkjs-groth16"
        assert (tmp_path / "railgun" / "artifacts").is_dir()

    assert engine.closed


def test_lifespan_serves_health_before_engine_is_ready(tmp_path):
    engine = FakeEngine()

    async def never_finishes() -> None:
        import asyncio

        await asyncio.Event().wait()

    app = create_app(make_config(tmp_path), engine=engine, initializer=never_finishes)
    with TestClient(app) as client:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["engineState"] == "initializing"
        resp = client.post("/wallet/create", json={"password": "pw"})
        assert resp.status_code == 503


def test_lifespan_failed_initialization_keeps_serving(tmp_path):
    engine = FakeEngine(start_error=ConnectionError("sidecar down"))
    app = create_app(make_config(tmp_path), engine=engine)

    with TestClient(app) as client:
        body = _wait_for_state(client, "failed")
        assert body["engineError"] == "ConnectionError: sidecar down"

        resp = client.post("/wallet/create", json={"password": "pw"})
        assert resp.status_code == 503
        assert "sidecar down" in resp.json()["error"]


def test_build_app_uses_bridge_engine_by_default():
    from railgun_wallet_service import build_app
    from railgun_wallet_service.config import load_config
    from railgun_wallet_service.engine.bridge import BridgeEngine

    load_config.cache_clear()
    try:
        app = build_app()
    finally:
        load_config.cache_clear()
    assert isinstance(app.state.engine, BridgeEngine)
    paths = set(app.openapi()["paths"])
    assert {"/health", "/readyz", "/version", "/wallet/create", "/wallet/load"} <= paths
