from __future__ import annotations

from typing import Any, Dict

import pytest

from railgun_wallet_service import main as main_mod
from railgun_wallet_service.config import load_config


@pytest.fixture
def captured(monkeypatch) -> Dict[str, Any]:
    seen: Dict[str, Any] = {}

    def fake_run(target, **kwargs):
        seen["target"] = target
        seen.update(kwargs)

    monkeypatch.setattr(main_mod.uvicorn, "run", fake_run)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    load_config.cache_clear()
    yield seen
    load_config.cache_clear()


def test_runs_factory_with_single_worker(captured):
    main_mod.main(["--host", "127.0.0.1", "--port", "4001"])
    assert captured["target"] == "railgun_wallet_service.app:create_production_app"
    assert captured["factory"] is True
    assert captured["workers"] == 1
    assert captured["host"] == "127.0.0.1"
    assert captured["port"] == 4001
    assert captured["proxy_headers"] is True


def test_proxy_headers_can_be_disabled(captured):
    main_mod.main(["--no-proxy-headers"])
    assert captured["proxy_headers"] is False
