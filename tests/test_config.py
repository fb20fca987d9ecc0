from __future__ import annotations

from pathlib import Path

import pytest

from railgun_wallet_service.config import DEFAULT_POI_NODE_URLS, Config, load_config


def _cfg(**kw) -> Config:
    return Config(_env_file=None, **kw)  # type: ignore[call-arg]


def test_defaults(monkeypatch):
    for name in ("PORT", "DATA_DIR", "DB_PATH", "ARTIFACT_PATH", "POI_NODE_URLS", "VERIFY_DERIVATION"):
        monkeypatch.delenv(name, raising=False)
    cfg = _cfg()
    assert cfg.port == 4000
    assert cfg.poi_node_urls == DEFAULT_POI_NODE_URLS
    assert cfg.db_path == Path("./.railgun") / "railgun.db"
    assert cfg.artifact_path == Path("./.railgun") / "artifacts"
    assert cfg.verify_derivation is True
    assert cfg.gate_wallet_load is False
    assert cfg.allow_default_password is False
    assert cfg.expose_kdf_salt is False


def test_paths_follow_data_dir(tmp_path):
    cfg = _cfg(data_dir=tmp_path)
    assert cfg.db_path == tmp_path / "railgun.db"
    assert cfg.artifact_path == tmp_path / "artifacts"


def test_explicit_paths_win(tmp_path):
    cfg = _cfg(data_dir=tmp_path, db_path=tmp_path / "x.db")
    assert cfg.db_path == tmp_path / "x.db"


def test_poi_nodes_from_csv_env(monkeypatch):
    monkeypatch.setenv("POI_NODE_URLS", "https://a.example, https://b.example")
    assert _cfg().poi_node_urls == ["https://a.example", "https://b.example"]


def test_poi_nodes_from_json_env(monkeypatch):
    monkeypatch.setenv("POI_NODE_URLS", '["https://a.example"]')
    assert _cfg().poi_node_urls == ["https://a.example"]


def test_bool_flags_from_env(monkeypatch):
    monkeypatch.setenv("GATE_WALLET_LOAD", "true")
    monkeypatch.setenv("VERIFY_DERIVATION", "0")
    cfg = _cfg()
    assert cfg.gate_wallet_load is True
    assert cfg.verify_derivation is False


def test_timeout_must_be_positive():
    with pytest.raises(ValueError):
        _cfg(engine_call_timeout_s=0)


def test_engine_options(tmp_path):
    opts = _cfg(data_dir=tmp_path, skip_merkletree_scans=True).engine_options()
    assert opts.wallet_source == "backend"
    assert opts.db_path == tmp_path / "railgun.db"
    assert opts.skip_merkletree_scans is True
    assert opts.poi_node_urls == tuple(DEFAULT_POI_NODE_URLS)
    assert opts.custom_poi_list is None
    assert opts.debug is True


def test_load_config_is_cached(monkeypatch):
    load_config.cache_clear()
    try:
        assert load_config() is load_config()
    finally:
        load_config.cache_clear()
