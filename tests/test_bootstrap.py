from __future__ import annotations

import pytest

from railgun_wallet_service.engine.bootstrap import PROVER_BACKEND, ensure_directories, make_initializer, start_engine
from railgun_wallet_service.engine.lifecycle import EngineLifecycle, EngineState

from .conftest import FakeEngine, make_config


def test_ensure_directories_creates_missing(tmp_path):
    db_dir, artifacts = ensure_directories(tmp_path / "db" / "railgun.db", tmp_path / "artifacts")
    assert db_dir.is_dir()
    assert artifacts.is_dir()
    # Idempotent
    ensure_directories(tmp_path / "db" / "railgun.db", tmp_path / "artifacts")


@pytest.mark.asyncio
async def test_start_engine_passes_fixed_options(tmp_path):
    engine = FakeEngine()
    opts = make_config(tmp_path, poi_node_urls="https://poi.example").engine_options()
    await start_engine(engine, opts)

    started = engine.started
    assert started is not None
    assert started["source"] == "backend"
    assert started["storage"].path == tmp_path / "railgun" / "railgun.db"
    assert started["artifact_path"] == str(tmp_path / "railgun" / "artifacts")
    assert started["debug"] is True
    assert started["use_native_artifacts"] is False
    assert started["skip_merkletree_scans"] is False
    assert started["poi_node_urls"] == ["https://poi.example"]
    assert started["custom_poi_list"] is None
    assert started["init_merkletrees"] is True

    assert engine.prover == PROVER_BACKEND == "snarkjs-groth16"
    info, error = engine.loggers
    info("engine says hi")
    error("engine says no")


@pytest.mark.asyncio
async def test_initializer_drives_lifecycle(tmp_path):
    engine = FakeEngine()
    lc = EngineLifecycle()
    await lc.initialize(make_initializer(engine, make_config(tmp_path).engine_options()))
    assert lc.state is EngineState.READY


@pytest.mark.asyncio
async def test_initializer_failure_marks_failed(tmp_path):
    engine = FakeEngine(start_error=RuntimeError("merkle scan crashed"))
    lc = EngineLifecycle()
    await lc.initialize(make_initializer(engine, make_config(tmp_path).engine_options()))
    assert lc.state is EngineState.FAILED
    assert lc.failure_reason == "RuntimeError: merkle scan crashed"
    assert engine.prover is None
