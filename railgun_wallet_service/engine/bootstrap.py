"""
Engine bootstrap: the initializer the lifecycle runs in the background.

Steps, in order:
1. create the storage and artifacts directories if absent
2. build the storage handle
3. start the engine with the configured fixed options
4. wire the prover backend
5. route engine log lines into structlog
"""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

from ..config import EngineOptions
from ..logging import get_logger
from .interface import EngineInitializer, StorageHandle, WalletEngine

log = get_logger(__name__)

PROVER_BACKEND = "snarkjs-groth16"


def ensure_directories(db_path: Path, artifact_path: Path) -> Tuple[Path, Path]:
    db_dir = Path(db_path).parent
    for label, directory in (("database", db_dir), ("artifacts", Path(artifact_path))):
        if not directory.exists():
            log.info("engine.dir.create", kind=label, path=str(directory))
            directory.mkdir(parents=True, exist_ok=True)
    return db_dir, Path(artifact_path)


async def start_engine(engine: WalletEngine, options: EngineOptions) -> None:
    ensure_directories(options.db_path, options.artifact_path)
    storage = StorageHandle(path=options.db_path)

    log.info(
        "engine.start",
        source=options.wallet_source,
        db=storage.describe(),
        artifacts=str(options.artifact_path),
        poi_nodes=list(options.poi_node_urls),
        init_merkletrees=options.init_merkletrees,
        skip_scans=options.skip_merkletree_scans,
    )
    await engine.start_engine(
        options.wallet_source,
        storage,
        options.debug,
        str(options.artifact_path),
        options.use_native_artifacts,
        options.skip_merkletree_scans,
        list(options.poi_node_urls),
        list(options.custom_poi_list) if options.custom_poi_list is not None else None,
        options.init_merkletrees,
    )
    await engine.set_prover(PROVER_BACKEND)

    engine_log = get_logger("railgun.engine")
    engine.set_loggers(
        lambda msg: engine_log.info("engine.log", message=msg),
        lambda msg: engine_log.error("engine.log", message=msg),
    )
    log.info("engine.started", prover=PROVER_BACKEND)


def make_initializer(engine: WalletEngine, options: EngineOptions) -> EngineInitializer:
    async def _initialize() -> None:
        await start_engine(engine, options)

    return _initialize


__all__ = ["PROVER_BACKEND", "ensure_directories", "start_engine", "make_initializer"]
