from __future__ import annotations

"""
Configuration loader for the Railgun Wallet Service.

- Reads environment variables (optionally from `.env`) via pydantic-settings.
- Groups engine bootstrap options into a small immutable view.
- Exposes a cached `load_config()` accessor.

Environment variables (high-level):
    HOST / PORT                   (str/int, default 0.0.0.0 / 4000)
    LOG_LEVEL                     (str, default "INFO")

Engine:
    DATA_DIR                      (path, default "./.railgun")
    DB_PATH                       (path, default "<DATA_DIR>/railgun.db")
    ARTIFACT_PATH                 (path, default "<DATA_DIR>/artifacts")
    ENGINE_BRIDGE_URL             (str)   : JSON-RPC endpoint of the engine sidecar
    ENGINE_CALL_TIMEOUT_S         (float, default 120)
    WALLET_SOURCE                 (str, default "backend")
    ENGINE_DEBUG                  (bool, default True)
    USE_NATIVE_ARTIFACTS          (bool, default False)
    SKIP_MERKLETREE_SCANS         (bool, default False)
    POI_NODE_URLS                 (csv|json list)
    INIT_MERKLETREES              (bool, default True)

Wallet endpoints:
    VERIFY_DERIVATION             (bool, default True)  : derive twice and compare
    GATE_WALLET_LOAD              (bool, default False) : readiness gate on /wallet/load
    ALLOW_DEFAULT_PASSWORD        (bool, default False) : accept /wallet/create without password
    DEFAULT_PASSWORD              (str)                 : used only when the above is enabled
    EXPOSE_KDF_SALT               (bool, default False) : include kdfSalt in wallet responses

CORS:
    CORS_ALLOW_ORIGINS            (csv|json list, default "*")

Notes
-----
- Lists accept comma-separated strings or JSON arrays.
"""

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple, Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_POI_NODE_URLS = ["https://ppoi-agg.horsewithsixlegs.xyz"]
DEFAULT_PASSWORD = "example-password-123"


def _parse_list(val: Optional[Union[str, List[str]]], *, default: List[str]) -> List[str]:
    if val is None:
        return list(default)
    if isinstance(val, (list, tuple)):
        return [str(x) for x in val]
    s = val.strip()
    if not s:
        return []
    if s.startswith("[") and s.endswith("]"):
        try:
            return [str(x) for x in json.loads(s)]
        except ValueError:
            pass
    return [x.strip() for x in s.split(",") if x.strip()]


@dataclass(frozen=True)
class EngineOptions:
    """Fixed arguments handed to the engine's start call."""

    wallet_source: str
    db_path: Path
    artifact_path: Path
    debug: bool
    use_native_artifacts: bool
    skip_merkletree_scans: bool
    poi_node_urls: Tuple[str, ...]
    custom_poi_list: Optional[Tuple[dict, ...]]
    init_merkletrees: bool


class Config(BaseSettings):
    # Core
    host: str = Field("0.0.0.0", description="Bind address")
    port: int = Field(4000, description="Listen port")
    log_level: str = Field("INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")

    # Engine state on disk
    data_dir: Path = Field(Path("./.railgun"), description="Root directory for engine state")
    db_path: Optional[Path] = Field(None, description="Engine storage handle path")
    artifact_path: Optional[Path] = Field(None, description="Proving artifacts directory")

    # Engine bridge
    engine_bridge_url: str = Field(
        "http://127.0.0.1:4100/rpc", description="JSON-RPC endpoint of the engine sidecar"
    )
    engine_call_timeout_s: float = Field(120.0, gt=0, description="Timeout per engine call")

    # Engine start arguments
    wallet_source: str = "backend"
    engine_debug: bool = True
    use_native_artifacts: bool = False
    skip_merkletree_scans: bool = False
    poi_node_urls: Union[str, List[str]] = Field(default_factory=lambda: list(DEFAULT_POI_NODE_URLS))
    init_merkletrees: bool = True

    # Wallet endpoint behaviour
    verify_derivation: bool = True
    gate_wallet_load: bool = False
    allow_default_password: bool = False
    default_password: str = DEFAULT_PASSWORD
    expose_kdf_salt: bool = False

    # CORS
    cors_allow_origins: Union[str, List[str]] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", case_sensitive=False, extra="ignore"
    )

    @field_validator("poi_node_urls", mode="before")
    @classmethod
    def _coerce_poi_nodes(cls, v):
        return _parse_list(v, default=DEFAULT_POI_NODE_URLS)

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _coerce_origins(cls, v):
        return _parse_list(v, default=["*"])

    @model_validator(mode="after")
    def _fill_paths(self) -> "Config":
        if self.db_path is None:
            self.db_path = self.data_dir / "railgun.db"
        if self.artifact_path is None:
            self.artifact_path = self.data_dir / "artifacts"
        return self

    def engine_options(self) -> EngineOptions:
        return EngineOptions(
            wallet_source=self.wallet_source,
            db_path=Path(self.db_path),  # type: ignore[arg-type]
            artifact_path=Path(self.artifact_path),  # type: ignore[arg-type]
            debug=self.engine_debug,
            use_native_artifacts=self.use_native_artifacts,
            skip_merkletree_scans=self.skip_merkletree_scans,
            poi_node_urls=tuple(self.poi_node_urls),
            custom_poi_list=None,
            init_merkletrees=self.init_merkletrees,
        )


@lru_cache(maxsize=1)
def load_config() -> Config:
    """Return the cached process-wide configuration."""
    return Config()  # type: ignore[call-arg]


__all__ = [
    "Config",
    "EngineOptions",
    "DEFAULT_PASSWORD",
    "DEFAULT_POI_NODE_URLS",
    "load_config",
]
