from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "ok"
    railgun_ready: bool = Field(..., alias="railgunReady")
    engine_state: str = Field(..., alias="engineState")
    engine_error: Optional[str] = Field(default=None, alias="engineError")


__all__ = ["HealthResponse"]
