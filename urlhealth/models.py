from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class RunConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    workers: int = Field(..., ge=1)
    timeout_s: int = Field(5, ge=1)
    retries: int = Field(3, ge=0)
    user_agent: str | None = None


class TargetFile(BaseModel):
    targets: List[str] = Field(default_factory=list)
