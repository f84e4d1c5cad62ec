"""Shared Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PlanModel(BaseModel):
    """A declarative npm run: environment plus an ordered command queue."""

    env: dict[str, str] = Field(default_factory=dict)
    remove: list[str] = Field(default_factory=list)
    inherit: bool = True
    nodeEnv: str | None = None
    cwd: str | None = None
    commands: list[list[str]] = Field(default_factory=list)
