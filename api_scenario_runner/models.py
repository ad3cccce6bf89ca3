"""Scenario and transcript models."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

HttpMethod = Literal["GET", "POST", "PATCH"]


class EntityRef(BaseModel):
    """Placeholder for the ``id`` of an entity captured by an earlier step."""

    model_config = ConfigDict(frozen=True)

    entity: str
    default: int


class ScenarioStep(BaseModel):
    """Single HTTP call inside the fixed scenario."""

    model_config = ConfigDict(frozen=True)

    title: str
    method: HttpMethod
    path: str
    body: Optional[dict[str, Any]] = None
    capture_as: Optional[str] = None


class TranscriptEntry(BaseModel):
    """Outcome of one executed step, as written to the transcript."""

    title: str
    status_code: int
    body: str
    recorded_at: datetime


class ScenarioOutcome(BaseModel):
    """Everything a finished run produced."""

    transcript_path: Path
    started_at: datetime
    finished_at: datetime
    entries: list[TranscriptEntry] = Field(default_factory=list)
    captured: dict[str, dict[str, Any]] = Field(default_factory=dict)
