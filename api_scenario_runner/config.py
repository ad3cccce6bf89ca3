"""Runner settings resolution."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlsplit

import yaml
from pydantic import BaseModel, Field, field_validator

from .http_executor import DEFAULT_TIMEOUT

DEFAULT_BASE_URL = "http://localhost:8080/api"
DEFAULT_TRANSCRIPT = Path(__file__).resolve().parent / "result.log"

ENV_BASE_URL = "SCENARIO_BASE_URL"
ENV_TIMEOUT = "SCENARIO_TIMEOUT"
ENV_TRANSCRIPT = "SCENARIO_TRANSCRIPT"


class RunnerSettings(BaseModel):
    """Where to send requests and where to write the transcript."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    transcript_path: Path = DEFAULT_TRANSCRIPT

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"base_url must be an absolute http(s) URL, got {value!r}")
        return value


def load_settings_file(path: Path) -> dict[str, Any]:
    """Load a YAML settings file; it must contain a mapping."""

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Settings file {path} is not valid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return data


def load_settings(
    config_file: Optional[Path] = None,
    *,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    transcript_path: Optional[Path] = None,
) -> RunnerSettings:
    """
    Resolve settings per field with priority: CLI value > environment > settings file > default.
    """
    values: dict[str, Any] = load_settings_file(config_file) if config_file else {}

    env_overrides = {
        "base_url": os.environ.get(ENV_BASE_URL),
        "timeout": os.environ.get(ENV_TIMEOUT),
        "transcript_path": os.environ.get(ENV_TRANSCRIPT),
    }
    values.update({key: value for key, value in env_overrides.items() if value})

    cli_overrides = {
        "base_url": base_url,
        "timeout": timeout,
        "transcript_path": transcript_path,
    }
    values.update({key: value for key, value in cli_overrides.items() if value is not None})

    return RunnerSettings.model_validate(values)
