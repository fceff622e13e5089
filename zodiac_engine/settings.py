"""Engine settings read from ZODIAC_* environment variables."""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


class EngineSettings(BaseModel):
    """Tunable thresholds and the optional reference-data location."""

    reference_data_path: str | None = None
    conflict_threshold: float = Field(default=60.0, ge=0.0, le=100.0)
    avoid_conflict_cutoff: float = Field(default=85.0, ge=0.0, le=100.0)
    min_element_count: int = Field(default=1, ge=1)


def _env_number(name: str, default: float, cast: type = float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def load_settings() -> EngineSettings:
    """Build settings from the environment.

    Raises:
        ValueError: If a variable is set to a malformed or out-of-range value.
    """
    path = os.getenv("ZODIAC_REFERENCE_DATA", "").strip() or None
    settings = EngineSettings(
        reference_data_path=path,
        conflict_threshold=_env_number("ZODIAC_CONFLICT_THRESHOLD", 60.0),
        avoid_conflict_cutoff=_env_number("ZODIAC_AVOID_CONFLICT_CUTOFF", 85.0),
        min_element_count=int(_env_number("ZODIAC_MIN_ELEMENT_COUNT", 1, int)),
    )
    logger.debug(
        "Engine settings: reference=%s conflict_threshold=%s cutoff=%s min_element_count=%s",
        settings.reference_data_path or "(built-in)",
        settings.conflict_threshold,
        settings.avoid_conflict_cutoff,
        settings.min_element_count,
    )
    return settings
