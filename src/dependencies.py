"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from fastapi import Depends

from src.config import Settings, get_settings
from src.cycles.config_loader import (
    MoodModelConfig,
    get_mood_model_config,
    reload_mood_model_config,
)
from src.cycles.service import MoodCycleService


def load_model_config(settings: Settings) -> MoodModelConfig:
    """Return the mood model definition, honouring ``MOOD_MODEL_PATH``."""
    if settings.mood_model_path:
        return reload_mood_model_config(Path(settings.mood_model_path))
    return get_mood_model_config()


def get_mood_cycle_service() -> MoodCycleService:
    """Build the service from the current model config singleton.

    Construction is cheap and always picks up ``reload_mood_model_config()``.
    """
    return MoodCycleService(get_mood_model_config())


# Annotated shortcuts for route signatures
AppSettings = Annotated[Settings, Depends(get_settings)]
MoodCycles = Annotated[MoodCycleService, Depends(get_mood_cycle_service)]
