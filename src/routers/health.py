"""Health check endpoint — public, no auth required."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from src.cycles.config_loader import get_mood_model_config
from src.dependencies import AppSettings

router = APIRouter(tags=["system"])
logger = logging.getLogger("moodcycle.health")


@router.get("/health")
async def health_check(settings: AppSettings) -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also reports whether the mood model definition is loaded and valid.
    """
    model_version = None
    try:
        model_version = get_mood_model_config().version
    except (FileNotFoundError, ValueError) as exc:
        logger.warning("Health check model config probe failed: %s", exc)

    return {
        "status": "healthy" if model_version else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "mood_model": model_version or "unavailable",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
