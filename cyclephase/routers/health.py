"""Health check endpoint — public, no auth required."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from cyclephase.config import get_settings
from cyclephase.phases.config_loader import ConfigValidationError, get_engine_config

router = APIRouter(tags=["system"])
logger = logging.getLogger("cyclephase.health")


@router.get("/health")
async def health_check() -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also reports whether the engine config is loaded.
    """
    settings = get_settings()
    config_version: str | None = None
    try:
        config_version = get_engine_config().version
    except (ConfigValidationError, FileNotFoundError) as exc:
        logger.warning("Health check could not load engine config: %s", exc)

    return {
        "status": "healthy" if config_version else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "engine_config_version": config_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
