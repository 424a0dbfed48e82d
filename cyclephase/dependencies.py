"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from cyclephase.phases.config_loader import get_engine_config
from cyclephase.phases.estimator import PhaseEstimator


def get_estimator() -> PhaseEstimator:
    """Build an estimator bound to the currently loaded engine config.

    A reloaded config applies from the next request on; in-flight requests
    keep the config they started with.
    """
    return PhaseEstimator(get_engine_config())


# Annotated shortcuts for route signatures
Estimator = Annotated[PhaseEstimator, Depends(get_estimator)]
