"""Cycle phase inference for Cyclephase.

This subpackage estimates, for any target date, a probability distribution
over the four menstrual cycle phases from the user's period history and any
symptoms, basal temperature, or LH test logged for that day.  All inputs are
health data: they are passed in by the caller and never stored or logged.

Modules:
    models        — CycleRecord, SymptomObservation, PhaseProbability and enums
    history       — Cycle day, average cycle length, next period, regularity
    evidence      — Symptom, temperature and LH test refinements
    estimator     — Base curve, normalization, PhaseEstimator
    config_loader — Load/validate/hot-reload engine_config.yaml
"""

from cyclephase.phases.config_loader import EngineConfig, get_engine_config
from cyclephase.phases.estimator import (
    PhaseEstimator,
    base_scores,
    dominant_phase,
    normalize,
    predict_phase,
)
from cyclephase.phases.history import (
    average_cycle_length,
    cycle_day,
    cycle_regularity,
    last_period_start,
    predict_next_period,
)
from cyclephase.phases.models import (
    Confidence,
    CyclePhase,
    CycleRecord,
    CycleSummary,
    PhaseProbability,
    SymptomObservation,
    SymptomSeverity,
)

__all__ = [
    "PhaseEstimator",
    "predict_phase",
    "base_scores",
    "normalize",
    "dominant_phase",
    "cycle_day",
    "last_period_start",
    "average_cycle_length",
    "predict_next_period",
    "cycle_regularity",
    "CycleRecord",
    "SymptomObservation",
    "SymptomSeverity",
    "PhaseProbability",
    "CycleSummary",
    "CyclePhase",
    "Confidence",
    "EngineConfig",
    "get_engine_config",
]
