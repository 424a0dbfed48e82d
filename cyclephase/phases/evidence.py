"""Evidence refinement for raw phase scores.

Each refiner takes the raw (unnormalized) score mapping and returns a new
mapping with at most a few phases boosted.  Boosts only ever raise a score,
and a boosted score is capped at 1.0.  Refiners are applied by the estimator
in a fixed order: symptoms, basal temperature, LH test.

Rules (``d`` is the cycle day normalized into the average cycle):

    bleeding symptom, d <= 7              → menstrual +0.30
    'pain' / 'discharge', 12 <= d <= 16   → ovulation +0.40
    mood symptom or 'bloat', d > 20       → luteal    +0.30
    BBT > baseline + 0.3°C, d > 14        → luteal    +0.20
    BBT within 0.2°C of baseline, 12–16   → ovulation +0.15
    positive LH test, 12 <= d <= 16       → ovulation +0.50
"""

from __future__ import annotations

from typing import Iterable, Mapping

from cyclephase.phases.models import CyclePhase, SymptomObservation

Scores = Mapping[CyclePhase, float]

_MAX_SCORE = 1.0

_BLEEDING_BOOST = 0.3
_OVULATION_SYMPTOM_BOOST = 0.4
_PMS_BOOST = 0.3
_TEMP_RISE_BOOST = 0.2
_TEMP_BASELINE_BOOST = 0.15
_LH_BOOST = 0.5

_TEMP_RISE_C = 0.3          # rise above baseline that suggests the luteal phase
_TEMP_BASELINE_BAND_C = 0.2  # |deviation| below this counts as baseline

# Cycle days where ovulation evidence is taken into account
_OVULATION_WINDOW = (12, 16)


def _boost(scores: Scores, phase: CyclePhase, amount: float) -> dict[CyclePhase, float]:
    updated = dict(scores)
    updated[phase] = min(_MAX_SCORE, updated[phase] + amount)
    return updated


def _in_ovulation_window(day: int) -> bool:
    low, high = _OVULATION_WINDOW
    return low <= day <= high


def refine_with_symptoms(
    scores: Scores,
    symptoms: Iterable[SymptomObservation],
    day: int,
) -> dict[CyclePhase, float]:
    """Boost phases whose typical symptoms were logged.

    Each rule fires at most once no matter how many symptoms match it.
    Symptoms with severity 0 are ignored.

    Args:
        scores:   Raw phase scores.
        symptoms: Symptoms logged for the target date.
        day:      Normalized cycle day.

    Returns:
        New score mapping.
    """
    present = [s for s in symptoms if s.severity > 0]
    updated = dict(scores)

    bleeding = any(s.category == "bleeding" for s in present)
    if bleeding and day <= 7:
        updated = _boost(updated, CyclePhase.menstrual, _BLEEDING_BOOST)

    # Mittelschmerz, fertile-quality discharge
    ovulatory = any(s.name_contains("pain", "discharge") for s in present)
    if ovulatory and _in_ovulation_window(day):
        updated = _boost(updated, CyclePhase.ovulation, _OVULATION_SYMPTOM_BOOST)

    pms = any(s.category == "mood" or s.name_contains("bloat") for s in present)
    if pms and day > 20:
        updated = _boost(updated, CyclePhase.luteal, _PMS_BOOST)

    return updated


def refine_with_basal_temp(
    scores: Scores,
    basal_temp: float,
    day: int,
    baseline_c: float = 36.5,
) -> dict[CyclePhase, float]:
    """Boost phases consistent with the basal body temperature.

    BBT typically rises 0.3–0.5°C after ovulation and stays up until the
    next period.

    Args:
        scores:     Raw phase scores.
        basal_temp: Measured BBT in °C.
        day:        Normalized cycle day.
        baseline_c: Reference baseline temperature.

    Returns:
        New score mapping.
    """
    deviation = basal_temp - baseline_c
    updated = dict(scores)

    if deviation > _TEMP_RISE_C and day > 14:
        updated = _boost(updated, CyclePhase.luteal, _TEMP_RISE_BOOST)

    if abs(deviation) < _TEMP_BASELINE_BAND_C and _in_ovulation_window(day):
        updated = _boost(updated, CyclePhase.ovulation, _TEMP_BASELINE_BOOST)

    return updated


def refine_with_lh_test(
    scores: Scores,
    lh_test_positive: bool,
    day: int,
) -> dict[CyclePhase, float]:
    """Boost ovulation on a positive LH test inside the ovulation window."""
    if lh_test_positive and _in_ovulation_window(day):
        return _boost(scores, CyclePhase.ovulation, _LH_BOOST)
    return dict(scores)
