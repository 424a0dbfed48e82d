"""Phase probability estimator.

Estimates, for a target date, how likely each of the four cycle phases is:

1. Find the most recent period start and the cycle day of the target date
2. Score each phase from a piecewise-linear curve over the normalized cycle day
3. Refine the raw scores with symptoms, basal temperature and LH test results
4. Normalize so the four probabilities sum to 1, attach confidence labels

The scores are hand-tuned heuristics, not a fitted model.  With no usable
history every phase gets 0.25 at low confidence.

The estimator never reads storage or the clock: history and target date are
always passed in by the caller.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Mapping, Sequence

from cyclephase.phases.config_loader import EngineConfig
from cyclephase.phases.evidence import (
    refine_with_basal_temp,
    refine_with_lh_test,
    refine_with_symptoms,
)
from cyclephase.phases.history import (
    average_cycle_length,
    cycle_day,
    cycle_regularity,
    last_period_start,
    predict_next_period,
    valid_cycle_lengths,
)
from cyclephase.phases.models import (
    PHASE_ORDER,
    Confidence,
    CyclePhase,
    CycleRecord,
    CycleSummary,
    PhaseProbability,
    SymptomObservation,
)

logger = logging.getLogger("cyclephase.phases.estimator")

_UNIFORM_PROBABILITY = 0.25
_UNIFORM_INTERVAL = (0.0, 0.5)


def normalize_cycle_day(day: int, cycle_length: int) -> int:
    """Fold a cycle day into ``[1, cycle_length]``.

    Day 29 of a 28-day cycle is day 1 of the next one; days before the period
    start wrap backwards into the previous cycle.
    """
    return ((day - 1) % cycle_length) + 1


def base_scores(day: int, cycle_length: int) -> dict[CyclePhase, float]:
    """Raw phase scores for a cycle day, before any evidence.

    The scores are not normalized and may sum to anything.  Late luteal
    scores go negative in cycles longer than 34 days.

    Args:
        day:          Cycle day (1-indexed, may exceed the cycle length).
        cycle_length: Average cycle length in days.

    Returns:
        Mapping of phase → raw score.
    """
    d = normalize_cycle_day(day, cycle_length)

    # Menstrual: days 1-5
    menstrual = max(0.0, 1 - (d - 1) * 0.2) if d <= 5 else 0.0

    # Follicular: days 1-13, low during menstruation
    if 5 < d <= 13:
        follicular = 0.8 - (d - 6) * 0.1
    elif d <= 5:
        follicular = 0.2
    else:
        follicular = 0.0

    # Ovulation: days 13-15, peaking on day 14
    ovulation = 0.9 - abs(d - 14) * 0.3 if 13 <= d <= 15 else 0.0

    # Luteal: day 16 onwards
    luteal = 0.9 - (d - 16) * 0.05 if d > 15 else 0.0

    return {
        CyclePhase.menstrual: menstrual,
        CyclePhase.follicular: follicular,
        CyclePhase.ovulation: ovulation,
        CyclePhase.luteal: luteal,
    }


def default_probabilities() -> list[PhaseProbability]:
    """Uniform distribution returned when there is nothing to go on."""
    return [
        PhaseProbability(
            phase=phase,
            probability=_UNIFORM_PROBABILITY,
            confidence=Confidence.low,
            confidence_interval=_UNIFORM_INTERVAL,
        )
        for phase in PHASE_ORDER
    ]


def normalize(
    scores: Mapping[CyclePhase, float],
    config: EngineConfig | None = None,
) -> list[PhaseProbability]:
    """Turn raw scores into a probability distribution.

    Falls back to the uniform default when the scores sum to exactly zero.
    """
    cf = (config or EngineConfig()).confidence
    total = sum(scores[phase] for phase in PHASE_ORDER)
    if total == 0:
        return default_probabilities()

    results = []
    for phase in PHASE_ORDER:
        probability = scores[phase] / total + 0.0  # no negative zero
        results.append(
            PhaseProbability(
                phase=phase,
                probability=probability,
                confidence=Confidence(cf.label_for(probability)),
                confidence_interval=cf.interval_for(probability),
            )
        )
    return results


def dominant_phase(probabilities: Sequence[PhaseProbability]) -> PhaseProbability:
    """Return the most likely phase; ties go to the earlier phase."""
    top = probabilities[0]
    for candidate in probabilities[1:]:
        if candidate.probability > top.probability:
            top = candidate
    return top


class PhaseEstimator:
    """Estimate cycle phase probabilities from a user's cycle history.

    Usage::

        estimator = PhaseEstimator()
        probabilities = estimator.predict_phase(
            history=records,
            target_date=date(2024, 1, 15),
            lh_test_positive=True,
        )
        print(dominant_phase(probabilities).phase)
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()

    @property
    def config(self) -> EngineConfig:
        return self._config

    def predict_phase(
        self,
        history: Sequence[CycleRecord],
        target_date: date,
        current_symptoms: Sequence[SymptomObservation] | None = None,
        basal_temp: float | None = None,
        lh_test_positive: bool | None = None,
    ) -> list[PhaseProbability]:
        """Estimate phase probabilities for ``target_date``.

        Args:
            history:          Cycle records in any order.
            target_date:      Date to estimate.
            current_symptoms: Symptoms logged on the target date.
            basal_temp:       BBT on the target date in °C.
            lh_test_positive: LH test result on the target date.

        Returns:
            One PhaseProbability per phase, in canonical phase order.
        """
        if not history:
            return default_probabilities()

        last_start = last_period_start(history)
        if last_start is None:
            logger.debug("No period start in %d records; uniform estimate", len(history))
            return default_probabilities()

        raw_day = cycle_day(last_start, target_date)
        length = average_cycle_length(history, self._config)
        day = normalize_cycle_day(raw_day, length)
        logger.debug("Cycle day %d (normalized %d) of a %d-day cycle", raw_day, day, length)

        scores = base_scores(raw_day, length)

        if current_symptoms:
            scores = refine_with_symptoms(scores, current_symptoms, day)

        if basal_temp is not None:
            scores = refine_with_basal_temp(
                scores, basal_temp, day, baseline_c=self._config.temperature.baseline_c
            )

        if lh_test_positive is not None:
            scores = refine_with_lh_test(scores, lh_test_positive, day)

        return normalize(scores, self._config)

    def cycle_day_for(self, history: Sequence[CycleRecord], target_date: date) -> int | None:
        """Return the raw cycle day of ``target_date``, or None without a period start."""
        last_start = last_period_start(history)
        if last_start is None:
            return None
        return cycle_day(last_start, target_date)

    def phase_calendar(
        self,
        history: Sequence[CycleRecord],
        start: date,
        end: date,
    ) -> dict[date, CyclePhase]:
        """Return the most likely phase for every day from ``start`` to ``end``.

        Args:
            history: Cycle records in any order.
            start:   First day (inclusive).
            end:     Last day (inclusive).

        Returns:
            Ordered mapping of date → dominant phase.  Empty for an empty history.

        Raises:
            ValueError: If ``end`` is before ``start``.
        """
        if end < start:
            raise ValueError(f"Calendar end {end} is before start {start}")
        if not history:
            return {}

        calendar: dict[date, CyclePhase] = {}
        for offset in range((end - start).days + 1):
            day = start + timedelta(days=offset)
            calendar[day] = dominant_phase(self.predict_phase(history, day)).phase
        return calendar

    def summarize(self, history: Sequence[CycleRecord]) -> CycleSummary:
        """Collect the history-level statistics for display."""
        return CycleSummary(
            last_period_start=last_period_start(history),
            valid_cycle_lengths=valid_cycle_lengths(history, self._config),
            average_cycle_length=average_cycle_length(history, self._config),
            next_period_start=predict_next_period(history, self._config),
            regularity=cycle_regularity(history, self._config),
        )


def predict_phase(
    history: Sequence[CycleRecord],
    target_date: date,
    current_symptoms: Sequence[SymptomObservation] | None = None,
    basal_temp: float | None = None,
    lh_test_positive: bool | None = None,
) -> list[PhaseProbability]:
    """Estimate phase probabilities with the built-in engine defaults.

    See ``PhaseEstimator.predict_phase``.
    """
    return PhaseEstimator().predict_phase(
        history,
        target_date,
        current_symptoms=current_symptoms,
        basal_temp=basal_temp,
        lh_test_positive=lh_test_positive,
    )
