"""Domain types for the phase engine.

Inputs (``CycleRecord``, ``SymptomObservation``) arrive already decrypted and
deserialized; outputs (``PhaseProbability``) are built fresh per query.  All
of them are frozen so the engine can hand them around without copying.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum


class CyclePhase(str, Enum):
    """The four mutually exclusive cycle phases, in canonical order."""

    menstrual = "menstrual"
    follicular = "follicular"
    ovulation = "ovulation"
    luteal = "luteal"


PHASE_ORDER: tuple[CyclePhase, ...] = tuple(CyclePhase)


class Confidence(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class SymptomSeverity(IntEnum):
    """Severity levels as logged by the symptom tracker."""

    NONE = 0
    MILD = 1
    MODERATE = 2
    SEVERE = 3
    CRITICAL = 4

    @classmethod
    def from_label(cls, label: str) -> "SymptomSeverity":
        """Map a tracker label ('none', 'mild', ...) to a severity level.

        Anything past 'severe' is treated as critical.
        """
        try:
            return cls[label.strip().upper()]
        except KeyError:
            return cls.CRITICAL


@dataclass(frozen=True)
class SymptomObservation:
    """A single logged symptom.

    Attributes:
        name:     Free-form symptom name ('Cramps', 'Ovulation pain', ...).
        severity: 0–4, see ``SymptomSeverity``.
        category: Free-form category; 'bleeding' and 'mood' carry meaning.
        date:     Day the symptom was logged.
    """

    name: str
    severity: int
    category: str
    date: date

    def name_contains(self, *fragments: str) -> bool:
        lowered = self.name.lower()
        return any(fragment in lowered for fragment in fragments)


@dataclass(frozen=True)
class CycleRecord:
    """One historical entry from the user's cycle log.

    Attributes:
        period_start:     First day of menstruation.  Records without one are
                          ignored by every history computation.
        period_end:       Last day of menstruation (optional).
        cycle_length:     User-entered cycle length in days (optional,
                          informational; lengths are derived from starts).
        symptoms:         Symptoms logged with this entry.
        basal_temp:       Basal body temperature in °C.
        lh_test_positive: LH ovulation test result.
        date:             The record's reference date.
    """

    period_start: date | None
    period_end: date | None = None
    cycle_length: int | None = None
    symptoms: tuple[SymptomObservation, ...] = ()
    basal_temp: float | None = None
    lh_test_positive: bool | None = None
    date: date | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.symptoms, tuple):
            object.__setattr__(self, "symptoms", tuple(self.symptoms))


@dataclass(frozen=True)
class PhaseProbability:
    """Estimated probability of one phase on the target date.

    Attributes:
        phase:               The phase.
        probability:         0.0–1.0; the four values of a query sum to 1.
        confidence:          Qualitative label derived from ``probability``.
        confidence_interval: (lower, upper), a fixed band clamped to [0, 1].
    """

    phase: CyclePhase
    probability: float
    confidence: Confidence
    confidence_interval: tuple[float, float] = field(default=(0.0, 1.0))


@dataclass(frozen=True)
class CycleSummary:
    """History-level statistics shown next to the phase estimate.

    Attributes:
        last_period_start:    Most recent period start, if any.
        valid_cycle_lengths:  Deltas between consecutive starts inside the
                              valid range, oldest first.
        average_cycle_length: Rounded mean of the valid lengths (or the default).
        next_period_start:    ``last_period_start + average_cycle_length``.
        regularity:           0.0–1.0, 0.5 when there is too little data.
    """

    last_period_start: date | None
    valid_cycle_lengths: list[int]
    average_cycle_length: int
    next_period_start: date | None
    regularity: float
