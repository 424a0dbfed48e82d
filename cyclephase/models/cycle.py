"""Pydantic request/response models for the cycle phase endpoints.

Requests carry the caller's already-decrypted history; nothing is stored.
"""

from __future__ import annotations

import datetime as dt

from pydantic import Field, field_validator, model_validator

from cyclephase.models.base import CyclephaseBase
from cyclephase.phases.models import (
    Confidence,
    CyclePhase,
    CycleRecord,
    SymptomObservation,
    SymptomSeverity,
)


# ---------- Inputs ----------

class SymptomObservationIn(CyclephaseBase):
    name: str = Field(min_length=1)
    severity: int = Field(ge=0, le=4)
    category: str = ""
    date: dt.date

    @field_validator("severity", mode="before")
    @classmethod
    def severity_from_label(cls, value: object) -> object:
        # Tracker labels ("none" .. "critical") as well as 0-4
        if isinstance(value, str) and not value.strip().isdigit():
            return int(SymptomSeverity.from_label(value))
        return value

    def to_domain(self) -> SymptomObservation:
        return SymptomObservation(
            name=self.name,
            severity=self.severity,
            category=self.category,
            date=self.date,
        )


class CycleRecordIn(CyclephaseBase):
    period_start: dt.date | None = None
    period_end: dt.date | None = None
    cycle_length: int | None = Field(default=None, gt=0)
    symptoms: list[SymptomObservationIn] = Field(default_factory=list)
    basal_temp: float | None = None
    lh_test_positive: bool | None = None
    date: dt.date | None = None

    def to_domain(self) -> CycleRecord:
        return CycleRecord(
            period_start=self.period_start,
            period_end=self.period_end,
            cycle_length=self.cycle_length,
            symptoms=tuple(s.to_domain() for s in self.symptoms),
            basal_temp=self.basal_temp,
            lh_test_positive=self.lh_test_positive,
            date=self.date,
        )


class HistoryRequest(CyclephaseBase):
    history: list[CycleRecordIn] = Field(default_factory=list)

    def records(self) -> list[CycleRecord]:
        return [r.to_domain() for r in self.history]


class PhasePredictionRequest(HistoryRequest):
    target_date: dt.date
    current_symptoms: list[SymptomObservationIn] | None = None
    basal_temp: float | None = None
    lh_test_positive: bool | None = None

    def symptom_observations(self) -> list[SymptomObservation] | None:
        if self.current_symptoms is None:
            return None
        return [s.to_domain() for s in self.current_symptoms]


class PhaseCalendarRequest(HistoryRequest):
    start_date: dt.date
    end_date: dt.date

    @model_validator(mode="after")
    def check_range(self) -> "PhaseCalendarRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


# ---------- Outputs ----------

class PhaseProbabilityRead(CyclephaseBase):
    phase: CyclePhase
    probability: float
    confidence: Confidence
    confidence_interval: tuple[float, float]


class PhasePredictionResponse(CyclephaseBase):
    target_date: dt.date
    cycle_day: int | None = None
    dominant_phase: CyclePhase
    phases: list[PhaseProbabilityRead]


class CycleSummaryRead(CyclephaseBase):
    last_period_start: dt.date | None = None
    average_cycle_length: int
    valid_cycle_lengths: list[int]
    next_period_start: dt.date | None = None
    regularity: float


class CalendarDay(CyclephaseBase):
    date: dt.date
    phase: CyclePhase


class PhaseCalendarResponse(CyclephaseBase):
    days: list[CalendarDay]
