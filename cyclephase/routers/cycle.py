"""Stateless cycle phase endpoints: phase estimate, history summary, phase calendar.

Every request carries the full history; nothing is read from or written to
storage, and no health data is logged.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from cyclephase.dependencies import Estimator
from cyclephase.models.base import ErrorDetail
from cyclephase.models.cycle import (
    CalendarDay,
    CycleSummaryRead,
    HistoryRequest,
    PhaseCalendarRequest,
    PhaseCalendarResponse,
    PhasePredictionRequest,
    PhasePredictionResponse,
    PhaseProbabilityRead,
)
from cyclephase.phases.estimator import dominant_phase

router = APIRouter(prefix="/cycle", tags=["cycle"])
logger = logging.getLogger("cyclephase.routers.cycle")


@router.post("/phase", response_model=PhasePredictionResponse)
async def predict_phase(body: PhasePredictionRequest, estimator: Estimator) -> Any:
    history = body.records()
    probabilities = estimator.predict_phase(
        history,
        body.target_date,
        current_symptoms=body.symptom_observations(),
        basal_temp=body.basal_temp,
        lh_test_positive=body.lh_test_positive,
    )
    return PhasePredictionResponse(
        target_date=body.target_date,
        cycle_day=estimator.cycle_day_for(history, body.target_date),
        dominant_phase=dominant_phase(probabilities).phase,
        phases=[PhaseProbabilityRead.model_validate(p) for p in probabilities],
    )


@router.post("/summary", response_model=CycleSummaryRead)
async def summarize_history(body: HistoryRequest, estimator: Estimator) -> Any:
    return CycleSummaryRead.model_validate(estimator.summarize(body.records()))


@router.post(
    "/calendar",
    response_model=PhaseCalendarResponse,
    responses={422: {"model": ErrorDetail}},
)
async def phase_calendar(body: PhaseCalendarRequest, estimator: Estimator) -> Any:
    span = (body.end_date - body.start_date).days + 1
    max_span = estimator.config.calendar.max_span_days
    if span > max_span:
        raise HTTPException(
            status_code=422,
            detail=f"Calendar span of {span} days exceeds the {max_span}-day maximum",
        )

    calendar = estimator.phase_calendar(body.records(), body.start_date, body.end_date)
    logger.debug("Built %d-day phase calendar", len(calendar))
    return PhaseCalendarResponse(
        days=[CalendarDay(date=day, phase=phase) for day, phase in calendar.items()]
    )
