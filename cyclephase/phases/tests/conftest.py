"""Shared fixtures for phase engine tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from cyclephase.phases.config_loader import EngineConfig, load_engine_config
from cyclephase.phases.estimator import PhaseEstimator
from cyclephase.phases.models import CycleRecord, SymptomObservation

TEST_PERIOD_START = date(2024, 1, 1)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_record(period_start: date | None, **kwargs) -> CycleRecord:
    return CycleRecord(period_start=period_start, date=period_start, **kwargs)


def make_symptom(
    name: str,
    severity: int = 2,
    category: str = "physical",
    day: date = TEST_PERIOD_START,
) -> SymptomObservation:
    return SymptomObservation(name=name, severity=severity, category=category, date=day)


def build_history(lengths: list[int], start: date = date(2023, 6, 1)) -> list[CycleRecord]:
    """Build period records whose consecutive starts are ``lengths`` days apart."""
    records = [make_record(start)]
    for length in lengths:
        start += timedelta(days=length)
        records.append(make_record(start))
    return records


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine_config() -> EngineConfig:
    """Load the real engine config for tests."""
    return load_engine_config()


@pytest.fixture
def estimator(engine_config: EngineConfig) -> PhaseEstimator:
    return PhaseEstimator(engine_config)


@pytest.fixture
def single_period() -> list[CycleRecord]:
    """One record starting on 2024-01-01 — a 28-day default cycle."""
    return [make_record(TEST_PERIOD_START)]


@pytest.fixture
def regular_history() -> list[CycleRecord]:
    """Six periods exactly 28 days apart, the last starting on 2024-01-01."""
    return build_history([28] * 5, start=TEST_PERIOD_START - timedelta(days=28 * 5))
