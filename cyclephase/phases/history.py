"""Cycle history statistics.

Works on the raw list of ``CycleRecord`` entries the caller fetched from
storage.  Nothing here assumes the list is sorted or deduplicated:
records are ordered by ``period_start`` on every call, and records without a
period start are skipped.
"""

from __future__ import annotations

import logging
import math
import statistics
from datetime import date, timedelta
from typing import Sequence

from cyclephase.phases.config_loader import EngineConfig
from cyclephase.phases.models import CycleRecord

logger = logging.getLogger("cyclephase.phases.history")


def cycle_day(last_period_start: date, target_date: date) -> int:
    """Return the cycle day of ``target_date``.

    Day 1 = first day of period.  Dates before the period start yield zero or
    negative numbers; callers decide what that means.
    """
    return (target_date - last_period_start).days + 1


def _period_starts(history: Sequence[CycleRecord]) -> list[date]:
    return sorted(r.period_start for r in history if r.period_start)


def last_period_start(history: Sequence[CycleRecord]) -> date | None:
    """Return the most recent period start in the history, or None."""
    starts = _period_starts(history)
    return starts[-1] if starts else None


def valid_cycle_lengths(
    history: Sequence[CycleRecord],
    config: EngineConfig | None = None,
) -> list[int]:
    """Return lengths between consecutive period starts that look like real cycles.

    Deltas outside the configured bounds (missed logs, duplicate entries)
    are dropped.

    Args:
        history: Cycle records in any order.
        config:  Engine config; defaults to the built-in values.

    Returns:
        Valid cycle lengths in days, oldest first.
    """
    bounds = (config or EngineConfig()).cycle_length
    starts = _period_starts(history)
    return [
        length
        for length in ((later - earlier).days for earlier, later in zip(starts, starts[1:]))
        if bounds.is_valid(length)
    ]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def average_cycle_length(
    history: Sequence[CycleRecord],
    config: EngineConfig | None = None,
) -> int:
    """Return the user's average cycle length in whole days.

    Falls back to the configured default (28) when fewer than two records
    exist or no consecutive pair forms a valid cycle.
    """
    cfg = config or EngineConfig()
    if len(history) < 2:
        return cfg.cycle_length.default_days

    lengths = valid_cycle_lengths(history, cfg)
    if not lengths:
        logger.debug("No valid cycle lengths in %d records; using default", len(history))
        return cfg.cycle_length.default_days

    return _round_half_up(statistics.fmean(lengths))


def predict_next_period(
    history: Sequence[CycleRecord],
    config: EngineConfig | None = None,
) -> date | None:
    """Estimate the next period start as last start + average cycle length.

    Returns:
        Predicted date, or None when no record has a period start or the
        estimate falls past the last representable date.
    """
    last = last_period_start(history)
    if last is None:
        return None
    try:
        return last + timedelta(days=average_cycle_length(history, config))
    except OverflowError:
        logger.debug("Next period estimate past %s; no estimate", date.max)
        return None


def cycle_regularity(
    history: Sequence[CycleRecord],
    config: EngineConfig | None = None,
) -> float:
    """Score how regular the user's cycles are, from 0.0 to 1.0.

    Uses the population standard deviation of valid cycle lengths: a spread
    of 0 days scores 1.0 and a spread of ``std_scale_days`` (7) or more
    scores 0.0.  With fewer than three period records, or fewer than two valid
    cycles, returns the neutral score 0.5.
    """
    rc = (config or EngineConfig()).regularity
    if len(history) < rc.min_period_records:
        return rc.neutral_score
    if len(_period_starts(history)) < rc.min_period_records:
        return rc.neutral_score

    lengths = valid_cycle_lengths(history, config)
    if len(lengths) < rc.min_valid_cycles:
        return rc.neutral_score

    std_dev = statistics.pstdev(lengths)
    regularity = max(0.0, 1.0 - std_dev / rc.std_scale_days)
    return min(1.0, regularity)
