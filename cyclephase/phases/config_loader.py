"""Load, validate, and hot-reload the phase engine configuration.

The config lives in ``engine_config.yaml`` alongside this module.  At startup
it is loaded once and cached.  Call ``reload_engine_config()`` to re-read from
disk after an update — no restart required.

Usage::

    from cyclephase.phases.config_loader import get_engine_config

    config = get_engine_config()
    config.cycle_length.default_days        # 28
    config.confidence.label_for(0.72)       # 'high'
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("cyclephase.phases.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "engine_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CycleLengthConfig:
    """Cycle length averaging settings.

    Deltas between consecutive period starts count as valid cycles only when
    strictly between the two bounds.
    """

    default_days: int = 28
    valid_min_exclusive: int = 20
    valid_max_exclusive: int = 40

    def is_valid(self, length: int) -> bool:
        return self.valid_min_exclusive < length < self.valid_max_exclusive


@dataclass(frozen=True)
class ConfidenceConfig:
    """Confidence label thresholds and the fixed interval half-width."""

    high_threshold: float = 0.7
    medium_threshold: float = 0.4
    interval_margin: float = 0.15

    def label_for(self, probability: float) -> str:
        if probability >= self.high_threshold:
            return "high"
        if probability >= self.medium_threshold:
            return "medium"
        return "low"

    def interval_for(self, probability: float) -> tuple[float, float]:
        return (
            max(0.0, probability - self.interval_margin),
            min(1.0, probability + self.interval_margin),
        )


@dataclass(frozen=True)
class TemperatureConfig:
    """Basal body temperature reference."""

    baseline_c: float = 36.5


@dataclass(frozen=True)
class RegularityConfig:
    """Cycle regularity scoring settings."""

    min_period_records: int = 3
    min_valid_cycles: int = 2
    std_scale_days: float = 7.0
    neutral_score: float = 0.5


@dataclass(frozen=True)
class CalendarConfig:
    """Limits for day-by-day phase calendars."""

    max_span_days: int = 366


@dataclass(frozen=True)
class EngineConfig:
    """Complete, validated engine configuration.

    This is the single in-memory representation of engine_config.yaml.
    The estimator and history helpers read from this object.

    Attributes:
        version:       Config schema version string.
        cycle_length:  Average cycle length fallback and validity bounds.
        confidence:    Confidence label thresholds and interval margin.
        temperature:   BBT baseline.
        regularity:    Regularity score settings.
        calendar:      Phase calendar limits.
    """

    version: str = "1.0"
    cycle_length: CycleLengthConfig = field(default_factory=CycleLengthConfig)
    confidence: ConfidenceConfig = field(default_factory=ConfidenceConfig)
    temperature: TemperatureConfig = field(default_factory=TemperatureConfig)
    regularity: RegularityConfig = field(default_factory=RegularityConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    _raw: dict = field(default_factory=dict, repr=False, compare=False)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when engine_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Engine config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            loaded = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"{path} must contain a mapping at the top level")
    return loaded


def _validate_and_build(raw: dict) -> EngineConfig:
    """Validate the raw YAML dict and construct an EngineConfig.

    Missing keys fall back to the dataclass defaults.  Every problem found is
    collected and reported together.

    Args:
        raw: Parsed YAML dict.

    Returns:
        Validated EngineConfig instance.

    Raises:
        ConfigValidationError: If any field is missing a usable value.
    """
    errors: list[str] = []

    def _section(key: str) -> dict:
        value = raw.get(key) or {}
        if not isinstance(value, dict):
            errors.append(f"'{key}' must be a mapping, got {type(value).__name__}")
            return {}
        return value

    def _number(section: dict, key: str, name: str, default: Any, cast: type) -> Any:
        value = section.get(key, default)
        try:
            return cast(value)
        except (TypeError, ValueError):
            errors.append(f"{name}.{key} must be a number, got {value!r}")
            return default

    version = str(raw.get("version", "1.0"))

    # ── Cycle length ──
    cl_raw = _section("cycle_length")
    cl_default = CycleLengthConfig()
    cycle_length = CycleLengthConfig(
        default_days=_number(cl_raw, "default_days", "cycle_length", cl_default.default_days, int),
        valid_min_exclusive=_number(
            cl_raw, "valid_min_exclusive", "cycle_length", cl_default.valid_min_exclusive, int
        ),
        valid_max_exclusive=_number(
            cl_raw, "valid_max_exclusive", "cycle_length", cl_default.valid_max_exclusive, int
        ),
    )
    if cycle_length.valid_min_exclusive >= cycle_length.valid_max_exclusive:
        errors.append(
            "cycle_length.valid_min_exclusive must be below valid_max_exclusive "
            f"({cycle_length.valid_min_exclusive} >= {cycle_length.valid_max_exclusive})"
        )
    if cycle_length.default_days < 1:
        errors.append(f"cycle_length.default_days must be positive, got {cycle_length.default_days}")
    elif not cycle_length.is_valid(cycle_length.default_days):
        logger.warning(
            "cycle_length.default_days=%d lies outside the valid cycle range (%d, %d)",
            cycle_length.default_days,
            cycle_length.valid_min_exclusive,
            cycle_length.valid_max_exclusive,
        )

    # ── Confidence ──
    cf_raw = _section("confidence")
    cf_default = ConfidenceConfig()
    confidence = ConfidenceConfig(
        high_threshold=_number(cf_raw, "high_threshold", "confidence", cf_default.high_threshold, float),
        medium_threshold=_number(
            cf_raw, "medium_threshold", "confidence", cf_default.medium_threshold, float
        ),
        interval_margin=_number(cf_raw, "interval_margin", "confidence", cf_default.interval_margin, float),
    )
    for key in ("high_threshold", "medium_threshold", "interval_margin"):
        value = getattr(confidence, key)
        if not (0.0 <= value <= 1.0):
            errors.append(f"confidence.{key} = {value} is out of range [0.0, 1.0]")
    if confidence.medium_threshold > confidence.high_threshold:
        errors.append(
            "confidence.medium_threshold must not exceed high_threshold "
            f"({confidence.medium_threshold} > {confidence.high_threshold})"
        )

    # ── Temperature ──
    tp_raw = _section("temperature")
    temperature = TemperatureConfig(
        baseline_c=_number(tp_raw, "baseline_c", "temperature", TemperatureConfig().baseline_c, float),
    )

    # ── Regularity ──
    rg_raw = _section("regularity")
    rg_default = RegularityConfig()
    regularity = RegularityConfig(
        min_period_records=_number(
            rg_raw, "min_period_records", "regularity", rg_default.min_period_records, int
        ),
        min_valid_cycles=_number(rg_raw, "min_valid_cycles", "regularity", rg_default.min_valid_cycles, int),
        std_scale_days=_number(rg_raw, "std_scale_days", "regularity", rg_default.std_scale_days, float),
        neutral_score=_number(rg_raw, "neutral_score", "regularity", rg_default.neutral_score, float),
    )
    if regularity.std_scale_days <= 0:
        errors.append(f"regularity.std_scale_days must be positive, got {regularity.std_scale_days}")
    if regularity.min_valid_cycles < 1:
        errors.append(f"regularity.min_valid_cycles must be at least 1, got {regularity.min_valid_cycles}")
    if not (0.0 <= regularity.neutral_score <= 1.0):
        errors.append(f"regularity.neutral_score = {regularity.neutral_score} is out of range [0.0, 1.0]")

    # ── Calendar ──
    ca_raw = _section("calendar")
    calendar = CalendarConfig(
        max_span_days=_number(ca_raw, "max_span_days", "calendar", CalendarConfig().max_span_days, int),
    )
    if calendar.max_span_days < 1:
        errors.append(f"calendar.max_span_days must be positive, got {calendar.max_span_days}")

    if errors:
        raise ConfigValidationError(
            f"engine_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return EngineConfig(
        version=version,
        cycle_length=cycle_length,
        confidence=confidence,
        temperature=temperature,
        regularity=regularity,
        calendar=calendar,
        _raw=raw,
    )


def load_engine_config(path: Path | None = None) -> EngineConfig:
    """Load and validate the engine config from disk.

    Args:
        path: Override path to YAML. Uses the bundled engine_config.yaml by default.

    Returns:
        Validated EngineConfig instance.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded engine config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: EngineConfig | None = None
_config_lock = threading.Lock()


def get_engine_config() -> EngineConfig:
    """Return the global EngineConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_engine_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_engine_config()
    return _config


def reload_engine_config(path: Path | None = None) -> EngineConfig:
    """Reload the engine config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Args:
        path: Override path to YAML. Defaults to bundled engine_config.yaml.

    Returns:
        The newly loaded EngineConfig.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_engine_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded engine config: %s → %s", old_version, new_config.version)
    return new_config
