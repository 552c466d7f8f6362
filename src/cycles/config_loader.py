"""Load, validate, and hot-reload the mood cycle model definition.

The definition lives in ``mood_model.yaml`` alongside this module.  It is
loaded once on first use and cached.  Call ``reload_mood_model_config()`` to
re-read it from disk.

Usage::

    from src.cycles.config_loader import get_mood_model_config

    config = get_mood_model_config()
    config.mood_step                 # 3.4615...
    config.phase_for_day(12).label   # 'Ovulation Peak'
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("moodcycle.cycles.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "mood_model.yaml"

_DIRECTIONS = ("high", "low")

# Categories the analyzer reports on; each must be declared in the YAML
REQUIRED_CATEGORIES = ("ovulation", "menstrual", "pms", "best_mood")


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PhaseBand:
    """A contiguous run of cycle days sharing one phase.

    Attributes:
        name:        Machine name ('menstrual', 'ovulation', ...).
        label:       Display label ('Ovulation Peak').
        first_day:   First day-in-cycle of the band (inclusive).
        last_day:    Last day-in-cycle of the band (inclusive).
        description: Short mood description for the phase.
        highlight:   Whether the calendar overlay reports this band by name.
    """

    name: str
    label: str
    first_day: int
    last_day: int
    description: str = ""
    highlight: bool = False

    def contains(self, day: int) -> bool:
        return self.first_day <= day <= self.last_day


@dataclass(frozen=True)
class MoodLevel:
    """Qualitative label applied to moods at or above ``min_mood``."""

    label: str
    min_mood: float


@dataclass(frozen=True)
class CategoryRule:
    """One special-date category of the cross-scenario analysis.

    Attributes:
        name:      Category key ('ovulation', 'best_mood', ...).
        phase:     Phase band whose contributions are averaged, or None to
                   average every contribution for the date.
        direction: 'high' (avg >= threshold, best first) or
                   'low' (avg <= threshold, worst first).
        threshold: Mood threshold for qualification.
    """

    name: str
    phase: PhaseBand | None
    direction: str
    threshold: float

    @property
    def descending(self) -> bool:
        return self.direction == "high"

    def accepts_day(self, day: int) -> bool:
        return self.phase is None or self.phase.contains(day)

    def qualifies(self, average: float) -> bool:
        if self.direction == "high":
            return average >= self.threshold
        return average <= self.threshold


@dataclass(frozen=True)
class CalendarWindowConfig:
    """How many whole cycles the calendar projection shows around the reference."""

    past_cycles: int = 3
    future_cycles: int = 2

    @property
    def total_cycles(self) -> int:
        return self.past_cycles + 1 + self.future_cycles


@dataclass(frozen=True)
class MoodModelConfig:
    """Complete, validated mood model definition.

    This is the single in-memory representation of mood_model.yaml.  The
    generator, analyzer and projector all read from this object.

    Attributes:
        version:      Config schema version string.
        cycle_length: Days in one cycle.
        mood_min:     Mood floor (day 1 and the last day).
        mood_peak:    Mood ceiling reached at the end of the ascending run.
        levels:       Qualitative mood labels, highest threshold first.
        phases:       Canonical day-in-cycle band table, ordered by day.
        categories:   Analysis category rules keyed by name.
        top_n:        Maximum entries kept per analysis category.
        calendar:     Calendar projection window.
    """

    version: str
    cycle_length: int
    mood_min: float
    mood_peak: float
    levels: tuple[MoodLevel, ...]
    phases: tuple[PhaseBand, ...]
    categories: dict[str, CategoryRule]
    top_n: int
    calendar: CalendarWindowConfig

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def ascending_days(self) -> int:
        """Length of the ascending run (days 1..N); 14 for a 28-day cycle."""
        return self.cycle_length // 2

    @property
    def mood_step(self) -> float:
        """Per-day mood change: (peak - min) / 13 for a 28-day cycle."""
        return (self.mood_peak - self.mood_min) / (self.ascending_days - 1)

    def phase_for_day(self, day: int) -> PhaseBand:
        """Return the band containing ``day``.

        Raises:
            ValueError: If ``day`` is outside 1..cycle_length.
        """
        for band in self.phases:
            if band.contains(day):
                return band
        raise ValueError(f"Day {day} is outside the {self.cycle_length}-day cycle")

    def level_for_mood(self, mood: float) -> str:
        for level in self.levels:
            if mood >= level.min_mood:
                return level.label
        return self.levels[-1].label


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when mood_model.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Mood model config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> MoodModelConfig:
    """Validate the raw YAML dict and construct a MoodModelConfig.

    All problems are collected and reported together.

    Raises:
        ConfigValidationError: If required fields are missing or inconsistent.
    """
    errors: list[str] = []

    def _number(value: Any, where: str, default: float) -> float:
        if value is None:
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            errors.append(f"{where} must be a number, got {value!r}")
            return default

    version = str(raw.get("version", "1.0"))

    # ── Cycle ──
    cycle_raw = raw.get("cycle") or {}
    cycle_length = int(_number(cycle_raw.get("length_days"), "cycle.length_days", 28))
    if cycle_length < 4 or cycle_length % 2:
        errors.append(f"cycle.length_days must be an even number >= 4, got {cycle_length}")

    # ── Mood ──
    mood_raw = raw.get("mood") or {}
    mood_min = _number(mood_raw.get("min"), "mood.min", 40.0)
    mood_peak = _number(mood_raw.get("peak"), "mood.peak", 85.0)
    if mood_peak <= mood_min:
        errors.append(f"mood.peak ({mood_peak}) must be greater than mood.min ({mood_min})")

    levels: list[MoodLevel] = []
    for i, lvl in enumerate(mood_raw.get("levels") or []):
        if not isinstance(lvl, dict) or "label" not in lvl:
            errors.append(f"mood.levels[{i}] must be a mapping with a 'label'")
            continue
        levels.append(
            MoodLevel(
                label=str(lvl["label"]),
                min_mood=_number(lvl.get("min_mood"), f"mood.levels[{i}].min_mood", 0.0),
            )
        )
    if not levels:
        errors.append("'mood.levels' section is missing or empty")
    levels.sort(key=lambda lv: lv.min_mood, reverse=True)

    # ── Phases ──
    phases: list[PhaseBand] = []
    for i, ph in enumerate(raw.get("phases") or []):
        if not isinstance(ph, dict):
            errors.append(f"phases[{i}] must be a mapping")
            continue
        missing = [k for k in ("name", "first_day", "last_day") if k not in ph]
        if missing:
            errors.append(f"phases[{i}] is missing {', '.join(missing)}")
            continue
        phases.append(
            PhaseBand(
                name=str(ph["name"]),
                label=str(ph.get("label", ph["name"])),
                first_day=int(ph["first_day"]),
                last_day=int(ph["last_day"]),
                description=str(ph.get("description", "")),
                highlight=bool(ph.get("highlight", False)),
            )
        )
    phases.sort(key=lambda b: b.first_day)

    if not phases:
        errors.append("'phases' section is missing or empty")
    else:
        expected = 1
        for band in phases:
            if band.first_day != expected:
                errors.append(
                    f"phase '{band.name}' starts on day {band.first_day}, expected day {expected}"
                )
            if band.last_day < band.first_day:
                errors.append(f"phase '{band.name}' ends before it starts")
            expected = band.last_day + 1
        if expected - 1 != cycle_length:
            errors.append(
                f"phases cover days 1..{expected - 1}, expected 1..{cycle_length}"
            )
    phases_by_name = {b.name: b for b in phases}

    # ── Analysis ──
    analysis_raw = raw.get("analysis") or {}
    top_n = int(_number(analysis_raw.get("top_n"), "analysis.top_n", 3))
    if top_n < 1:
        errors.append(f"analysis.top_n must be >= 1, got {top_n}")

    categories: dict[str, CategoryRule] = {}
    for name, cfg in (analysis_raw.get("categories") or {}).items():
        if not isinstance(cfg, dict):
            errors.append(f"analysis.categories.{name} must be a mapping")
            continue
        direction = cfg.get("direction")
        if direction not in _DIRECTIONS:
            errors.append(
                f"analysis.categories.{name}.direction must be one of {_DIRECTIONS}, "
                f"got {direction!r}"
            )
            continue
        phase = None
        if cfg.get("phase") is not None:
            phase = phases_by_name.get(cfg["phase"])
            if phase is None:
                errors.append(
                    f"analysis.categories.{name}.phase refers to unknown phase {cfg['phase']!r}"
                )
                continue
        categories[name] = CategoryRule(
            name=name,
            phase=phase,
            direction=direction,
            threshold=_number(
                cfg.get("threshold"), f"analysis.categories.{name}.threshold", 0.0
            ),
        )
    declared = analysis_raw.get("categories") or {}
    for required in REQUIRED_CATEGORIES:
        if required not in declared:
            errors.append(f"Missing required category 'analysis.categories.{required}'")

    # ── Calendar ──
    cal_raw = raw.get("calendar") or {}
    calendar = CalendarWindowConfig(
        past_cycles=int(_number(cal_raw.get("past_cycles"), "calendar.past_cycles", 3)),
        future_cycles=int(_number(cal_raw.get("future_cycles"), "calendar.future_cycles", 2)),
    )
    if calendar.past_cycles < 0 or calendar.future_cycles < 0:
        errors.append("calendar.past_cycles and calendar.future_cycles must be >= 0")

    if errors:
        raise ConfigValidationError(
            f"mood_model.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return MoodModelConfig(
        version=version,
        cycle_length=cycle_length,
        mood_min=mood_min,
        mood_peak=mood_peak,
        levels=tuple(levels),
        phases=tuple(phases),
        categories=categories,
        top_n=top_n,
        calendar=calendar,
    )


def load_mood_model_config(path: Path | None = None) -> MoodModelConfig:
    """Load and validate the mood model definition from disk.

    Args:
        path: Override path to YAML. Uses the bundled mood_model.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded mood model config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: MoodModelConfig | None = None
_config_lock = threading.Lock()


def get_mood_model_config() -> MoodModelConfig:
    """Return the global MoodModelConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_mood_model_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_mood_model_config()
    return _config


def reload_mood_model_config(path: Path | None = None) -> MoodModelConfig:
    """Reload the model definition and replace the global singleton.

    If validation fails the old config is retained and the error re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_mood_model_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded mood model config: %s → %s", old_version, new_config.version)
    return new_config
