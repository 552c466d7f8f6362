"""Mood cycle scenario engine.

Given one known date, this package considers every day-in-cycle that date
could be, derives a mood progression for each hypothesis, and aggregates the
results into notable dates and a calendar overlay.

Core modules:
    dates              — Reference date parsing and whole-day arithmetic
    config_loader      — Load/validate/hot-reload mood_model.yaml
    scenario_generator — The 28 cycle hypotheses and their mood progressions
    scenario_analyzer  — Cross-scenario peak/trough dates
    calendar_projector — Contiguous cycle windows and calendar overlay
    service            — One-call pipeline used by the API
"""

from src.cycles.calendar_projector import (
    CalendarProjection,
    CalendarProjector,
    CycleWindowEntry,
    DayClassification,
)
from src.cycles.config_loader import MoodModelConfig, get_mood_model_config
from src.cycles.dates import InvalidDateError, parse_reference_date
from src.cycles.scenario_analyzer import AnalysisResult, ScenarioAnalyzer, SpecialDateEntry
from src.cycles.scenario_generator import (
    CycleScenario,
    GenerationResult,
    MoodDay,
    ScenarioGenerator,
)
from src.cycles.service import MoodCycleReport, MoodCycleService

__all__ = [
    "InvalidDateError",
    "parse_reference_date",
    "MoodModelConfig",
    "get_mood_model_config",
    "ScenarioGenerator",
    "GenerationResult",
    "CycleScenario",
    "MoodDay",
    "ScenarioAnalyzer",
    "AnalysisResult",
    "SpecialDateEntry",
    "CalendarProjector",
    "CalendarProjection",
    "CycleWindowEntry",
    "DayClassification",
    "MoodCycleService",
    "MoodCycleReport",
]
