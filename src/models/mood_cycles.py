"""Pydantic schemas for the mood cycle API.

Responses mirror the engine's dataclasses field-for-field and are built with
``model_validate(obj)`` (``from_attributes``).  Keys are camelCase on the wire.
"""

from __future__ import annotations

import datetime

from pydantic import Field

from src.models.base import MoodCycleBase


# ---------- Requests ----------

class AnalyzeRequest(MoodCycleBase):
    # Kept as a string so the engine owns date validation
    date: str | None = Field(default=None, examples=["2024-06-15"])


# ---------- Scenarios ----------

class MoodDayRead(MoodCycleBase):
    day: int
    mood: float
    date: datetime.date


class CycleScenarioRead(MoodCycleBase):
    day_in_cycle: int
    cycle_start: datetime.date
    cycle_end: datetime.date
    input_date_mood: float
    input_date_level: str
    input_date_phase: str
    input_date_description: str
    calculations: list[str]
    mood_progression: list[MoodDayRead]
    peak_day: int
    peak_mood: float
    peak_date: datetime.date
    low_mood: float
    summary: str


class ScenariosRead(MoodCycleBase):
    reference_date: datetime.date
    scenarios: list[CycleScenarioRead]
    total_scenarios: int


# ---------- Analysis ----------

class SpecialDateRead(MoodCycleBase):
    date: datetime.date
    mood: float
    scenarios: int


class AnalysisRead(MoodCycleBase):
    ovulation_dates: list[SpecialDateRead]
    menstrual_dates: list[SpecialDateRead]
    pms_dates: list[SpecialDateRead]
    best_mood_dates: list[SpecialDateRead]
    summary: str
    total_dates_analyzed: int


# ---------- Calendar ----------

class CycleWindowRead(MoodCycleBase):
    start_date: datetime.date
    end_date: datetime.date
    cycle_number: int


class CalendarRead(MoodCycleBase):
    cycles: list[CycleWindowRead]
    total_cycles: int
    reference_date: datetime.date


class DayClassificationRead(MoodCycleBase):
    date: datetime.date
    type: str
    day: int


class MonthOverlayRead(MoodCycleBase):
    reference_date: datetime.date
    year: int
    month: int
    days: list[DayClassificationRead]


# ---------- Combined ----------

class AnalyzeResponse(MoodCycleBase):
    input_date: datetime.date
    scenarios: list[CycleScenarioRead]
    total_scenarios: int
    analysis: AnalysisRead
    calendar_data: CalendarRead
