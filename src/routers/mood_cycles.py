"""Mood cycle endpoints: full analysis, scenarios, and calendar projection.

All computation happens in ``src.cycles``; these handlers only parse input,
map ``InvalidDateError`` to a 422, and serialize the result.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from src.cycles.dates import InvalidDateError
from src.dependencies import MoodCycles
from src.models.base import ErrorDetail
from src.models.mood_cycles import (
    AnalyzeRequest,
    AnalyzeResponse,
    CalendarRead,
    DayClassificationRead,
    MonthOverlayRead,
    ScenariosRead,
)

router = APIRouter(
    prefix="/mood-cycles",
    tags=["mood cycles"],
    responses={422: {"model": ErrorDetail, "description": "Invalid reference date"}},
)
logger = logging.getLogger("moodcycle.routers.mood_cycles")


def _invalid_date(exc: InvalidDateError) -> HTTPException:
    logger.info("Rejected mood cycle request: %s", exc)
    return HTTPException(status_code=422, detail=str(exc))


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(service: MoodCycles, body: AnalyzeRequest) -> Any:
    """All 28 scenarios, the cross-scenario analysis and the calendar window."""
    try:
        report = service.analyze(body.date)
    except InvalidDateError as exc:
        raise _invalid_date(exc) from exc
    return AnalyzeResponse.model_validate(report)


@router.get("/scenarios", response_model=ScenariosRead)
async def list_scenarios(
    service: MoodCycles,
    date: str = Query(..., description="Known date, YYYY-MM-DD"),
) -> Any:
    try:
        generation = service.generator.generate(date)
    except InvalidDateError as exc:
        raise _invalid_date(exc) from exc
    return ScenariosRead.model_validate(generation)


@router.get("/calendar", response_model=CalendarRead)
async def get_calendar(
    service: MoodCycles,
    date: str = Query(..., description="Reference date, YYYY-MM-DD"),
) -> Any:
    try:
        projection = service.projector.project(date)
    except InvalidDateError as exc:
        raise _invalid_date(exc) from exc
    return CalendarRead.model_validate(projection)


@router.get("/calendar/month", response_model=MonthOverlayRead)
async def get_month_overlay(
    service: MoodCycles,
    date: str = Query(..., description="Reference date, YYYY-MM-DD"),
    year: int = Query(..., ge=1, le=9999),
    month: int = Query(..., ge=1, le=12),
) -> Any:
    """Day-by-day overlay of one calendar month against the projected cycles."""
    try:
        projection = service.projector.project(date)
    except InvalidDateError as exc:
        raise _invalid_date(exc) from exc
    days = service.projector.month_overlay(projection, year, month)
    return MonthOverlayRead(
        reference_date=projection.reference_date,
        year=year,
        month=month,
        days=[DayClassificationRead.model_validate(d) for d in days],
    )
