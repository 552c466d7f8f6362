"""Project whole 28-day cycle windows around a reference date.

The projection is a fixed window of contiguous cycles: three before the
reference, the one starting on it, and two after.  Windows are offset from
the reference date itself, not from any scenario's cycle start.

``classify`` and ``month_overlay`` implement the calendar overlay that reads
the projection: each date is matched to the first window containing it and
coloured by its day-in-cycle.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date

from src.cycles.config_loader import MoodModelConfig, get_mood_model_config
from src.cycles.dates import add_days, day_in_cycle, parse_reference_date

logger = logging.getLogger("moodcycle.cycles.calendar_projector")

OUTSIDE = "outside"
NORMAL = "normal"


@dataclass(frozen=True)
class CycleWindowEntry:
    """One projected cycle; ``cycle_number`` is a 1-based display label."""

    start_date: date
    end_date: date
    cycle_number: int


@dataclass(frozen=True)
class CalendarProjection:
    reference_date: date
    cycles: tuple[CycleWindowEntry, ...]

    @property
    def total_cycles(self) -> int:
        return len(self.cycles)


@dataclass(frozen=True)
class DayClassification:
    """Overlay type for one calendar date.

    Attributes:
        date: The classified date.
        type: A highlighted phase name ('menstrual', 'ovulation', 'pms'),
              'normal' for any other in-window day, or 'outside'.
        day:  Day-in-cycle within the matched window, 0 when outside.
    """

    date: date
    type: str
    day: int


class CalendarProjector:
    """Build the calendar window and classify dates against it."""

    def __init__(self, config: MoodModelConfig | None = None) -> None:
        self._config = config or get_mood_model_config()

    def project(self, reference_date: date | str | None) -> CalendarProjection:
        """Return the contiguous cycle windows around ``reference_date``.

        Raises:
            InvalidDateError: If the reference date cannot be parsed.
        """
        reference = parse_reference_date(reference_date)
        length = self._config.cycle_length
        window = self._config.calendar

        cycles = []
        for offset in range(-window.past_cycles, window.future_cycles + 1):
            start = add_days(reference, offset * length)
            cycles.append(
                CycleWindowEntry(
                    start_date=start,
                    end_date=add_days(start, length - 1),
                    cycle_number=offset + window.past_cycles + 1,
                )
            )
        return CalendarProjection(reference_date=reference, cycles=tuple(cycles))

    def classify(self, day: date, projection: CalendarProjection) -> DayClassification:
        """Classify ``day`` by the first projected window that contains it."""
        for window in projection.cycles:
            if window.start_date <= day <= window.end_date:
                position = day_in_cycle(window.start_date, day)
                band = self._config.phase_for_day(position)
                kind = band.name if band.highlight else NORMAL
                return DayClassification(date=day, type=kind, day=position)
        return DayClassification(date=day, type=OUTSIDE, day=0)

    def month_overlay(
        self, projection: CalendarProjection, year: int, month: int
    ) -> list[DayClassification]:
        """Classify every day of ``year``-``month`` against ``projection``.

        Raises:
            ValueError: If ``month`` is not 1..12.
        """
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be 1..12, got {month}")
        _, days_in_month = calendar.monthrange(year, month)
        overlay = [
            self.classify(date(year, month, d), projection)
            for d in range(1, days_in_month + 1)
        ]
        logger.debug(
            "Built %04d-%02d overlay for reference %s",
            year,
            month,
            projection.reference_date.isoformat(),
        )
        return overlay
