"""Generate every cycle hypothesis for a single known date.

Given one reference date we do not know which day of the cycle it falls on,
so all 28 possibilities are produced.  Scenario N assumes the reference date
is day N, which fixes the cycle start at ``reference - (N - 1)`` days.

Mood follows a fixed arithmetic progression over the day-in-cycle:

- days 1..14 ascend from ``mood_min`` in steps of (peak - min) / 13
- days 15..28 descend from ``mood_peak`` by the same step

so the mood of a day depends only on its index, never on the calendar date.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from src.cycles.config_loader import MoodModelConfig, get_mood_model_config
from src.cycles.dates import add_days, parse_reference_date

logger = logging.getLogger("moodcycle.cycles.scenario_generator")

_TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class MoodDay:
    """One day of a scenario's mood progression.

    Attributes:
        day:  Day-in-cycle (1-indexed).
        mood: Mood value rounded to 2 decimal places.
        date: Calendar date of this day under the owning scenario.
    """

    day: int
    mood: float
    date: date


@dataclass(frozen=True)
class CycleScenario:
    """Hypothesis "the reference date is day N of the cycle".

    Attributes:
        day_in_cycle:     N, the assumed position of the reference date.
        cycle_start:      Reference date minus (N - 1) days.
        cycle_end:        Cycle start plus (cycle length - 1) days.
        input_date_mood:  Mood on the reference date under this hypothesis.
        input_date_level: Qualitative label for ``input_date_mood``.
        input_date_phase: Phase label for day N.
        input_date_description: Mood description of the phase containing day N.
        mood_progression: One MoodDay per day of the cycle.
        peak_day:         Day with the highest mood (first occurrence).
        peak_mood:        Mood on ``peak_day``.
        peak_date:        Calendar date of ``peak_day``.
        low_mood:         The model's mood floor.
        summary:          One-sentence description of the scenario.
        calculations:     Step-by-step derivation, one line per entry.
    """

    day_in_cycle: int
    cycle_start: date
    cycle_end: date
    input_date_mood: float
    input_date_level: str
    input_date_phase: str
    input_date_description: str
    mood_progression: tuple[MoodDay, ...]
    peak_day: int
    peak_mood: float
    peak_date: date
    low_mood: float
    summary: str
    calculations: tuple[str, ...] = field(default=(), repr=False)


@dataclass(frozen=True)
class GenerationResult:
    """All cycle hypotheses for one reference date."""

    reference_date: date
    scenarios: tuple[CycleScenario, ...]

    @property
    def total_scenarios(self) -> int:
        return len(self.scenarios)


def round_mood(value: float) -> float:
    """Round to 2 decimal places, halves away from zero."""
    return float(Decimal(repr(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


class ScenarioGenerator:
    """Build the 28 cycle scenarios for a reference date.

    Usage::

        generator = ScenarioGenerator()
        result = generator.generate("2024-06-15")
        result.scenarios[14].input_date_mood   # 85.0
    """

    def __init__(self, config: MoodModelConfig | None = None) -> None:
        self._config = config or get_mood_model_config()

    def mood_for_day(self, day: int) -> float:
        """Return the rounded mood for a day-in-cycle.

        Args:
            day: Day-in-cycle, 1..cycle_length.
        """
        cfg = self._config
        step = cfg.mood_step
        if day <= cfg.ascending_days:
            mood = cfg.mood_min + (day - 1) * step
        else:
            mood = cfg.mood_peak - (day - cfg.ascending_days - 1) * step
        return round_mood(mood)

    def mood_curve(self) -> list[float]:
        """Rounded mood for every day of the cycle, index 0 = day 1."""
        return [self.mood_for_day(d) for d in range(1, self._config.cycle_length + 1)]

    def generate(self, reference_date: date | str | None) -> GenerationResult:
        """Generate one scenario per possible day-in-cycle.

        Args:
            reference_date: The known date, as a ``date`` or ``YYYY-MM-DD``.

        Returns:
            GenerationResult whose ``scenarios[i].day_in_cycle == i + 1``.

        Raises:
            InvalidDateError: If the reference date cannot be parsed.
        """
        reference = parse_reference_date(reference_date)
        curve = self.mood_curve()
        scenarios = tuple(
            self._build_scenario(reference, n, curve)
            for n in range(1, self._config.cycle_length + 1)
        )
        logger.debug(
            "Generated %d scenarios for %s", len(scenarios), reference.isoformat()
        )
        return GenerationResult(reference_date=reference, scenarios=scenarios)

    def _build_scenario(
        self, reference: date, day_in_cycle: int, curve: list[float]
    ) -> CycleScenario:
        cfg = self._config
        cycle_start = add_days(reference, -(day_in_cycle - 1))
        cycle_end = add_days(cycle_start, cfg.cycle_length - 1)

        progression = tuple(
            MoodDay(day=d, mood=mood, date=add_days(cycle_start, d - 1))
            for d, mood in enumerate(curve, start=1)
        )

        # Strictly greater: the first of several equal maxima wins
        peak = progression[0]
        for entry in progression[1:]:
            if entry.mood > peak.mood:
                peak = entry

        input_mood = progression[day_in_cycle - 1].mood
        level = cfg.level_for_mood(input_mood)
        phase = cfg.phase_for_day(day_in_cycle)
        summary = (
            f"In this scenario: {reference.isoformat()} (day {day_in_cycle} of cycle), "
            f"mood = {input_mood:.2f} → {level}"
        )

        return CycleScenario(
            day_in_cycle=day_in_cycle,
            cycle_start=cycle_start,
            cycle_end=cycle_end,
            input_date_mood=input_mood,
            input_date_level=level,
            input_date_phase=phase.label,
            input_date_description=phase.description,
            mood_progression=progression,
            peak_day=peak.day,
            peak_mood=peak.mood,
            peak_date=peak.date,
            low_mood=cfg.mood_min,
            summary=summary,
            calculations=self._calculation_trace(
                reference, day_in_cycle, cycle_start, cycle_end, progression
            ),
        )

    def _calculation_trace(
        self,
        reference: date,
        day_in_cycle: int,
        cycle_start: date,
        cycle_end: date,
        progression: tuple[MoodDay, ...],
    ) -> tuple[str, ...]:
        """Human-readable derivation of a scenario, as shown in the detail view."""
        cfg = self._config
        step = cfg.mood_step
        half = cfg.ascending_days
        lines = [
            f"Scenario: {reference.isoformat()} is Day {day_in_cycle} of the cycle",
            f"Calculated Cycle Start: {cycle_start.isoformat()}",
            f"Calculated Cycle End: {cycle_end.isoformat()}",
            f"Cycle Length: {cfg.cycle_length} days",
            f"Mood Range: {cfg.mood_min} to {cfg.mood_peak}",
            f"Step Calculation: ({cfg.mood_peak} - {cfg.mood_min}) / {half - 1} = {step:.4f}",
            "",
            "Arithmetic Progression Formula:",
            f"Days 1-{half} (ascending): mood = {cfg.mood_min} + (day-1) × {step:.4f}",
            f"Days {half + 1}-{cfg.cycle_length} (descending): "
            f"mood = {cfg.mood_peak} - (day-{half + 1}) × {step:.4f}",
            "",
            "Individual Day Calculations:",
        ]
        for entry in progression:
            phase = "ascending" if entry.day <= half else "descending"
            lines.append(
                f"Day {entry.day} ({entry.date.isoformat()}): {entry.mood:.2f} ({phase})"
            )
        return tuple(lines)
