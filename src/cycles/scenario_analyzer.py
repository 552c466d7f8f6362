"""Cross-scenario aggregation of mood by calendar date.

The 28 scenarios overlap heavily: a given calendar date is day 1 in one
scenario, day 2 in the next, and so on.  The analyzer flattens every
scenario's progression into a per-date table, averages the contributions
falling in each category's phase band, and reports the most notable dates.
"""

from __future__ import annotations

import logging
import statistics
from dataclasses import dataclass
from datetime import date
from typing import NamedTuple

from src.cycles.config_loader import CategoryRule, MoodModelConfig, get_mood_model_config
from src.cycles.scenario_generator import GenerationResult

logger = logging.getLogger("moodcycle.cycles.scenario_analyzer")


class DateContribution(NamedTuple):
    """One scenario's view of one calendar date."""

    mood: float
    day_of_cycle: int
    scenario_id: int


@dataclass(frozen=True)
class SpecialDateEntry:
    """A notable date and the average mood behind it.

    Attributes:
        date:      Calendar date.
        mood:      Average mood over the contributing scenarios.
        scenarios: Number of contributing scenarios.
    """

    date: date
    mood: float
    scenarios: int


@dataclass(frozen=True)
class AnalysisResult:
    """Notable dates across all scenarios for one reference date."""

    ovulation_dates: tuple[SpecialDateEntry, ...]
    menstrual_dates: tuple[SpecialDateEntry, ...]
    pms_dates: tuple[SpecialDateEntry, ...]
    best_mood_dates: tuple[SpecialDateEntry, ...]
    summary: str
    total_dates_analyzed: int


# Per-call aggregation table: calendar date -> contributions, in first-seen order
ContributionTable = dict[date, list[DateContribution]]


def build_contribution_table(generation: GenerationResult) -> ContributionTable:
    """Flatten every scenario's progression into a per-date table."""
    table: ContributionTable = {}
    for scenario in generation.scenarios:
        for entry in scenario.mood_progression:
            table.setdefault(entry.date, []).append(
                DateContribution(
                    mood=entry.mood,
                    day_of_cycle=entry.day,
                    scenario_id=scenario.day_in_cycle,
                )
            )
    return table


class ScenarioAnalyzer:
    """Find peak and trough dates across a set of scenarios.

    Usage::

        analysis = ScenarioAnalyzer().analyze(ScenarioGenerator().generate("2024-06-15"))
        analysis.ovulation_dates[0].date
    """

    def __init__(self, config: MoodModelConfig | None = None) -> None:
        self._config = config or get_mood_model_config()

    def analyze(self, generation: GenerationResult) -> AnalysisResult:
        """Aggregate the scenarios into per-category notable dates.

        Args:
            generation: Output of ``ScenarioGenerator.generate``.

        Returns:
            AnalysisResult with at most ``top_n`` entries per category.
        """
        table = build_contribution_table(generation)
        rules = self._config.categories

        ovulation = self._select(table, rules["ovulation"])
        menstrual = self._select(table, rules["menstrual"])
        pms = self._select(table, rules["pms"])
        best_mood = self._select(table, rules["best_mood"])

        logger.debug(
            "Analyzed %d dates for %s: %d ovulation, %d menstrual, %d pms, %d best",
            len(table),
            generation.reference_date.isoformat(),
            len(ovulation),
            len(menstrual),
            len(pms),
            len(best_mood),
        )

        return AnalysisResult(
            ovulation_dates=ovulation,
            menstrual_dates=menstrual,
            pms_dates=pms,
            best_mood_dates=best_mood,
            summary=self._summary(
                generation.total_scenarios, len(ovulation), len(menstrual), len(pms)
            ),
            total_dates_analyzed=len(table),
        )

    def _select(
        self, table: ContributionTable, rule: CategoryRule
    ) -> tuple[SpecialDateEntry, ...]:
        """Return the top entries for one category.

        Ties on mood keep the date that entered the table first.
        """
        candidates: list[tuple[int, SpecialDateEntry]] = []
        for first_seen, (day, contributions) in enumerate(table.items()):
            moods = [c.mood for c in contributions if rule.accepts_day(c.day_of_cycle)]
            if not moods:
                continue
            average = statistics.fmean(moods)
            if rule.qualifies(average):
                candidates.append(
                    (first_seen, SpecialDateEntry(date=day, mood=average, scenarios=len(moods)))
                )

        sign = -1 if rule.descending else 1
        candidates.sort(key=lambda item: (sign * item[1].mood, item[0]))
        return tuple(entry for _, entry in candidates[: self._config.top_n])

    @staticmethod
    def _summary(total_scenarios: int, ovulation: int, menstrual: int, pms: int) -> str:
        return (
            f"Based on analysis of all {total_scenarios} possible scenarios, we found "
            f"{ovulation} peak ovulation periods, {menstrual} menstrual phases, and "
            f"{pms} PMS periods. The highest mood peaks occur around days 13-15 of "
            "cycles, with optimal energy and fertility. Lowest moods typically happen "
            "during menstrual days 1-3 and pre-menstrual days 26-28."
        )
