"""One-call entry point combining generation, analysis and calendar projection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from src.cycles.calendar_projector import CalendarProjection, CalendarProjector
from src.cycles.config_loader import MoodModelConfig, get_mood_model_config
from src.cycles.dates import parse_reference_date
from src.cycles.scenario_analyzer import AnalysisResult, ScenarioAnalyzer
from src.cycles.scenario_generator import CycleScenario, GenerationResult, ScenarioGenerator

logger = logging.getLogger("moodcycle.cycles.service")


@dataclass(frozen=True)
class MoodCycleReport:
    """Everything computed for one reference date."""

    input_date: date
    generation: GenerationResult
    analysis: AnalysisResult
    calendar_data: CalendarProjection

    @property
    def scenarios(self) -> tuple[CycleScenario, ...]:
        return self.generation.scenarios

    @property
    def total_scenarios(self) -> int:
        return self.generation.total_scenarios


class MoodCycleService:
    """Compose the generator, analyzer and projector for a single request.

    Usage::

        report = MoodCycleService().analyze("2024-06-15")
        report.analysis.best_mood_dates
    """

    def __init__(self, config: MoodModelConfig | None = None) -> None:
        self._config = config or get_mood_model_config()
        self.generator = ScenarioGenerator(self._config)
        self.analyzer = ScenarioAnalyzer(self._config)
        self.projector = CalendarProjector(self._config)

    def analyze(self, reference_date: date | str | None) -> MoodCycleReport:
        """Run the full pipeline for ``reference_date``.

        Raises:
            InvalidDateError: If the reference date cannot be parsed.  Nothing
                is computed in that case.
        """
        reference = parse_reference_date(reference_date)
        generation = self.generator.generate(reference)
        analysis = self.analyzer.analyze(generation)
        calendar_data = self.projector.project(reference)
        logger.info(
            "Mood cycle report for %s: %d scenarios, %d dates analyzed",
            reference.isoformat(),
            generation.total_scenarios,
            analysis.total_dates_analyzed,
        )
        return MoodCycleReport(
            input_date=reference,
            generation=generation,
            analysis=analysis,
            calendar_data=calendar_data,
        )
