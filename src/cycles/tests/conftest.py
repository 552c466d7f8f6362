"""Shared fixtures for the mood cycle engine and API tests."""

from __future__ import annotations

from datetime import date
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from src.config import Settings
from src.cycles.calendar_projector import CalendarProjector
from src.cycles.config_loader import (
    MoodModelConfig,
    load_mood_model_config,
    reload_mood_model_config,
)
from src.cycles.scenario_analyzer import ScenarioAnalyzer
from src.cycles.scenario_generator import GenerationResult, ScenarioGenerator

# Canonical reference date used throughout the tests
REFERENCE_DATE = date(2024, 6, 15)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mood_config() -> MoodModelConfig:
    """Load the real mood model definition for tests."""
    return load_mood_model_config()


@pytest.fixture
def restore_mood_config() -> Iterator[None]:
    """Put the bundled config back into the global singleton after a test."""
    yield
    reload_mood_model_config()


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def generator(mood_config: MoodModelConfig) -> ScenarioGenerator:
    return ScenarioGenerator(mood_config)


@pytest.fixture
def analyzer(mood_config: MoodModelConfig) -> ScenarioAnalyzer:
    return ScenarioAnalyzer(mood_config)


@pytest.fixture
def projector(mood_config: MoodModelConfig) -> CalendarProjector:
    return CalendarProjector(mood_config)


@pytest.fixture
def generation(generator: ScenarioGenerator) -> GenerationResult:
    """All 28 scenarios for REFERENCE_DATE."""
    return generator.generate(REFERENCE_DATE)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test", rate_limit_per_minute=1000)


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    from src.main import create_app

    with TestClient(create_app(settings)) as test_client:
        yield test_client
