"""Tests for the HTTP layer: analyze, scenarios, calendar, health, rate limiting."""

from __future__ import annotations

from collections import deque
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.config import Settings
from src.cycles.calendar_projector import CalendarProjector
from src.cycles.config_loader import _CONFIG_PATH, reload_mood_model_config
from src.cycles.dates import InvalidDateError
from src.cycles.service import MoodCycleService

ANALYZE_URL = "/api/v1/mood-cycles/analyze"


# ---------------------------------------------------------------------------
# In-process service
# ---------------------------------------------------------------------------


class TestMoodCycleService:
    def test_report_combines_all_parts(self, mood_config) -> None:
        report = MoodCycleService(mood_config).analyze("2024-06-15")
        assert report.total_scenarios == 28
        assert report.scenarios[14].input_date_mood == 85.0
        assert report.analysis.total_dates_analyzed == 55
        assert report.calendar_data.total_cycles == 6
        assert report.calendar_data.reference_date == report.input_date

    def test_invalid_date_produces_nothing(self, mood_config) -> None:
        with pytest.raises(InvalidDateError):
            MoodCycleService(mood_config).analyze("not-a-date")


# ---------------------------------------------------------------------------
# Analyze endpoint
# ---------------------------------------------------------------------------


class TestAnalyzeEndpoint:
    def test_full_response(self, client: TestClient) -> None:
        resp = client.post(ANALYZE_URL, json={"date": "2024-06-15"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["inputDate"] == "2024-06-15"
        assert body["totalScenarios"] == 28
        assert len(body["scenarios"]) == 28
        assert body["analysis"]["totalDatesAnalyzed"] == 55
        assert body["calendarData"]["totalCycles"] == 6
        assert body["calendarData"]["referenceDate"] == "2024-06-15"

    def test_scenario_shape(self, client: TestClient) -> None:
        body = client.post(ANALYZE_URL, json={"date": "2024-06-15"}).json()
        first = body["scenarios"][0]
        assert first["dayInCycle"] == 1
        assert first["cycleStart"] == "2024-06-15"
        assert first["cycleEnd"] == "2024-07-12"
        assert first["inputDateMood"] == 40.0
        assert first["lowMood"] == 40.0
        assert first["peakDay"] == 14
        assert first["inputDatePhase"] == "Menstrual"
        assert first["inputDateDescription"] == "Cramps, Low Energy, Emotional"
        assert first["moodProgression"][0] == {
            "day": 1,
            "mood": 40.0,
            "date": "2024-06-15",
        }
        assert len(first["calculations"]) == 40

        fifteenth = body["scenarios"][14]
        assert fifteenth["cycleStart"] == "2024-06-01"
        assert fifteenth["inputDateMood"] == 85.0

    def test_analysis_shape(self, client: TestClient) -> None:
        analysis = client.post(ANALYZE_URL, json={"date": "2024-06-15"}).json()["analysis"]
        assert set(analysis) == {
            "ovulationDates",
            "menstrualDates",
            "pmsDates",
            "bestMoodDates",
            "summary",
            "totalDatesAnalyzed",
        }
        assert analysis["ovulationDates"][0]["date"] == "2024-06-28"
        assert analysis["ovulationDates"][0]["scenarios"] == 4
        assert analysis["bestMoodDates"] == []

    @pytest.mark.parametrize("payload", [{"date": ""}, {"date": "not-a-date"}, {}])
    def test_invalid_date_rejected(self, client: TestClient, payload: dict) -> None:
        resp = client.post(ANALYZE_URL, json=payload)
        assert resp.status_code == 422
        assert set(resp.json()) == {"detail"}

    def test_reloaded_model_is_served(
        self, client: TestClient, tmp_path: Path, restore_mood_config: None
    ) -> None:
        path = tmp_path / "mood_model.yaml"
        text = _CONFIG_PATH.read_text(encoding="utf-8")
        text = text.replace("peak: 85.0", "peak: 90.0").replace(
            'version: "1.0"', 'version: "2.0"'
        )
        path.write_text(text, encoding="utf-8")
        reload_mood_model_config(path)

        assert client.get("/health").json()["mood_model"] == "2.0"
        body = client.post(ANALYZE_URL, json={"date": "2024-06-15"}).json()
        assert body["scenarios"][0]["peakMood"] == 90.0
        assert body["scenarios"][14]["inputDateMood"] == 90.0

    def test_invalid_date_documented(self, client: TestClient) -> None:
        schema = client.get("/openapi.json").json()
        error = schema["paths"][ANALYZE_URL]["post"]["responses"]["422"]
        ref = error["content"]["application/json"]["schema"]["$ref"]
        assert ref == "#/components/schemas/ErrorDetail"


# ---------------------------------------------------------------------------
# Scenario and calendar endpoints
# ---------------------------------------------------------------------------


class TestReadEndpoints:
    def test_scenarios(self, client: TestClient) -> None:
        resp = client.get("/api/v1/mood-cycles/scenarios", params={"date": "2024-06-15"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["referenceDate"] == "2024-06-15"
        assert [s["dayInCycle"] for s in body["scenarios"]] == list(range(1, 29))

    def test_scenarios_invalid_date(self, client: TestClient) -> None:
        resp = client.get("/api/v1/mood-cycles/scenarios", params={"date": "2024-02-30"})
        assert resp.status_code == 422

    def test_calendar(self, client: TestClient) -> None:
        resp = client.get("/api/v1/mood-cycles/calendar", params={"date": "2024-06-15"})
        assert resp.status_code == 200
        cycles = resp.json()["cycles"]
        assert len(cycles) == 6
        assert cycles[3] == {
            "startDate": "2024-06-15",
            "endDate": "2024-07-12",
            "cycleNumber": 4,
        }

    def test_month_overlay(self, client: TestClient) -> None:
        resp = client.get(
            "/api/v1/mood-cycles/calendar/month",
            params={"date": "2024-06-15", "year": 2024, "month": 6},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["days"]) == 30
        assert body["days"][14] == {"date": "2024-06-15", "type": "menstrual", "day": 1}

    def test_month_overlay_projects_once(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls = []
        original = CalendarProjector.project

        def counting_project(self, reference_date):
            calls.append(reference_date)
            return original(self, reference_date)

        monkeypatch.setattr(CalendarProjector, "project", counting_project)
        resp = client.get(
            "/api/v1/mood-cycles/calendar/month",
            params={"date": "2024-06-15", "year": 2024, "month": 6},
        )
        assert resp.status_code == 200
        assert calls == ["2024-06-15"]

    def test_month_overlay_bad_month(self, client: TestClient) -> None:
        resp = client.get(
            "/api/v1/mood-cycles/calendar/month",
            params={"date": "2024-06-15", "year": 2024, "month": 13},
        )
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Health and middleware
# ---------------------------------------------------------------------------


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["mood_model"] == "1.0"


class TestRateLimit:
    def test_limit_enforced(self) -> None:
        from src.main import create_app

        settings = Settings(environment="test", rate_limit_per_minute=2)
        with TestClient(create_app(settings)) as client:
            url = "/api/v1/mood-cycles/calendar"
            first = client.get(url, params={"date": "2024-06-15"})
            assert first.headers["X-RateLimit-Remaining"] == "1"
            assert client.get(url, params={"date": "2024-06-15"}).status_code == 200
            blocked = client.get(url, params={"date": "2024-06-15"})
            assert blocked.status_code == 429
            assert int(blocked.headers["Retry-After"]) >= 1
            # Health probes are never limited
            assert client.get("/health").status_code == 200

    def test_forwarded_for_ignored_by_default(self) -> None:
        from src.main import create_app

        settings = Settings(environment="test", rate_limit_per_minute=2)
        with TestClient(create_app(settings)) as client:
            url = "/api/v1/mood-cycles/calendar"
            statuses = [
                client.get(
                    url,
                    params={"date": "2024-06-15"},
                    headers={"X-Forwarded-For": f"10.0.0.{i}"},
                ).status_code
                for i in range(3)
            ]
            assert statuses == [200, 200, 429]

    def test_forwarded_for_when_trusted(self) -> None:
        from src.main import create_app

        settings = Settings(
            environment="test",
            rate_limit_per_minute=1,
            rate_limit_trust_forwarded_for=True,
        )
        with TestClient(create_app(settings)) as client:
            url = "/api/v1/mood-cycles/calendar"
            for i in range(3):
                resp = client.get(
                    url,
                    params={"date": "2024-06-15"},
                    headers={"X-Forwarded-For": f"10.0.0.{i}, 172.16.0.1"},
                )
                assert resp.status_code == 200

    def test_idle_clients_evicted(self) -> None:
        from src.middleware.rate_limit import RateLimitMiddleware

        limiter = RateLimitMiddleware(
            app=None, settings=Settings(environment="test", rate_limit_window_seconds=60)
        )
        limiter._requests["10.0.0.1"] = deque([0.0, 10.0])
        limiter._requests["10.0.0.2"] = deque([20.0, 80.0])

        limiter._expire(now=85.0)
        assert list(limiter._requests) == ["10.0.0.2"]
        assert list(limiter._requests["10.0.0.2"]) == [80.0]

        limiter._expire(now=200.0)
        assert limiter._requests == {}
