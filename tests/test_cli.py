"""
Tests for the command-line interface.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from outdoor_risk.cli import app

FIXTURES = Path(__file__).parent / "fixtures"

runner = CliRunner()


@pytest.fixture
def mild_path():
    return str(FIXTURES / "weather_mild.json")


@pytest.fixture
def storm_path():
    return str(FIXTURES / "weather_storm.json")


def test_assess(mild_path):
    result = runner.invoke(app, ["assess", "--reading", mild_path, "--activity", "hiking"])

    assert result.exit_code == 0, result.output
    assert "Hiking & Trekking" in result.output
    assert "LOW" in result.output
    assert "Factor Breakdown" in result.output
    assert "Best Time Windows" in result.output


def test_assess_names_limiting_factor(storm_path):
    result = runner.invoke(app, ["assess", "--reading", storm_path])

    assert result.exit_code == 0, result.output
    assert "Limiting factor: precipitation" in result.output


def test_assess_without_forecast(mild_path):
    result = runner.invoke(app, ["assess", "--reading", mild_path, "--no-forecast"])

    assert result.exit_code == 0, result.output
    assert "Best Time Windows" not in result.output


def test_assess_unknown_activity_falls_back(mild_path):
    result = runner.invoke(app, ["assess", "--reading", mild_path, "--activity", "skydiving"])

    assert result.exit_code == 0, result.output
    assert "Unknown activity 'skydiving'" in result.output


def test_assess_saves_report(mild_path, tmp_path):
    result = runner.invoke(
        app,
        [
            "assess",
            "--reading",
            mild_path,
            "--save-report",
            "--report-format",
            "markdown",
            "--report-dir",
            str(tmp_path),
        ],
    )

    assert result.exit_code == 0, result.output
    reports = list(tmp_path.glob("report_general_*.md"))
    assert len(reports) == 1


def test_assess_rejects_unknown_report_format(mild_path, tmp_path):
    result = runner.invoke(
        app,
        ["assess", "--reading", mild_path, "--save-report", "--report-format", "pdf", "--report-dir", str(tmp_path)],
    )

    assert result.exit_code == 1


def test_assess_invalid_payload(tmp_path):
    payload_path = tmp_path / "bad.json"
    payload_path.write_text(json.dumps({"current": {"temp": 10}}))

    result = runner.invoke(app, ["assess", "--reading", str(payload_path)])

    assert result.exit_code == 1
    assert "Invalid weather payload" in result.output


def test_basic(storm_path):
    result = runner.invoke(app, ["basic", "--reading", storm_path])

    assert result.exit_code == 0, result.output
    assert "HIGH" in result.output
    assert "Thunderstorm conditions" in result.output


def test_basic_with_preferences(mild_path):
    result = runner.invoke(
        app,
        ["basic", "--reading", mild_path, "--preferences", str(FIXTURES / "preferences_custom.json")],
    )

    assert result.exit_code == 0, result.output
    assert "LOW" in result.output


def test_list_activities():
    result = runner.invoke(app, ["activities"])

    assert result.exit_code == 0, result.output
    for activity_id in ("general", "hiking", "cycling", "water_sports", "picnic", "photography"):
        assert activity_id in result.output


def test_show_activity():
    result = runner.invoke(app, ["activities", "--show", "cycling"])

    assert result.exit_code == 0, result.output
    assert "Road cycling, mountain biking" in result.output
    assert "Factor Weights" in result.output


def test_show_unknown_activity():
    result = runner.invoke(app, ["activities", "--show", "skydiving"])

    assert result.exit_code == 1
    assert "Activity not found" in result.output


def test_outlook(mild_path):
    result = runner.invoke(app, ["outlook", "--reading", mild_path, "--activity", "hiking"])

    assert result.exit_code == 0, result.output
    assert "Hiking & Trekking Outlook" in result.output
    assert "medium" in result.output


def test_outlook_requires_forecast(storm_path):
    result = runner.invoke(app, ["outlook", "--reading", storm_path])

    assert result.exit_code == 1
    assert "no forecast" in result.output


def test_outlook_rejects_out_of_range_timestamp(tmp_path):
    payload_path = tmp_path / "far_future.json"
    payload_path.write_text(
        json.dumps({"forecast": [{"dt": 1e20, "temp": {"min": 1, "max": 2}, "wind_speed": 1, "humidity": 1}]})
    )

    result = runner.invoke(app, ["outlook", "--reading", str(payload_path)])

    assert result.exit_code == 1
    assert "Invalid forecast" in result.output
