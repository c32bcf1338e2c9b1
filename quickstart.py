#!/usr/bin/env python3
"""
Quick start script to demonstrate outdoor activity risk assessment.

This script shows the complete workflow:
1. Load the activity catalog and a weather payload
2. Assess current conditions for every activity
3. Drill into one activity: factors and recommendations
4. Run the comfort-threshold check
5. Summarize the forecast and find the best time windows
"""

import json
from pathlib import Path

from outdoor_risk.activities import ActivityRegistry
from outdoor_risk.basic_risk import assess_basic
from outdoor_risk.forecast import summarize_days
from outdoor_risk.readings import forecast_from_payload, reading_from_payload
from outdoor_risk.report import AssessmentReportBuilder
from outdoor_risk.risk import RiskAggregator
from outdoor_risk.schemas import UserPreferences

# Rich console for pretty output
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()


def print_header(title: str):
    """Print a formatted header."""
    console.print(f"\n[bold cyan]{title}[/bold cyan]")
    console.print("=" * len(title))


def main():
    """Run the complete demonstration workflow."""
    console.print("\n[bold magenta]🥾 🚴 🛶 Outdoor Activity Risk[/bold magenta]")
    console.print("[dim]Demonstration of complete workflow[/dim]\n")

    # ===== STEP 1: Load Catalog and Weather =====
    print_header("Step 1: Load Catalog and Weather")

    registry = ActivityRegistry.default()
    console.print(f"✓ Loaded catalog: [green]{len(registry)} activities[/green]")

    payload_path = Path("tests/fixtures/weather_mild.json")
    with open(payload_path, encoding="utf-8") as f:
        payload = json.load(f)

    reading = reading_from_payload(payload)
    forecast = forecast_from_payload(payload)

    console.print(f"✓ Loaded: [green]{payload['location']['name']}[/green]")
    console.print(f"  Temperature: {reading.temp:.1f}°C (feels like {reading.feels_like:.1f}°C)")
    console.print(f"  Wind: {reading.wind_speed:.1f} m/s")
    console.print(f"  Humidity: {reading.humidity:.0f}%")
    console.print(f"  Conditions: {reading.condition_summary() or 'Clear'}")
    console.print(f"  Forecast slots: {len(forecast)}")

    # ===== STEP 2: Compare Activities =====
    print_header("Step 2: Compare Activities")

    aggregator = RiskAggregator(registry)

    table = Table(box=box.ROUNDED)
    table.add_column("Activity", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Risk", justify="center")

    for profile in registry:
        result = aggregator.assess(reading, profile)
        table.add_row(profile.name, str(result.score), result.overall.value)

    console.print(table)

    # ===== STEP 3: Hiking in Detail =====
    print_header("Step 3: Hiking in Detail")

    hiking = registry.get_by_id("hiking")
    assessment = aggregator.assess(reading, hiking, forecast=forecast)

    console.print(f"Overall: [bold]{assessment.overall.value.upper()}[/bold] ({assessment.score}/100)\n")
    for factor, result in assessment.factors.items():
        console.print(f"  {factor.value:<14} {result.score:>3}  {result.status.value:<10} {result.impact}")

    console.print("\n[bold]Recommendations:[/bold]")
    for rec in assessment.recommendations:
        console.print(f"  • [{rec.priority.value}] {rec.message}")

    # ===== STEP 4: Comfort Threshold Check =====
    print_header("Step 4: Comfort Threshold Check")

    preferences = UserPreferences(very_hot=26, very_cold=8)
    basic = assess_basic(reading, preferences)

    console.print(
        Panel(
            "\n".join(basic.recommendations),
            title=f"{basic.overall.value.upper()} ({basic.risk_score} points)",
            border_style="cyan",
        )
    )

    # ===== STEP 5: Forecast Outlook =====
    print_header("Step 5: Forecast Outlook")

    for day in summarize_days(forecast, hiking):
        console.print(
            f"  {day.day}: {day.temp_min:.0f}-{day.temp_max:.0f}°C, "
            f"wind {day.wind_speed:.1f} m/s, rain {day.pop:.0%} → {day.outlook.value}"
        )

    if assessment.best_time_windows:
        console.print("\n[bold]Best Time Windows:[/bold]")
        for window in assessment.best_time_windows:
            console.print(
                f"  {window.start:%a %H:%M} - {window.end:%a %H:%M}  "
                f"peak {window.score}, average {window.average_score:.1f}"
            )
    else:
        console.print("\n[yellow]No window reaches the score threshold.[/yellow]")

    # ===== Save Report =====
    builder = AssessmentReportBuilder(
        assessment,
        hiking,
        reading,
        location=payload["location"]["name"],
        basic_assessment=basic,
    )
    report_path = builder.save_to_file(Path("reports"), format="markdown")
    console.print(f"\n✓ Report saved: [cyan]{report_path}[/cyan]\n")


if __name__ == "__main__":
    main()
