"""
Command-line interface for outdoor activity risk assessment.

Provides commands for:
- Activity-weighted risk assessment with recommendations
- Comfort-threshold (basic) assessment
- Activity catalog browsing
- Per-day forecast outlook
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from outdoor_risk.activities import ActivityRegistry
from outdoor_risk.basic_risk import assess_basic
from outdoor_risk.errors import OutdoorRiskError
from outdoor_risk.forecast import find_best_windows, summarize_days
from outdoor_risk.readings import forecast_from_payload, reading_from_payload
from outdoor_risk.report import AssessmentReportBuilder
from outdoor_risk.risk import RiskAggregator, limiting_factor
from outdoor_risk.schemas import (
    ActivityProfile,
    BasicRiskAssessment,
    BasicRiskTier,
    EnhancedRiskAssessment,
    FactorStatus,
    Priority,
    RiskTier,
    TimeWindow,
    UserPreferences,
)
from outdoor_risk.settings import build_registry, configure_logging, get_settings

# Initialize Typer app and Rich console
app = typer.Typer(
    help="Outdoor Activity Risk - weather risk scoring for outdoor activities"
)
console = Console()

TIER_COLORS = {
    RiskTier.LOW: "green",
    RiskTier.MEDIUM: "yellow",
    RiskTier.HIGH: "dark_orange",
    RiskTier.EXTREME: "red",
}

BASIC_TIER_COLORS = {
    BasicRiskTier.LOW: "green",
    BasicRiskTier.MEDIUM: "yellow",
    BasicRiskTier.HIGH: "red",
}

STATUS_COLORS = {
    FactorStatus.OPTIMAL: "green",
    FactorStatus.ACCEPTABLE: "yellow",
    FactorStatus.POOR: "dark_orange",
    FactorStatus.DANGEROUS: "red",
}

PRIORITY_COLORS = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "green",
}


@app.callback()
def main():
    """Configure logging from settings before any command runs."""
    configure_logging(get_settings())


# ===== LOADING HELPERS =====


def _load_registry() -> ActivityRegistry:
    try:
        return build_registry(get_settings())
    except (OutdoorRiskError, FileNotFoundError) as e:
        console.print(f"[red]✗ Failed to load activity catalog: {e}[/red]")
        raise typer.Exit(1)


def _load_json(path: Path, label: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]✗ Failed to load {label}: {e}[/red]")
        raise typer.Exit(1)


def _location_name(payload: Dict[str, Any]) -> Optional[str]:
    location = payload.get("location")
    if isinstance(location, dict):
        return location.get("name")
    return location if isinstance(location, str) else None


def _load_preferences(path: Optional[Path]) -> UserPreferences:
    if path is None:
        return UserPreferences()
    data = _load_json(path, "preferences")
    try:
        return UserPreferences(**data)
    except ValueError as e:
        console.print(f"[red]✗ Invalid preferences: {e}[/red]")
        raise typer.Exit(1)


# ===== DISPLAY HELPER FUNCTIONS =====


def _display_assessment(assessment: EnhancedRiskAssessment, activity: ActivityProfile):
    """
    Display the activity-weighted assessment: tier, factor table, recommendations.

    Args:
        assessment: EnhancedRiskAssessment from the aggregator
        activity: Profile the assessment was computed for
    """
    color = TIER_COLORS[assessment.overall]
    console.print(
        f"\n[bold]{activity.name}: [{color}]{assessment.overall.value.upper()}[/{color}] "
        f"risk (score {assessment.score}/100)[/bold]\n"
    )

    table = Table(title="Factor Breakdown", box=box.ROUNDED)
    table.add_column("Factor", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("Impact")

    for factor, result in assessment.factors.items():
        status_color = STATUS_COLORS[result.status]
        table.add_row(
            factor.value.title(),
            str(result.score),
            f"[{status_color}]{result.status.value}[/{status_color}]",
            result.impact,
        )

    console.print(table)

    limiting = limiting_factor(assessment)
    if limiting is not None:
        console.print(f"Limiting factor: [bold]{limiting.value}[/bold]")

    if assessment.recommendations:
        console.print("\n[bold]Recommendations:[/bold]")
        for rec in assessment.recommendations:
            rec_color = PRIORITY_COLORS[rec.priority]
            line = f"  • [{rec_color}]{rec.priority.value.upper()}[/{rec_color}] {rec.message}"
            if rec.action:
                line += f" [dim]({rec.action})[/dim]"
            console.print(line)


def _display_basic(basic: BasicRiskAssessment):
    color = BASIC_TIER_COLORS[basic.overall]
    body = "\n".join(f"• {rec}" for rec in basic.recommendations)
    console.print(
        Panel(
            body,
            title=f"Comfort check: [{color}]{basic.overall.value.upper()}[/{color}] ({basic.risk_score} points)",
            subtitle=(
                f"temp {basic.factors.temperature.value} · wind {basic.factors.wind.value} · "
                f"precip {basic.factors.precipitation.value} · humidity {basic.factors.humidity.value}"
            ),
            border_style=color,
            padding=(1, 2),
        )
    )


def _display_windows(windows: List[TimeWindow]):
    if not windows:
        console.print("\n[yellow]No forecast window reaches the score threshold.[/yellow]")
        return

    table = Table(title="Best Time Windows", box=box.ROUNDED)
    table.add_column("Start", style="cyan")
    table.add_column("End", style="cyan")
    table.add_column("Peak", justify="right", style="green")
    table.add_column("Average", justify="right")

    for window in windows:
        table.add_row(
            window.start.strftime("%a %d %b %H:%M"),
            window.end.strftime("%a %d %b %H:%M"),
            str(window.score),
            f"{window.average_score:.1f}",
        )

    console.print()
    console.print(table)


# ===== CLI COMMANDS =====


@app.command()
def assess(
    reading: Path = typer.Option(
        ...,
        "--reading",
        "-r",
        help="Path to weather payload JSON file (current conditions, optional forecast)",
        exists=True,
    ),
    activity: str = typer.Option(
        "general",
        "--activity",
        "-a",
        help="Activity ID to assess",
    ),
    preferences: Optional[Path] = typer.Option(
        None,
        "--preferences",
        "-p",
        help="Path to comfort preferences JSON file",
        exists=True,
    ),
    use_forecast: bool = typer.Option(
        True,
        "--forecast/--no-forecast",
        help="Find best time windows when the payload carries a forecast",
    ),
    save_report: bool = typer.Option(
        False,
        "--save-report/--no-report",
        help="Save assessment report to file",
    ),
    report_format: str = typer.Option(
        "json",
        "--report-format",
        "-f",
        help="Report output format (json or markdown)",
    ),
    report_dir: Path = typer.Option(
        Path("reports"),
        "--report-dir",
        help="Directory for saved reports",
    ),
):
    """
    Assess current conditions for an activity.

    Prints the activity-weighted assessment, the comfort-threshold check and,
    when the payload has a forecast, the best time windows.
    """
    console.print("\n[bold cyan]🌤  Outdoor Activity Risk[/bold cyan]\n")

    settings = get_settings()
    registry = _load_registry()
    payload = _load_json(reading, "weather payload")
    user_preferences = _load_preferences(preferences)

    try:
        current = reading_from_payload(payload)
        forecast = forecast_from_payload(payload) if use_forecast else []
    except OutdoorRiskError as e:
        console.print(f"[red]✗ Invalid weather payload: {e}[/red]")
        raise typer.Exit(1)

    profile = registry.get_by_id(activity)
    if profile.id != activity:
        console.print(f"[yellow]Unknown activity '{activity}', using {profile.name}[/yellow]")
    console.print(f"✓ Activity: [green]{profile.name}[/green] - {profile.description}")
    console.print(f"✓ Conditions: {current.temp:.1f}°C, {current.condition_summary() or 'Clear'}")

    aggregator = RiskAggregator(registry)
    assessment = aggregator.assess(
        current,
        profile,
        forecast=forecast,
        window_threshold=settings.BEST_WINDOW_THRESHOLD,
        slot_hours=settings.FORECAST_SLOT_HOURS,
    )
    basic = assess_basic(current, user_preferences)

    _display_assessment(assessment, profile)
    console.print()
    _display_basic(basic)
    if forecast:
        _display_windows(assessment.best_time_windows)

    if save_report:
        builder = AssessmentReportBuilder(
            assessment,
            profile,
            current,
            location=_location_name(payload),
            basic_assessment=basic,
        )
        try:
            report_path = builder.save_to_file(report_dir, format=report_format)
        except ValueError as e:
            console.print(f"[red]✗ {e}[/red]")
            raise typer.Exit(1)
        console.print(f"\n✓ Report saved: [cyan]{report_path}[/cyan]")

    console.print()


@app.command()
def basic(
    reading: Path = typer.Option(
        ...,
        "--reading",
        "-r",
        help="Path to weather payload JSON file",
        exists=True,
    ),
    preferences: Optional[Path] = typer.Option(
        None,
        "--preferences",
        "-p",
        help="Path to comfort preferences JSON file",
        exists=True,
    ),
):
    """
    Check current conditions against personal comfort thresholds.
    """
    payload = _load_json(reading, "weather payload")
    user_preferences = _load_preferences(preferences)

    try:
        current = reading_from_payload(payload)
    except OutdoorRiskError as e:
        console.print(f"[red]✗ Invalid weather payload: {e}[/red]")
        raise typer.Exit(1)

    console.print()
    _display_basic(assess_basic(current, user_preferences))
    console.print()


@app.command()
def activities(
    show: Optional[str] = typer.Option(
        None,
        "--show",
        "-s",
        help="Activity ID to display",
    ),
):
    """
    List activity profiles, or show one profile in detail.
    """
    registry = _load_registry()

    if show is None:
        table = Table(title="Activities", box=box.ROUNDED)
        table.add_column("ID", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("Description")
        for profile in registry:
            table.add_row(profile.id, profile.name, profile.description)
        console.print()
        console.print(table)
        console.print()
        return

    if show not in registry:
        console.print(f"[red]✗ Activity not found: {show}[/red]")
        console.print(f"[yellow]Available: {', '.join(registry.ids())}[/yellow]")
        raise typer.Exit(1)

    _display_activity_card(registry.get_by_id(show))


@app.command()
def outlook(
    reading: Path = typer.Option(
        ...,
        "--reading",
        "-r",
        help="Path to weather payload JSON file with a forecast list",
        exists=True,
    ),
    activity: str = typer.Option(
        "general",
        "--activity",
        "-a",
        help="Activity ID to assess",
    ),
    days: int = typer.Option(
        5,
        "--days",
        "-d",
        min=1,
        help="Number of days to show",
    ),
):
    """
    Show a per-day forecast outlook and the best time windows.
    """
    settings = get_settings()
    registry = _load_registry()
    payload = _load_json(reading, "weather payload")

    try:
        forecast = forecast_from_payload(payload)
    except OutdoorRiskError as e:
        console.print(f"[red]✗ Invalid forecast: {e}[/red]")
        raise typer.Exit(1)

    if not forecast:
        console.print("[red]✗ Payload has no forecast entries[/red]")
        raise typer.Exit(1)

    profile = registry.get_by_id(activity)

    table = Table(title=f"{profile.name} Outlook", box=box.ROUNDED)
    table.add_column("Day", style="cyan")
    table.add_column("Temp (°C)", justify="right")
    table.add_column("Wind (m/s)", justify="right")
    table.add_column("Precip", justify="right")
    table.add_column("Outlook", justify="center")

    for day in summarize_days(forecast, profile, days=days):
        color = BASIC_TIER_COLORS[day.outlook]
        table.add_row(
            day.day.strftime("%a %d %b"),
            f"{day.temp_min:.0f} / {day.temp_max:.0f}",
            f"{day.wind_speed:.1f}",
            f"{day.pop:.0%}",
            f"[{color}]{day.outlook.value}[/{color}]",
        )

    console.print()
    console.print(table)

    windows = find_best_windows(
        forecast,
        profile,
        aggregator=RiskAggregator(registry),
        threshold=settings.BEST_WINDOW_THRESHOLD,
        slot_hours=settings.FORECAST_SLOT_HOURS,
    )
    _display_windows(windows)
    console.print()


def _display_activity_card(profile: ActivityProfile):
    """Display one activity profile: weights and optimal/acceptable bounds."""
    conditions = profile.optimal_conditions
    low, high = conditions.temp_range
    acc_low, acc_high = conditions.acceptable_temp_range

    content = f"""[bold]{profile.name}[/bold] (`{profile.id}`)

{profile.description}

[bold]Optimal / acceptable conditions:[/bold]
  Temperature:   {low:g} to {high:g}°C  /  {acc_low:g} to {acc_high:g}°C
  Wind:          ≤ {conditions.max_wind:g} m/s  /  ≤ {conditions.acceptable_wind:g} m/s
  Precipitation: ≤ {conditions.max_precipitation:.0%}  /  ≤ {conditions.acceptable_precipitation:.0%}
  Humidity:      ≤ {conditions.max_humidity:g}%  /  ≤ {conditions.acceptable_humidity:g}%
  Visibility:    ≥ {conditions.min_visibility:g} m  /  ≥ {conditions.acceptable_visibility:g} m
"""
    console.print()
    console.print(Panel(content, title="Activity Profile", border_style="cyan"))

    table = Table(title="Factor Weights", box=box.ROUNDED)
    table.add_column("Factor", style="cyan")
    table.add_column("Weight", justify="right", style="yellow")
    for factor, weight in profile.weights.model_dump().items():
        table.add_row(factor.title(), f"{weight:.2f}")
    console.print(table)
    console.print()


if __name__ == "__main__":
    app()
