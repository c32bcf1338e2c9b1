"""
Assessment report generation and export.

Reports capture one assessment together with its inputs so it can be
reviewed later. They are exported to JSON and Markdown.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from outdoor_risk.risk import limiting_factor
from outdoor_risk.schemas import (
    ActivityProfile,
    BasicRiskAssessment,
    EnhancedRiskAssessment,
    FactorStatus,
    Priority,
    WeatherReading,
)

STATUS_ICONS = {
    FactorStatus.OPTIMAL: "✅",
    FactorStatus.ACCEPTABLE: "🟡",
    FactorStatus.POOR: "🟠",
    FactorStatus.DANGEROUS: "⛔",
}

PRIORITY_ICONS = {
    Priority.HIGH: "🔴",
    Priority.MEDIUM: "🟡",
    Priority.LOW: "🟢",
}


class AssessmentReport(BaseModel):
    """A saved assessment with the inputs that produced it."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    activity_id: str
    activity_name: str
    location: Optional[str] = Field(None, description="Display name of the assessed location")
    reading: WeatherReading
    assessment: EnhancedRiskAssessment
    basic_assessment: Optional[BasicRiskAssessment] = None


class AssessmentReportBuilder:
    """
    Builds and exports assessment reports.

    The report is the audit trail for one assessment:
    - the weather reading that was scored
    - the per-factor scores, statuses and impacts
    - the recommendations in rule order
    - the best time windows and the basic assessment, when available
    """

    def __init__(
        self,
        assessment: EnhancedRiskAssessment,
        activity: ActivityProfile,
        reading: WeatherReading,
        location: Optional[str] = None,
        basic_assessment: Optional[BasicRiskAssessment] = None,
    ):
        self.report = AssessmentReport(
            activity_id=activity.id,
            activity_name=activity.name,
            location=location,
            reading=reading,
            assessment=assessment,
            basic_assessment=basic_assessment,
        )

    @classmethod
    def from_report(cls, report: AssessmentReport) -> "AssessmentReportBuilder":
        builder = cls.__new__(cls)
        builder.report = report
        return builder

    def export_to_json(self) -> dict:
        """
        Export report to JSON-serializable dictionary.

        Returns:
            Dictionary representation of the report
        """
        return self.report.model_dump(mode="json")

    def export_to_markdown(self) -> str:
        """
        Export report to human-readable Markdown format.

        Returns:
            Markdown-formatted report
        """
        report = self.report
        assessment = report.assessment
        lines = []

        # Header
        lines.append("# Activity Risk Report")
        lines.append("")
        lines.append(f"**Timestamp:** {report.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append(f"**Activity:** {report.activity_name} (`{report.activity_id}`)")
        if report.location:
            lines.append(f"**Location:** {report.location}")
        lines.append(f"**Risk Level:** **{assessment.overall.value.upper()}**")
        lines.append(f"**Score:** {assessment.score}/100")
        limiting = limiting_factor(assessment)
        if limiting is not None:
            status = assessment.factors.get(limiting).status.value
            lines.append(f"**Limiting Factor:** {limiting.value.title()} ({status})")
        lines.append("")
        lines.append("---")
        lines.append("")

        # Conditions
        reading = report.reading
        lines.append("## Current Conditions")
        lines.append("")
        lines.append(f"- **Temperature:** {reading.temp:.1f}°C (feels like {reading.feels_like:.1f}°C)")
        lines.append(f"- **Humidity:** {reading.humidity:.0f}%")
        lines.append(f"- **Wind:** {reading.wind_speed:.1f} m/s")
        lines.append(f"- **Visibility:** {reading.visibility / 1000:.1f} km")
        lines.append(f"- **Conditions:** {reading.condition_summary() or 'Clear'}")
        lines.append("")
        lines.append("---")
        lines.append("")

        # Factors
        lines.append("## Factor Breakdown")
        lines.append("")
        lines.append("| Factor | Score | Status | Impact |")
        lines.append("|--------|-------|--------|--------|")
        for factor, result in assessment.factors.items():
            icon = STATUS_ICONS[result.status]
            lines.append(
                f"| {factor.value.title()} | {result.score} | {icon} {result.status.value} | {result.impact} |"
            )
        lines.append("")
        lines.append("---")
        lines.append("")

        # Recommendations
        lines.append("## Recommendations")
        lines.append("")
        for i, rec in enumerate(assessment.recommendations, 1):
            line = f"{i}. {PRIORITY_ICONS[rec.priority]} **{rec.message}**"
            if rec.action:
                line += f" - {rec.action}"
            lines.append(line)
        lines.append("")

        # Best windows (if available)
        if assessment.best_time_windows:
            lines.append("---")
            lines.append("")
            lines.append("## Best Time Windows")
            lines.append("")
            lines.append("| Start | End | Peak | Average |")
            lines.append("|-------|-----|------|---------|")
            for window in assessment.best_time_windows:
                lines.append(
                    f"| {window.start.strftime('%Y-%m-%d %H:%M')} | {window.end.strftime('%Y-%m-%d %H:%M')} "
                    f"| {window.score} | {window.average_score:.1f} |"
                )
            lines.append("")

        # Basic assessment (if available)
        if report.basic_assessment is not None:
            basic = report.basic_assessment
            lines.append("---")
            lines.append("")
            lines.append("## Comfort Threshold Check")
            lines.append("")
            lines.append(f"**Risk Level:** **{basic.overall.value.upper()}** ({basic.risk_score} points)")
            lines.append("")
            lines.append(f"- **Temperature:** {basic.factors.temperature.value}")
            lines.append(f"- **Wind:** {basic.factors.wind.value}")
            lines.append(f"- **Precipitation:** {basic.factors.precipitation.value}")
            lines.append(f"- **Humidity:** {basic.factors.humidity.value}")
            lines.append("")
            for rec in basic.recommendations:
                lines.append(f"- {rec}")
            lines.append("")

        lines.append("---")
        lines.append("")
        lines.append("*Scores are computed from the conditions above; recommendations are listed in evaluation order.*")

        return "\n".join(lines)

    def save_to_file(self, output_dir: Path, format: str = "json") -> Path:
        """
        Save report to file in specified format.

        Args:
            output_dir: Directory to save report file
            format: Output format ("json" or "markdown")

        Returns:
            Path to saved file

        Raises:
            ValueError: If format is not supported
        """
        if format not in ("json", "markdown"):
            raise ValueError(f"Unsupported format: {format}. Use 'json' or 'markdown'")

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp_str = self.report.timestamp.strftime("%Y%m%d_%H%M%S")
        stem = f"report_{self.report.activity_id}_{timestamp_str}"

        if format == "json":
            filepath = output_dir / f"{stem}.json"
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(self.export_to_json(), f, indent=2, ensure_ascii=False)
        else:
            filepath = output_dir / f"{stem}.md"
            with open(filepath, "w", encoding="utf-8") as f:
                f.write(self.export_to_markdown())

        return filepath


def load_report_from_file(filepath: Path) -> AssessmentReport:
    """
    Load an assessment report from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If JSON is invalid
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Report file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid report file: {e}") from e

    try:
        return AssessmentReport(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid report file: {e}") from e
