"""
Rule-based recommendation generation for activity risk assessments.

Rules are evaluated in a fixed order (temperature, wind, precipitation,
visibility, overall score) and the output keeps that order. Consumers that
display by priority should call ``sort_by_priority``.
"""

from typing import List

from outdoor_risk.schemas import (
    ActivityProfile,
    EnhancedRiskAssessment,
    FactorStatus,
    Priority,
    Recommendation,
    WeatherReading,
)

EXTREME_TEMPERATURE_MARGIN = 10
PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


def generate_recommendations(
    assessment: EnhancedRiskAssessment,
    activity: ActivityProfile,
    reading: WeatherReading,
) -> List[Recommendation]:
    """
    Generate advisories from factor statuses and the overall score.

    Each category is evaluated independently. The overall-score band is
    always appended last, so the list is never empty.

    Args:
        assessment: Assessment whose factors and score drive the rules
        activity: The assessed activity profile
        reading: The reading the assessment was computed from

    Returns:
        Recommendations in rule order
    """
    recommendations: List[Recommendation] = []

    recommendations.extend(_temperature_recommendations(assessment, activity, reading))
    recommendations.extend(_wind_recommendations(assessment, activity))

    # Precipitation
    precipitation_status = assessment.factors.precipitation.status
    if precipitation_status == FactorStatus.DANGEROUS:
        recommendations.append(
            Recommendation(
                priority=Priority.HIGH,
                message="Heavy precipitation expected",
                action="Postpone outdoor activities",
            )
        )
    elif precipitation_status == FactorStatus.POOR:
        recommendations.append(
            Recommendation(
                priority=Priority.MEDIUM,
                message="Light rain possible",
                action="Bring waterproof gear",
            )
        )

    # Visibility
    if assessment.factors.visibility.status == FactorStatus.DANGEROUS:
        recommendations.append(
            Recommendation(
                priority=Priority.HIGH,
                message="Very poor visibility conditions",
                action="Avoid driving and outdoor navigation",
            )
        )

    recommendations.append(overall_recommendation(assessment.score))

    return recommendations


def _temperature_recommendations(
    assessment: EnhancedRiskAssessment,
    activity: ActivityProfile,
    reading: WeatherReading,
) -> List[Recommendation]:
    status = assessment.factors.temperature.status
    low, high = activity.optimal_conditions.temp_range

    if status == FactorStatus.DANGEROUS:
        if reading.temp > high + EXTREME_TEMPERATURE_MARGIN:
            return [
                Recommendation(
                    priority=Priority.HIGH,
                    message="Extreme heat conditions detected",
                    action="Postpone activity or move to air-conditioned location",
                )
            ]
        if reading.temp < low - EXTREME_TEMPERATURE_MARGIN:
            return [
                Recommendation(
                    priority=Priority.HIGH,
                    message="Extreme cold conditions detected",
                    action="Dress in layers and consider postponing",
                )
            ]
        return []

    if status == FactorStatus.POOR:
        if reading.temp > high:
            return [
                Recommendation(
                    priority=Priority.MEDIUM,
                    message="Hot conditions expected",
                    action="Stay hydrated and take frequent breaks",
                )
            ]
        return [
            Recommendation(
                priority=Priority.MEDIUM,
                message="Cold conditions expected",
                action="Dress warmly and check for hypothermia signs",
            )
        ]

    return []


def _wind_recommendations(
    assessment: EnhancedRiskAssessment,
    activity: ActivityProfile,
) -> List[Recommendation]:
    status = assessment.factors.wind.status

    if status == FactorStatus.DANGEROUS:
        return [
            Recommendation(
                priority=Priority.HIGH,
                message="Dangerous wind conditions",
                action="Avoid exposed areas and consider postponing",
            )
        ]

    # Headwind advice only applies to cycling
    if status == FactorStatus.POOR and activity.id == "cycling":
        return [
            Recommendation(
                priority=Priority.MEDIUM,
                message="Strong headwinds expected",
                action="Plan shorter routes and allow extra time",
            )
        ]

    return []


def overall_recommendation(score: int) -> Recommendation:
    """Banded advisory for the displayed overall score."""
    if score >= 80:
        return Recommendation(priority=Priority.LOW, message="Excellent conditions for outdoor activities!")
    if score >= 60:
        return Recommendation(priority=Priority.LOW, message="Good conditions with minor considerations")
    if score >= 40:
        return Recommendation(priority=Priority.MEDIUM, message="Moderate conditions - prepare accordingly")
    return Recommendation(priority=Priority.HIGH, message="Poor conditions - consider alternative plans")


def sort_by_priority(recommendations: List[Recommendation]) -> List[Recommendation]:
    """Stable sort, high priority first."""
    return sorted(recommendations, key=lambda rec: PRIORITY_ORDER[rec.priority])
