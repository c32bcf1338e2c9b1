"""
Basic threshold-based risk assessment.

A simpler path independent of activity profiles: each user threshold that
is crossed adds integer points to a risk score, and the total maps onto a
three-level tier. It is deliberately not a special case of the
activity-weighted engine; the two have different precipitation handling
and different tiers.
"""

from typing import List

from outdoor_risk.schemas import (
    BasicRiskAssessment,
    BasicRiskFactors,
    BasicRiskTier,
    HumidityStatus,
    PrecipitationStatus,
    TemperatureStatus,
    UserPreferences,
    WeatherReading,
    WindStatus,
)
from outdoor_risk.scoring import format_number, round_half_up

NEAR_THRESHOLD_MARGIN = 5
BREEZY_FRACTION = 0.7

DEFAULT_MESSAGE = "Conditions look great for outdoor activities!"


class BasicRiskAssessor:
    """
    Scores a reading against user comfort thresholds.

    Points:
    - temperature beyond very_hot / very_cold: +2
    - wind at very_windy: +2, above 70% of it: +1
    - humidity at very_humid: +1
    - thunderstorm: +3, otherwise rain or drizzle: +2

    Tier: >= 5 high, >= 3 medium, else low.
    """

    HIGH_RISK_POINTS = 5
    MEDIUM_RISK_POINTS = 3

    def assess(self, reading: WeatherReading, preferences: UserPreferences) -> BasicRiskAssessment:
        """
        Assess a reading against user preferences.

        Args:
            reading: Validated current conditions
            preferences: User comfort thresholds

        Returns:
            BasicRiskAssessment with tier, points, factor statuses and advisories
        """
        factors = BasicRiskFactors()
        recommendations: List[str] = []
        risk_score = 0

        # Temperature, averaged with the feels-like value
        effective_temp = (reading.temp + reading.feels_like) / 2
        if effective_temp >= preferences.very_hot:
            factors.temperature = TemperatureStatus.HOT
            risk_score += 2
            recommendations.append(
                f"Very hot conditions ({round_half_up(effective_temp)}°C) - "
                "consider rescheduling during cooler hours"
            )
        elif effective_temp <= preferences.very_cold:
            factors.temperature = TemperatureStatus.COLD
            risk_score += 2
            recommendations.append(
                f"Very cold conditions ({round_half_up(effective_temp)}°C) - "
                "dress warmly and consider indoor alternatives"
            )
        elif effective_temp >= preferences.very_hot - NEAR_THRESHOLD_MARGIN:
            recommendations.append("Warm conditions - stay hydrated and seek shade when possible")
        elif effective_temp <= preferences.very_cold + NEAR_THRESHOLD_MARGIN:
            recommendations.append("Cool conditions - dress in layers for comfort")

        # Wind
        if reading.wind_speed >= preferences.very_windy:
            factors.wind = WindStatus.WINDY
            risk_score += 2
            recommendations.append(
                f"Strong winds ({format_number(reading.wind_speed)} m/s) - "
                "secure loose items and avoid exposed areas"
            )
        elif reading.wind_speed > preferences.very_windy * BREEZY_FRACTION:
            factors.wind = WindStatus.BREEZY
            risk_score += 1
            recommendations.append("Breezy conditions - be aware of wind effects on activities")

        # Humidity
        if reading.humidity >= preferences.very_humid:
            factors.humidity = HumidityStatus.HUMID
            risk_score += 1
            recommendations.append(
                f"High humidity ({format_number(reading.humidity)}%) - "
                "stay hydrated and take frequent breaks"
            )

        # Precipitation, from condition tags only
        if reading.has_condition("thunderstorm"):
            factors.precipitation = PrecipitationStatus.HEAVY
            risk_score += 3
            recommendations.append("Thunderstorm conditions - seek indoor shelter immediately")
        elif reading.has_condition("rain", "drizzle"):
            factors.precipitation = PrecipitationStatus.HEAVY
            risk_score += 2
            recommendations.append("Rain detected - bring waterproof gear or consider postponing")

        if not recommendations:
            recommendations.append(DEFAULT_MESSAGE)

        return BasicRiskAssessment(
            overall=self._interpret_score(risk_score),
            risk_score=risk_score,
            factors=factors,
            recommendations=recommendations,
        )

    def _interpret_score(self, risk_score: int) -> BasicRiskTier:
        if risk_score >= self.HIGH_RISK_POINTS:
            return BasicRiskTier.HIGH
        elif risk_score >= self.MEDIUM_RISK_POINTS:
            return BasicRiskTier.MEDIUM
        else:
            return BasicRiskTier.LOW


def assess_basic(reading: WeatherReading, preferences: UserPreferences) -> BasicRiskAssessment:
    """Convenience wrapper around BasicRiskAssessor.assess."""
    return BasicRiskAssessor().assess(reading, preferences)
