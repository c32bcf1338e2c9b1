"""
Activity-weighted risk aggregation.

Scores the five weather factors against an activity profile, combines them
with the profile's weights into one overall score, and maps that score onto
a four-level risk tier.
"""

import logging
from typing import Dict, List, Optional, Sequence, Union

from outdoor_risk.activities import ActivityRegistry
from outdoor_risk.forecast import find_best_windows
from outdoor_risk.recommendations import generate_recommendations
from outdoor_risk.schemas import (
    ActivityProfile,
    EnhancedRiskAssessment,
    Factor,
    FactorAssessment,
    FactorAssessments,
    FactorStatus,
    RiskTier,
    WeatherReading,
)
from outdoor_risk.scoring import FactorScore, format_number, round_half_up, score_factor

logger = logging.getLogger(__name__)

RAIN_KEYWORDS = ("rain", "drizzle", "thunderstorm")
ASSUMED_RAIN_PROBABILITY = 0.5

# Upper-exclusive cut points, checked in order
TIER_CUT_POINTS = (
    (25.0, RiskTier.EXTREME),
    (50.0, RiskTier.HIGH),
    (75.0, RiskTier.MEDIUM),
)


def classify_tier(score: float) -> RiskTier:
    """
    Map an unrounded overall score onto a risk tier.

    25 is high, 50 is medium and 75 is low: each bucket includes its lower
    edge.
    """
    for cut_point, tier in TIER_CUT_POINTS:
        if score < cut_point:
            return tier
    return RiskTier.LOW


def has_rain(reading: WeatherReading) -> bool:
    return reading.has_condition(*RAIN_KEYWORDS)


def precipitation_value(reading: WeatherReading) -> float:
    """
    Precipitation probability used for scoring.

    A numeric probability on the reading wins. Without one, rain-bearing
    condition tags stand in for a moderate 0.5 and their absence for 0.
    """
    if reading.precipitation_probability is not None:
        return reading.precipitation_probability
    return ASSUMED_RAIN_PROBABILITY if has_rain(reading) else 0.0


class RiskAggregator:
    """
    Computes activity-specific risk assessments.

    Overall Score = Σ(factor_score_i × weight_i)

    Weights are used without renormalization. The aggregator holds only the
    injected registry and keeps no per-call state.
    """

    def __init__(self, registry: Optional[ActivityRegistry] = None):
        """
        Initialize the aggregator.

        Args:
            registry: Catalog used to resolve activity ids (default: built-in catalog)
        """
        self.registry = registry if registry is not None else ActivityRegistry.default()

    def resolve(self, activity: Union[ActivityProfile, str]) -> ActivityProfile:
        if isinstance(activity, ActivityProfile):
            return activity
        return self.registry.get_by_id(activity)

    def assess(
        self,
        reading: WeatherReading,
        activity: Union[ActivityProfile, str],
        forecast: Optional[Sequence] = None,
        window_threshold: int = 60,
        slot_hours: float = 3.0,
    ) -> EnhancedRiskAssessment:
        """
        Assess current conditions for an activity.

        Args:
            reading: Validated current conditions
            activity: Activity profile or activity id
            forecast: Optional ForecastEntry sequence used to find best time windows
            window_threshold: Minimum slot score for a best time window
            slot_hours: Duration covered by each forecast entry

        Returns:
            EnhancedRiskAssessment with factors, tier, recommendations and windows
        """
        profile = self.resolve(activity)

        factor_scores = self.score_factors(reading, profile)
        overall_score = self.weighted_score(factor_scores, profile)
        tier = classify_tier(overall_score)

        factors = FactorAssessments(
            **{
                factor.value: FactorAssessment(
                    score=result.score,
                    status=result.status,
                    impact=self._describe_impact(factor, reading, profile),
                )
                for factor, result in factor_scores.items()
            }
        )

        assessment = EnhancedRiskAssessment(
            overall=tier,
            score=round_half_up(overall_score),
            factors=factors,
        )
        recommendations = generate_recommendations(assessment, profile, reading)
        assessment = assessment.model_copy(update={"recommendations": recommendations})

        if forecast:
            windows = find_best_windows(
                forecast,
                profile,
                aggregator=self,
                threshold=window_threshold,
                slot_hours=slot_hours,
            )
            assessment = assessment.model_copy(update={"best_time_windows": windows})

        logger.debug(
            "Assessed activity '%s': score=%.2f tier=%s",
            profile.id,
            overall_score,
            tier.value,
        )
        return assessment

    def score_factors(self, reading: WeatherReading, profile: ActivityProfile) -> Dict[Factor, FactorScore]:
        """Score each factor against the profile's optimal and acceptable bounds."""
        conditions = profile.optimal_conditions
        return {
            Factor.TEMPERATURE: score_factor(
                reading.temp,
                conditions.temp_range,
                conditions.acceptable_temp_range,
            ),
            Factor.WIND: score_factor(
                reading.wind_speed,
                conditions.max_wind,
                conditions.acceptable_wind,
            ),
            Factor.PRECIPITATION: score_factor(
                precipitation_value(reading),
                conditions.max_precipitation,
                conditions.acceptable_precipitation,
            ),
            Factor.HUMIDITY: score_factor(
                reading.humidity,
                conditions.max_humidity,
                conditions.acceptable_humidity,
            ),
            Factor.VISIBILITY: score_factor(
                reading.visibility,
                conditions.min_visibility,
                conditions.acceptable_visibility,
                higher_is_better=True,
            ),
        }

    @staticmethod
    def weighted_score(factor_scores: Dict[Factor, FactorScore], profile: ActivityProfile) -> float:
        """Unrounded linear combination of factor scores and profile weights."""
        return sum(
            result.score * profile.weights.get(factor)
            for factor, result in factor_scores.items()
        )

    def _describe_impact(self, factor: Factor, reading: WeatherReading, profile: ActivityProfile) -> str:
        conditions = profile.optimal_conditions

        if factor == Factor.TEMPERATURE:
            low, high = conditions.temp_range
            return (
                f"Current: {round_half_up(reading.temp)}°C "
                f"(Optimal: {format_number(low)}-{format_number(high)}°C)"
            )
        if factor == Factor.WIND:
            return (
                f"Current: {format_number(reading.wind_speed)} m/s "
                f"(Max recommended: {format_number(conditions.max_wind)} m/s)"
            )
        if factor == Factor.PRECIPITATION:
            if has_rain(reading):
                return "Rain detected in current conditions"
            if reading.precipitation_probability is not None:
                return f"Precipitation probability: {round_half_up(reading.precipitation_probability * 100)}%"
            return "No precipitation expected"
        if factor == Factor.HUMIDITY:
            return (
                f"Current: {format_number(reading.humidity)}% "
                f"(Max comfortable: {format_number(conditions.max_humidity)}%)"
            )
        return (
            f"Current: {round_half_up(reading.visibility / 1000)}km "
            f"(Min recommended: {round_half_up(conditions.min_visibility / 1000)}km)"
        )


def assess_activity_risk(
    reading: WeatherReading,
    activity: Union[ActivityProfile, str],
    registry: Optional[ActivityRegistry] = None,
) -> EnhancedRiskAssessment:
    """Convenience wrapper around RiskAggregator.assess."""
    return RiskAggregator(registry).assess(reading, activity)


def factor_breakdown(assessment: EnhancedRiskAssessment) -> List[Dict[str, object]]:
    """Flatten factor assessments into rows for tables and exports."""
    return [
        {
            "factor": factor.value,
            "score": result.score,
            "status": result.status.value,
            "impact": result.impact,
        }
        for factor, result in assessment.factors.items()
    ]


def limiting_factor(assessment: EnhancedRiskAssessment) -> Optional[Factor]:
    """
    The factor holding the assessment back the most.

    Worst status wins, then the lower score; equal factors keep their
    documented order. None when every factor is optimal.
    """
    worst = None
    for factor, result in assessment.factors.items():
        if result.status == FactorStatus.OPTIMAL:
            continue
        key = (result.status.rank, -result.score)
        if worst is None or key > worst[0]:
            worst = (key, factor)
    return worst[1] if worst else None
