"""Risk assessment engine.

Combines categorical risk scores with probability-weighted risk factors into
a single 0-100 score, with mitigation and contingency guidance.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from roi_engine.config import Settings, get_settings
from roi_engine.errors import ConfigurationError, ValidationError
from roi_engine.models.enums import BusinessStability, RiskLevel
from roi_engine.models.outcome import value_or
from roi_engine.models.roi import (
    RiskAssessment,
    RiskCategories,
    RiskFactor,
    ROIAssumptions,
    ROIInputs,
    ROIResults,
)

logger = logging.getLogger(__name__)

CATEGORIES = ("technical", "financial", "operational", "strategic")

MEDIUM_RISK_THRESHOLD = 35.0
HIGH_RISK_THRESHOLD = 65.0
CONTINGENCY_THRESHOLD = 70.0

_CONTINGENCY_PLANS = {
    "technical": "Keep the manual process documented and runnable until the automation is stable",
    "financial": "Stage the investment behind a pilot with an explicit go/no-go savings checkpoint",
    "operational": "Assign an owner for failed runs and define a manual fallback for each step",
    "strategic": "Re-validate the business case with stakeholders before scaling further",
}

# Hours of implementation effort treated as maximal technical risk
_FULL_TECHNICAL_RISK_HOURS = 160.0

_STABILITY_PENALTY = {
    BusinessStability.STABLE: 0.0,
    BusinessStability.GROWING: 5.0,
    BusinessStability.DECLINING: 10.0,
    BusinessStability.VOLATILE: 20.0,
}


def risk_level(score: float) -> RiskLevel:
    if score >= HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def estimate_category_scores(
    inputs: ROIInputs,
    results: ROIResults,
    assumptions: ROIAssumptions,
) -> RiskCategories:
    """Heuristic category scores for callers that supply none."""
    technical = min(100.0, inputs.implementation_hours / _FULL_TECHNICAL_RISK_HOURS * 100)

    # Never paying back saturates the financial score
    payback = value_or(results.payback_period, math.inf)
    financial = min(100.0, payback / (assumptions.technology_lifespan * 12) * 100)

    operational = inputs.error_rate.automated * 5
    if results.time_saved_per_task <= 0:
        operational += 30.0
    operational = min(100.0, operational)

    strategic = min(
        100.0,
        100.0
        - results.competitive_advantage
        + _STABILITY_PENALTY[BusinessStability(assumptions.business_stability)],
    )
    return RiskCategories(
        technical=technical,
        financial=financial,
        operational=operational,
        strategic=max(0.0, strategic),
    )


class RiskAssessor:
    """Stateless risk scoring with configurable category weights."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        weights = self.settings.risk_weights
        self.weights = {name: getattr(weights, name) for name in CATEGORIES}
        if sum(self.weights.values()) <= 0:
            raise ConfigurationError("risk category weights must not all be zero", source="settings")

    def assess(
        self,
        category_scores: RiskCategories,
        factors: Sequence[RiskFactor] = (),
        exposure_reference: Optional[float] = None,
    ) -> RiskAssessment:
        """Weighted category mean, raised by normalized factor exposure.

        ``exposure_reference`` is the financial amount that maps to a
        100-point adjustment; it defaults to the configured reference.
        """
        self._validate(category_scores, factors)

        total_weight = sum(self.weights.values())
        weighted_mean = (
            sum(getattr(category_scores, name) * w for name, w in self.weights.items())
            / total_weight
        )

        reference = exposure_reference
        if reference is None or reference <= 0:
            reference = self.settings.risk_exposure_reference
        exposure = sum(f.probability * f.impact for f in factors)
        adjustment = min(100.0, exposure / reference * 100)

        overall = min(100.0, weighted_mean + adjustment)

        mitigations: list[str] = []
        for factor in factors:
            if factor.mitigation and factor.mitigation not in mitigations:
                mitigations.append(factor.mitigation)

        contingency = [
            _CONTINGENCY_PLANS[name]
            for name in CATEGORIES
            if getattr(category_scores, name) > CONTINGENCY_THRESHOLD
        ]

        logger.debug(
            "Risk assessed: mean=%.2f adjustment=%.2f overall=%.2f", weighted_mean, adjustment, overall
        )
        return RiskAssessment(
            overall_risk_score=overall,
            risk_level=risk_level(overall),
            risk_categories=category_scores,
            risk_factors=tuple(factors),
            factor_adjustment=adjustment,
            mitigation_strategies=tuple(mitigations),
            contingency_plans=tuple(contingency),
        )

    @staticmethod
    def _validate(category_scores: RiskCategories, factors: Sequence[RiskFactor]) -> None:
        for name in CATEGORIES:
            score = getattr(category_scores, name)
            if not math.isfinite(score) or not (0 <= score <= 100):
                raise ValidationError(f"risk_categories.{name}", score, "must be between 0 and 100")

        for i, factor in enumerate(factors):
            prefix = f"risk_factors[{i}]"
            if not math.isfinite(factor.probability) or not (0 <= factor.probability <= 1):
                raise ValidationError(
                    f"{prefix}.probability", factor.probability, "must be between 0 and 1"
                )
            if not math.isfinite(factor.impact) or factor.impact < 0:
                raise ValidationError(f"{prefix}.impact", factor.impact, "cannot be negative")
            if not math.isfinite(factor.residual_risk) or factor.residual_risk < 0:
                raise ValidationError(
                    f"{prefix}.residual_risk", factor.residual_risk, "cannot be negative"
                )
            if factor.residual_risk > factor.impact:
                raise ValidationError(
                    f"{prefix}.residual_risk",
                    factor.residual_risk,
                    f"exceeds the unmitigated impact of {factor.impact}",
                )
