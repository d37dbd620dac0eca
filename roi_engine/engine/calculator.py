"""Core ROI calculation engine.

Takes one workflow's operational inputs + macro assumptions -> ROIResults.
Every method is a pure function of its arguments and the read-only settings.
"""

from __future__ import annotations

import logging
import math
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Optional

from roi_engine.config import Settings, get_settings
from roi_engine.errors import ConfigurationError, ValidationError
from roi_engine.models.enums import NonConvergenceReason, TaskFrequency
from roi_engine.models.outcome import Metric, NonConvergent, is_defined, percent_change, propagate
from roi_engine.models.roi import ROIAssumptions, ROIInputs, ROIResults, YearProjection

logger = logging.getLogger(__name__)

# Tasks per month for each period unit
MONTHLY_TASK_MULTIPLIERS: dict[TaskFrequency, float] = {
    TaskFrequency.DAILY: 30.0,
    TaskFrequency.WEEKLY: 4.33,
    TaskFrequency.MONTHLY: 1.0,
}

HOURS_PER_WORKDAY = 8
MAX_LIFESPAN_YEARS = 100
MIN_PROJECTION_YEARS = 5


def _check_non_negative(obj: Any, prefix: str = "") -> None:
    """Reject negative or non-finite numbers anywhere in a dataclass tree."""
    for f in fields(obj):
        value = getattr(obj, f.name)
        path = f"{prefix}{f.name}"
        if is_dataclass(value):
            _check_non_negative(value, prefix=f"{path}.")
        elif isinstance(value, (int, float)) and not isinstance(value, (bool, Enum)):
            if not math.isfinite(value):
                raise ValidationError(path, value, "must be a finite number")
            if value < 0:
                raise ValidationError(path, value, "cannot be negative")


def validate_inputs(inputs: ROIInputs) -> None:
    """Raise ValidationError on the first malformed input field."""
    try:
        TaskFrequency(inputs.task_frequency)
    except ValueError:
        raise ValidationError(
            "task_frequency", inputs.task_frequency, "must be daily, weekly or monthly"
        ) from None

    _check_non_negative(inputs)

    if inputs.tasks_per_period == 0:
        raise ValidationError("tasks_per_period", inputs.tasks_per_period, "must be greater than zero")
    if inputs.employee_hourly_rate <= 0:
        raise ValidationError(
            "employee_hourly_rate", inputs.employee_hourly_rate, "must be greater than zero"
        )
    for name in ("manual", "automated"):
        rate = getattr(inputs.error_rate, name)
        if rate > 100:
            raise ValidationError(f"error_rate.{name}", rate, "must be a percentage in [0, 100]")


def validate_assumptions(assumptions: ROIAssumptions) -> None:
    for name in ("inflation_rate", "growth_rate"):
        value = getattr(assumptions, name)
        if not math.isfinite(value) or value <= -100:
            raise ValidationError(name, value, "must be a finite percentage above -100")
    for name in ("employee_turnover_rate", "error_cost_escalation", "compliance_risk_probability"):
        value = getattr(assumptions, name)
        if not math.isfinite(value) or value < 0:
            raise ValidationError(name, value, "must be a finite, non-negative percentage")
    for name in ("employee_turnover_rate", "compliance_risk_probability"):
        value = getattr(assumptions, name)
        if value > 100:
            raise ValidationError(name, value, "must be a percentage in [0, 100]")
    if not math.isfinite(assumptions.discount_rate) or assumptions.discount_rate <= 0:
        raise ValidationError("discount_rate", assumptions.discount_rate, "must be greater than zero")
    lifespan = assumptions.technology_lifespan
    if not math.isfinite(lifespan) or lifespan <= 0:
        raise ValidationError("technology_lifespan", lifespan, "must be greater than zero")
    if lifespan > MAX_LIFESPAN_YEARS:
        raise ValidationError(
            "technology_lifespan", lifespan, f"cannot exceed {MAX_LIFESPAN_YEARS} years"
        )


class CoreCalculator:
    """Stateless engine that runs a single workflow ROI calculation."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        lower, upper = self.settings.irr_lower_bound, self.settings.irr_upper_bound
        # A monthly rate of -100% would divide by zero
        if not (-1200 < lower < upper):
            raise ConfigurationError(
                f"IRR bounds must satisfy -1200 < lower < upper, got [{lower}, {upper}]",
                source="settings",
            )

    def compute(self, inputs: ROIInputs, assumptions: ROIAssumptions) -> ROIResults:
        """Convert operational inputs into financial ROI results."""
        validate_inputs(inputs)
        validate_assumptions(assumptions)
        warnings: list[str] = []

        frequency = TaskFrequency(inputs.task_frequency)
        tasks_per_month = inputs.tasks_per_period * MONTHLY_TASK_MULTIPLIERS[frequency]

        time_saved = inputs.manual_time_per_task - inputs.automated_time_per_task
        if time_saved <= 0:
            message = (
                f"Automated task time ({inputs.automated_time_per_task} min) is not "
                f"below manual time ({inputs.manual_time_per_task} min); automation "
                "adds no labor savings."
            )
            warnings.append(message)
            logger.warning(message)

        hours_per_month = tasks_per_month * time_saved / 60
        labor_savings = hours_per_month * inputs.employee_hourly_rate
        revenue_gain = inputs.business_value.revenue_impact
        rework_savings = (
            tasks_per_month
            * (inputs.error_rate.manual - inputs.error_rate.automated)
            / 100
            * inputs.rework_cost
        )
        compliance_savings = self.compliance_savings(inputs, assumptions)
        gross_monthly_savings = labor_savings + revenue_gain + rework_savings + compliance_savings
        monthly_operating_cost = self.monthly_operating_cost(inputs)
        monthly_savings = gross_monthly_savings - monthly_operating_cost
        annual_savings = monthly_savings * 12

        implementation_cost = self.implementation_cost(inputs)
        months = max(1, round(assumptions.technology_lifespan * 12))

        payback = self.payback_period(implementation_cost, monthly_savings)
        break_even: Metric = (
            float(math.ceil(payback)) if is_defined(payback) else propagate("break_even_month", payback)
        )

        projections = self.project_years(
            recurring_savings=labor_savings + revenue_gain,
            quality_savings=rework_savings + compliance_savings,
            monthly_operating_cost=monthly_operating_cost,
            annual_retraining_cost=self.annual_retraining_cost(inputs, assumptions),
            assumptions=assumptions,
        )

        error_reduction = percent_change(
            "error_reduction", inputs.error_rate.manual, inputs.error_rate.automated
        )
        productivity_increase = percent_change(
            "productivity_increase", inputs.manual_time_per_task, inputs.automated_time_per_task
        )
        if inputs.compliance_risk > 0:
            compliance_improvement: Metric = (
                error_reduction
                if is_defined(error_reduction)
                else propagate("compliance_improvement", error_reduction)
            )
        else:
            compliance_improvement = 0.0
        risk_reduction: Metric = (
            min(100.0, max(0.0, error_reduction))
            if is_defined(error_reduction)
            else propagate("risk_reduction", error_reduction)
        )

        results = ROIResults(
            gross_monthly_savings=gross_monthly_savings,
            monthly_savings=monthly_savings,
            annual_savings=annual_savings,
            implementation_cost=implementation_cost,
            monthly_operating_cost=monthly_operating_cost,
            net_present_value=self.net_present_value(
                monthly_savings, implementation_cost, months, assumptions.discount_rate
            ),
            internal_rate_of_return=self.internal_rate_of_return(
                monthly_savings, implementation_cost, months
            ),
            payback_period=payback,
            time_to_value=math.ceil(inputs.implementation_hours / HOURS_PER_WORKDAY),
            break_even_month=break_even,
            simple_roi=self.ratio_roi("simple_roi", annual_savings, implementation_cost),
            annual_roi=self.ratio_roi(
                "annual_roi", annual_savings - implementation_cost, implementation_cost
            ),
            three_year_roi=self.horizon_roi("three_year_roi", projections, 3, implementation_cost),
            five_year_roi=self.horizon_roi("five_year_roi", projections, 5, implementation_cost),
            tasks_per_month=tasks_per_month,
            hours_per_month=hours_per_month,
            time_saved_per_task=time_saved,
            error_reduction=error_reduction,
            productivity_increase=productivity_increase,
            accuracy_improvement=self.accuracy_improvement(
                inputs.error_rate.manual, inputs.error_rate.automated
            ),
            consistency_score=100.0 - inputs.error_rate.automated,
            compliance_improvement=compliance_improvement,
            scalability_score=min(100.0, inputs.scalability_factor * 50.0),
            risk_reduction=risk_reduction,
            competitive_advantage=min(100.0, inputs.business_value.competitive_advantage),
            year_projections=projections,
            warnings=tuple(warnings),
        )

        logger.info(
            "ROI calculation completed: monthly_savings=%.2f implementation_cost=%.2f payback=%s",
            monthly_savings,
            implementation_cost,
            f"{payback:.2f}" if is_defined(payback) else "never",
        )
        return results

    @staticmethod
    def monthly_operating_cost(inputs: ROIInputs) -> float:
        """Recurring software, training and maintenance spend per month."""
        return (
            inputs.software_costs.total
            + inputs.training_costs.ongoing_training
            + inputs.training_costs.certification_costs / 12
            + inputs.ongoing_maintenance_hours * inputs.effective_implementation_rate
        )

    @staticmethod
    def compliance_savings(inputs: ROIInputs, assumptions: ROIAssumptions) -> float:
        """Expected monthly non-compliance cost avoided by the error reduction."""
        manual = inputs.error_rate.manual
        if manual == 0:
            return 0.0
        avoided_share = max(0.0, manual - inputs.error_rate.automated) / manual
        expected_annual = inputs.compliance_risk * assumptions.compliance_risk_probability / 100
        return expected_annual * avoided_share / 12

    @staticmethod
    def annual_retraining_cost(inputs: ROIInputs, assumptions: ROIAssumptions) -> float:
        """One-time training redone each year for the share of staff replaced."""
        onboarding = inputs.training_costs.initial_training + inputs.training_costs.knowledge_transfer
        return onboarding * assumptions.employee_turnover_rate / 100

    @staticmethod
    def implementation_cost(inputs: ROIInputs) -> float:
        return (
            inputs.implementation_hours * inputs.effective_implementation_rate
            + inputs.training_costs.initial_training
            + inputs.training_costs.knowledge_transfer
        )

    @staticmethod
    def payback_period(implementation_cost: float, monthly_savings: float) -> Metric:
        """Months until cumulative savings cover the implementation cost."""
        if monthly_savings <= 0:
            return NonConvergent(
                metric="payback_period",
                reason=NonConvergenceReason.NEVER_PAYS_BACK,
                detail=f"monthly savings of {monthly_savings:.2f} are not positive",
            )
        return implementation_cost / monthly_savings

    @staticmethod
    def ratio_roi(metric: str, net_benefit: float, implementation_cost: float) -> Metric:
        if implementation_cost == 0:
            return NonConvergent(
                metric=metric,
                reason=NonConvergenceReason.ZERO_COST,
                detail="implementation cost is zero",
            )
        return net_benefit / implementation_cost * 100

    @staticmethod
    def accuracy_improvement(manual_error_rate: float, automated_error_rate: float) -> Metric:
        manual_accuracy = 100.0 - manual_error_rate
        if manual_accuracy == 0:
            return NonConvergent(
                metric="accuracy_improvement",
                reason=NonConvergenceReason.ZERO_BASELINE,
                detail="manual accuracy is zero",
            )
        automated_accuracy = 100.0 - automated_error_rate
        return (automated_accuracy - manual_accuracy) / manual_accuracy * 100

    @staticmethod
    def net_present_value(
        monthly_cash_flow: float,
        implementation_cost: float,
        months: int,
        annual_rate: float,
    ) -> float:
        """Discounted sum of monthly cash flows minus the upfront cost.

        ``annual_rate`` is an annual percentage, discounted monthly.
        """
        monthly_rate = annual_rate / 100 / 12
        discount = 1.0
        total = 0.0
        for _ in range(months):
            discount /= 1 + monthly_rate
            total += monthly_cash_flow * discount
        return total - implementation_cost

    def internal_rate_of_return(
        self,
        monthly_cash_flow: float,
        implementation_cost: float,
        months: int,
    ) -> Metric:
        """Annualized rate that zeroes NPV, by bounded bisection."""
        metric = "internal_rate_of_return"
        if implementation_cost == 0:
            return NonConvergent(
                metric=metric,
                reason=NonConvergenceReason.ZERO_COST,
                detail="no upfront investment to recover",
            )

        def npv(rate: float) -> float:
            return self.net_present_value(monthly_cash_flow, implementation_cost, months, rate)

        lo, hi = self.settings.irr_lower_bound, self.settings.irr_upper_bound
        tolerance = self.settings.irr_tolerance
        f_lo, f_hi = npv(lo), npv(hi)
        if f_lo == 0:
            return lo
        if f_hi == 0:
            return hi
        if (f_lo > 0) == (f_hi > 0):
            return NonConvergent(
                metric=metric,
                reason=NonConvergenceReason.NO_SIGN_CHANGE,
                detail=f"NPV does not change sign between {lo}% and {hi}%",
            )

        for _ in range(self.settings.irr_max_iterations):
            mid = (lo + hi) / 2
            f_mid = npv(mid)
            if abs(f_mid) < tolerance or (hi - lo) / 2 < tolerance:
                return mid
            if (f_mid > 0) == (f_lo > 0):
                lo, f_lo = mid, f_mid
            else:
                hi = mid

        return NonConvergent(
            metric=metric,
            reason=NonConvergenceReason.ITERATION_LIMIT,
            detail=f"no convergence within {self.settings.irr_max_iterations} iterations",
        )

    @staticmethod
    def project_years(
        recurring_savings: float,
        quality_savings: float,
        monthly_operating_cost: float,
        annual_retraining_cost: float,
        assumptions: ROIAssumptions,
    ) -> tuple[YearProjection, ...]:
        """Year-by-year projection: savings grow, costs inflate, error costs escalate.

        Retraining for staff turnover is charged as operating cost every year.
        """
        years = max(MIN_PROJECTION_YEARS, math.ceil(assumptions.technology_lifespan))
        growth = 1 + assumptions.growth_rate / 100
        inflation = 1 + assumptions.inflation_rate / 100
        escalation = 1 + assumptions.error_cost_escalation / 100

        projections: list[YearProjection] = []
        cumulative = 0.0
        for year in range(1, years + 1):
            gross = (
                recurring_savings * 12 * growth ** (year - 1)
                + quality_savings * 12 * (growth * escalation) ** (year - 1)
            )
            operating = (monthly_operating_cost * 12 + annual_retraining_cost) * inflation ** (year - 1)
            net = gross - operating
            cumulative += net
            projections.append(
                YearProjection(
                    year=year,
                    gross_savings=gross,
                    operating_cost=operating,
                    net_savings=net,
                    cumulative_net_savings=cumulative,
                )
            )
        return tuple(projections)

    def horizon_roi(
        self,
        metric: str,
        projections: tuple[YearProjection, ...],
        years: int,
        implementation_cost: float,
    ) -> Metric:
        cumulative = projections[years - 1].cumulative_net_savings
        return self.ratio_roi(metric, cumulative - implementation_cost, implementation_cost)
