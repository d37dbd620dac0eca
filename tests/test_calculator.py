"""Tests for the core ROI calculator."""

import math
from dataclasses import replace

import pytest

from roi_engine.config import Settings
from roi_engine.engine import CoreCalculator
from roi_engine.errors import ConfigurationError, ValidationError
from roi_engine.models import (
    BusinessValue,
    ErrorRates,
    NonConvergent,
    ROIAssumptions,
    ROIInputs,
    TrainingCosts,
    is_defined,
)
from roi_engine.models.enums import NonConvergenceReason, TaskFrequency


class TestSavings:
    def test_weekly_tasks_use_weeks_per_month(self, calculator, scenario_a, assumptions):
        result = calculator.compute(scenario_a, assumptions)
        assert result.tasks_per_month == pytest.approx(433.0)
        assert result.time_saved_per_task == 55

    def test_hours_and_labor_savings(self, calculator, scenario_a, assumptions):
        result = calculator.compute(scenario_a, assumptions)
        assert result.hours_per_month == pytest.approx(433 * 55 / 60)
        assert result.gross_monthly_savings == pytest.approx(433 * 55 / 60 * 25)

    def test_daily_tasks_use_thirty_days(self, calculator, detailed_workflow, assumptions):
        result = calculator.compute(detailed_workflow, assumptions)
        assert result.tasks_per_month == pytest.approx(600)
        assert result.hours_per_month == pytest.approx(270)

    def test_monthly_frequency_is_identity(self, calculator, scenario_a, assumptions):
        inputs = ROIInputs(
            manual_time_per_task=60,
            task_frequency=TaskFrequency.MONTHLY,
            tasks_per_period=12,
            employee_hourly_rate=25,
        )
        assert calculator.compute(inputs, assumptions).tasks_per_month == 12

    def test_rework_savings_added_to_gross(self, calculator, detailed_workflow, assumptions):
        result = calculator.compute(detailed_workflow, assumptions)
        labor = 270 * 40
        rework = 600 * (10 - 2) / 100 * 15
        assert result.gross_monthly_savings == pytest.approx(labor + rework)

    def test_operating_cost_subtracted_once(self, calculator, detailed_workflow, assumptions):
        result = calculator.compute(detailed_workflow, assumptions)
        # $250 software + 2 maintenance hours at $120
        assert result.monthly_operating_cost == pytest.approx(490)
        assert result.monthly_savings == pytest.approx(result.gross_monthly_savings - 490)
        assert result.annual_savings == pytest.approx(result.monthly_savings * 12)

    def test_certification_costs_are_spread_monthly(self, calculator, scenario_a, assumptions):
        inputs = replace(scenario_a, training_costs=TrainingCosts(certification_costs=1200))
        assert calculator.compute(inputs, assumptions).monthly_operating_cost == pytest.approx(100)


class TestCosts:
    def test_implementation_cost(self, calculator, scenario_a, assumptions):
        assert calculator.compute(scenario_a, assumptions).implementation_cost == 4000

    def test_implementation_rate_defaults_to_hourly_rate(self, calculator, assumptions):
        inputs = ROIInputs(
            manual_time_per_task=10,
            task_frequency=TaskFrequency.DAILY,
            tasks_per_period=5,
            employee_hourly_rate=30,
            implementation_hours=10,
        )
        assert calculator.compute(inputs, assumptions).implementation_cost == 300

    def test_one_time_training_is_capitalized(self, calculator, scenario_a, assumptions):
        inputs = replace(
            scenario_a, training_costs=TrainingCosts(initial_training=500, knowledge_transfer=250)
        )
        assert calculator.compute(inputs, assumptions).implementation_cost == 4750


class TestPaybackAndROI:
    def test_payback_months(self, calculator, scenario_a, assumptions):
        result = calculator.compute(scenario_a, assumptions)
        assert result.payback_period == pytest.approx(4000 / result.monthly_savings)
        assert result.break_even_month == 1.0

    def test_simple_and_annual_roi(self, calculator, scenario_a, assumptions):
        result = calculator.compute(scenario_a, assumptions)
        assert result.simple_roi == pytest.approx(result.annual_savings / 4000 * 100)
        assert result.annual_roi == pytest.approx((result.annual_savings - 4000) / 4000 * 100)

    def test_horizon_roi_uses_cumulative_projection(self, calculator, scenario_a, assumptions):
        result = calculator.compute(scenario_a, assumptions)
        cumulative_3 = result.year_projections[2].cumulative_net_savings
        assert cumulative_3 == pytest.approx(result.annual_savings * 3)
        assert result.three_year_roi == pytest.approx((cumulative_3 - 4000) / 4000 * 100)

    def test_never_pays_back(self, calculator, assumptions):
        inputs = ROIInputs(
            manual_time_per_task=5,
            automated_time_per_task=10,
            task_frequency=TaskFrequency.DAILY,
            tasks_per_period=10,
            employee_hourly_rate=20,
        )
        result = calculator.compute(inputs, assumptions)
        assert isinstance(result.payback_period, NonConvergent)
        assert result.payback_period.reason is NonConvergenceReason.NEVER_PAYS_BACK
        assert result.break_even_month.reason is NonConvergenceReason.UPSTREAM
        assert result.warnings

    def test_zero_cost_roi_is_sentinel(self, calculator, assumptions):
        inputs = ROIInputs(
            manual_time_per_task=30,
            automated_time_per_task=5,
            task_frequency=TaskFrequency.DAILY,
            tasks_per_period=10,
            employee_hourly_rate=20,
            implementation_hours=0,
        )
        result = calculator.compute(inputs, assumptions)
        for metric in ("simple_roi", "annual_roi", "three_year_roi", "five_year_roi"):
            value = getattr(result, metric)
            assert isinstance(value, NonConvergent)
            assert value.reason is NonConvergenceReason.ZERO_COST
        assert result.payback_period == 0.0


class TestNPVAndIRR:
    def test_npv_discounts_monthly(self):
        npv = CoreCalculator.net_present_value(1000, 0, 12, 12.0)
        expected = sum(1000 / 1.01**m for m in range(1, 13))
        assert npv == pytest.approx(expected, rel=1e-9)

    def test_npv_subtracts_upfront_cost(self):
        assert CoreCalculator.net_present_value(1000, 5000, 12, 12.0) == pytest.approx(
            CoreCalculator.net_present_value(1000, 0, 12, 12.0) - 5000
        )

    def test_npv_below_undiscounted_total(self, calculator, scenario_a, assumptions):
        result = calculator.compute(scenario_a, assumptions)
        undiscounted = result.monthly_savings * 60 - result.implementation_cost
        assert 0 < result.net_present_value < undiscounted

    def test_irr_zeroes_npv(self, calculator, modest_workflow, assumptions):
        result = calculator.compute(modest_workflow, assumptions)
        irr = result.internal_rate_of_return
        assert is_defined(irr)
        assert 0 < irr < 100
        npv_at_irr = CoreCalculator.net_present_value(
            result.monthly_savings, result.implementation_cost, 60, irr
        )
        assert abs(npv_at_irr) < 0.01

    def test_irr_outside_bounds_reports_no_sign_change(self, calculator, scenario_a, assumptions):
        irr = calculator.compute(scenario_a, assumptions).internal_rate_of_return
        assert isinstance(irr, NonConvergent)
        assert irr.reason is NonConvergenceReason.NO_SIGN_CHANGE

    def test_irr_zero_cost(self, calculator):
        irr = calculator.internal_rate_of_return(500.0, 0.0, 60)
        assert irr.reason is NonConvergenceReason.ZERO_COST

    def test_irr_iteration_cap(self, modest_workflow, assumptions):
        calculator = CoreCalculator(Settings(irr_max_iterations=1, irr_tolerance=1e-12))
        irr = calculator.compute(modest_workflow, assumptions).internal_rate_of_return
        assert irr.reason is NonConvergenceReason.ITERATION_LIMIT

    def test_invalid_irr_bounds(self):
        with pytest.raises(ConfigurationError):
            CoreCalculator(Settings(irr_lower_bound=50.0, irr_upper_bound=10.0))


class TestQualityMetrics:
    def test_error_and_accuracy_metrics(self, calculator, detailed_workflow, assumptions):
        result = calculator.compute(detailed_workflow, assumptions)
        assert result.error_reduction == pytest.approx(80.0)
        assert result.accuracy_improvement == pytest.approx((98 - 90) / 90 * 100)
        assert result.consistency_score == pytest.approx(98.0)
        assert result.risk_reduction == pytest.approx(80.0)

    def test_zero_manual_error_rate_is_sentinel(self, calculator, scenario_a, assumptions):
        result = calculator.compute(scenario_a, assumptions)
        assert result.error_reduction.reason is NonConvergenceReason.ZERO_BASELINE
        assert result.risk_reduction.reason is NonConvergenceReason.UPSTREAM

    def test_productivity_and_time_to_value(self, calculator, scenario_a, assumptions):
        result = calculator.compute(scenario_a, assumptions)
        assert result.productivity_increase == pytest.approx(55 / 60 * 100)
        assert result.time_to_value == 5

    def test_scalability_score_is_capped(self, calculator, scenario_a, assumptions):
        result = calculator.compute(replace(scenario_a, scalability_factor=3), assumptions)
        assert result.scalability_score == 100.0


class TestProjections:
    def test_projection_covers_lifespan(self, calculator, scenario_a):
        result = calculator.compute(scenario_a, ROIAssumptions(technology_lifespan=7))
        assert [p.year for p in result.year_projections] == list(range(1, 8))

    def test_projection_has_at_least_five_years(self, calculator, scenario_a):
        result = calculator.compute(scenario_a, ROIAssumptions(technology_lifespan=2))
        assert len(result.year_projections) == 5

    def test_growth_and_inflation(self, calculator, detailed_workflow):
        result = calculator.compute(
            detailed_workflow, ROIAssumptions(growth_rate=10, inflation_rate=5)
        )
        year1, year2 = result.year_projections[:2]
        assert year2.gross_savings == pytest.approx(year1.gross_savings * 1.10)
        assert year2.operating_cost == pytest.approx(year1.operating_cost * 1.05)
        assert year2.cumulative_net_savings == pytest.approx(year1.net_savings + year2.net_savings)


class TestBusinessDrivers:
    def test_revenue_impact_adds_to_monthly_benefit(self, calculator, scenario_a, assumptions):
        base = calculator.compute(scenario_a, assumptions)
        boosted = calculator.compute(
            replace(scenario_a, business_value=BusinessValue(revenue_impact=500)), assumptions
        )
        assert boosted.monthly_savings == pytest.approx(base.monthly_savings + 500)
        assert boosted.hours_per_month == base.hours_per_month
        assert boosted.payback_period < base.payback_period

    def test_compliance_probability_scales_avoided_cost(self, calculator, detailed_workflow):
        inputs = replace(detailed_workflow, compliance_risk=12_000)
        unlikely = calculator.compute(inputs, ROIAssumptions())
        likely = calculator.compute(inputs, ROIAssumptions(compliance_risk_probability=50))
        # 12,000/yr at 50% likelihood, 80% of errors avoided
        assert likely.monthly_savings == pytest.approx(unlikely.monthly_savings + 400)
        assert unlikely.monthly_savings == pytest.approx(
            calculator.compute(detailed_workflow, ROIAssumptions()).monthly_savings
        )

    def test_turnover_charges_retraining_each_year(self, calculator, scenario_a):
        inputs = replace(scenario_a, training_costs=TrainingCosts(initial_training=1000, knowledge_transfer=500))
        stable = calculator.compute(inputs, ROIAssumptions(inflation_rate=0))
        churning = calculator.compute(inputs, ROIAssumptions(inflation_rate=0, employee_turnover_rate=20))
        for before, after in zip(stable.year_projections, churning.year_projections):
            assert after.operating_cost == pytest.approx(before.operating_cost + 300)
        assert churning.five_year_roi < stable.five_year_roi
        assert churning.monthly_savings == stable.monthly_savings


class TestValidation:
    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"employee_hourly_rate": -5}, "employee_hourly_rate"),
            ({"employee_hourly_rate": 0}, "employee_hourly_rate"),
            ({"tasks_per_period": 0}, "tasks_per_period"),
            ({"manual_time_per_task": math.nan}, "manual_time_per_task"),
            ({"error_rate": ErrorRates(manual=120)}, "error_rate.manual"),
            ({"task_frequency": "hourly"}, "task_frequency"),
        ],
    )
    def test_rejects_bad_inputs(self, calculator, assumptions, overrides, field):
        params = dict(
            manual_time_per_task=30,
            task_frequency=TaskFrequency.DAILY,
            tasks_per_period=10,
            employee_hourly_rate=20,
        )
        params.update(overrides)
        with pytest.raises(ValidationError) as exc_info:
            calculator.compute(ROIInputs(**params), assumptions)
        assert exc_info.value.field == field

    @pytest.mark.parametrize(
        "assumptions, field",
        [
            (ROIAssumptions(discount_rate=0), "discount_rate"),
            (ROIAssumptions(technology_lifespan=0), "technology_lifespan"),
            (ROIAssumptions(technology_lifespan=500), "technology_lifespan"),
            (ROIAssumptions(inflation_rate=-100), "inflation_rate"),
            (ROIAssumptions(employee_turnover_rate=150), "employee_turnover_rate"),
            (ROIAssumptions(compliance_risk_probability=101), "compliance_risk_probability"),
        ],
    )
    def test_rejects_bad_assumptions(self, calculator, scenario_a, assumptions, field):
        with pytest.raises(ValidationError) as exc_info:
            calculator.compute(scenario_a, assumptions)
        assert exc_info.value.field == field
