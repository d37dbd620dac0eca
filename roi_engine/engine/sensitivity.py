"""Sensitivity analysis: perturb inputs and bound the ROI outcome."""

from __future__ import annotations

import logging
import math
from dataclasses import fields, is_dataclass, replace
from enum import Enum
from typing import Any, Optional, Sequence

from roi_engine.errors import ValidationError
from roi_engine.models.enums import ImpactTier, NonConvergenceReason
from roi_engine.models.outcome import Metric, NonConvergent, is_defined, propagate
from roi_engine.models.roi import (
    ROIAssumptions,
    ROIInputs,
    ROIResults,
    SensitivityAnalysis,
    SensitivityScenarios,
    SensitivityVariable,
)

from .calculator import CoreCalculator

logger = logging.getLogger(__name__)

# ROI swing (percentage points between the bounds) for each derived tier
HIGH_IMPACT_SWING = 50.0
MEDIUM_IMPACT_SWING = 10.0


def numeric_input_paths(inputs: ROIInputs) -> list[str]:
    """All perturbable field paths, e.g. ``error_rate.manual``."""
    paths: list[str] = []

    def walk(obj: Any, prefix: str) -> None:
        for f in fields(obj):
            value = getattr(obj, f.name)
            if is_dataclass(value):
                walk(value, f"{prefix}{f.name}.")
            elif f.name == "implementation_rate" or (
                isinstance(value, (int, float)) and not isinstance(value, (bool, Enum))
            ):
                paths.append(f"{prefix}{f.name}")

    walk(inputs, "")
    return paths


def read_input(inputs: ROIInputs, path: str) -> float:
    if path == "implementation_rate":
        return inputs.effective_implementation_rate
    if path not in numeric_input_paths(inputs):
        raise ValidationError(path, None, "is not a numeric ROI input")
    obj: Any = inputs
    for part in path.split("."):
        obj = getattr(obj, part)
    return float(obj)


def with_input(obj: Any, path: str, value: float) -> Any:
    """Return a copy of ``obj`` with the field at ``path`` replaced."""
    head, _, rest = path.partition(".")
    if rest:
        return replace(obj, **{head: with_input(getattr(obj, head), rest, value)})
    return replace(obj, **{head: value})


def roi_rank(results: ROIResults) -> float:
    """Ordering key for favorability.

    A zero-cost result has no numeric ROI; any positive benefit on it
    outranks every finite ROI.
    """
    if is_defined(results.simple_roi):
        return results.simple_roi
    return math.inf if results.annual_savings > 0 else -math.inf


class SensitivityAnalyzer:
    """Re-runs the core calculation under perturbed inputs."""

    def __init__(self, calculator: Optional[CoreCalculator] = None) -> None:
        self.calculator = calculator or CoreCalculator()

    def analyze(
        self,
        inputs: ROIInputs,
        assumptions: ROIAssumptions,
        variables: Sequence[SensitivityVariable],
    ) -> SensitivityAnalysis:
        most_likely = self.calculator.compute(inputs, assumptions)
        checked = self._check_variables(inputs, variables)

        analyzed = tuple(self._analyze_variable(inputs, assumptions, var) for var in checked)
        optimistic = self._scenario(inputs, assumptions, checked, favorable=True)
        pessimistic = self._scenario(inputs, assumptions, checked, favorable=False)

        logger.info(
            "Sensitivity analysis over %d variables: optimistic=%s most_likely=%s pessimistic=%s",
            len(checked),
            optimistic.simple_roi,
            most_likely.simple_roi,
            pessimistic.simple_roi,
        )
        return SensitivityAnalysis(
            variables=analyzed,
            scenarios=SensitivityScenarios(
                optimistic=optimistic,
                pessimistic=pessimistic,
                most_likely=most_likely,
            ),
        )

    @staticmethod
    def _check_variables(
        inputs: ROIInputs, variables: Sequence[SensitivityVariable]
    ) -> list[SensitivityVariable]:
        seen: set[str] = set()
        checked: list[SensitivityVariable] = []
        for var in variables:
            if var.name in seen:
                raise ValidationError(var.name, var.name, "sensitivity variable listed twice")
            seen.add(var.name)

            base = read_input(inputs, var.name)
            if not (math.isfinite(var.min_value) and math.isfinite(var.max_value)):
                raise ValidationError(var.name, (var.min_value, var.max_value), "range must be finite")
            if var.min_value > var.max_value:
                raise ValidationError(
                    var.name, (var.min_value, var.max_value), "range min exceeds range max"
                )
            if var.base_value is not None and var.base_value != base:
                raise ValidationError(
                    var.name, var.base_value, f"base value does not match the input value {base}"
                )
            if not (var.min_value <= base <= var.max_value):
                raise ValidationError(
                    var.name, base, f"base value lies outside [{var.min_value}, {var.max_value}]"
                )
            checked.append(replace(var, base_value=base))
        return checked

    def _at(
        self, inputs: ROIInputs, assumptions: ROIAssumptions, name: str, value: float
    ) -> ROIResults:
        return self.calculator.compute(with_input(inputs, name, value), assumptions)

    def _analyze_variable(
        self,
        inputs: ROIInputs,
        assumptions: ROIAssumptions,
        var: SensitivityVariable,
    ) -> SensitivityVariable:
        """ROI at each bound with every other input held at its base value."""
        roi_min = self._at(inputs, assumptions, var.name, var.min_value).simple_roi
        roi_max = self._at(inputs, assumptions, var.name, var.max_value).simple_roi

        impact_on_roi: Metric
        if not is_defined(roi_min):
            impact_on_roi = propagate("impact_on_roi", roi_min)
        elif not is_defined(roi_max):
            impact_on_roi = propagate("impact_on_roi", roi_max)
        elif var.max_value == var.min_value:
            impact_on_roi = NonConvergent(
                metric="impact_on_roi",
                reason=NonConvergenceReason.DEGENERATE_RANGE,
                detail=f"{var.name} range has zero width",
            )
        else:
            impact_on_roi = (roi_max - roi_min) / (var.max_value - var.min_value)

        return replace(
            var,
            impact=var.impact or self._impact_tier(roi_min, roi_max),
            roi_at_min=roi_min,
            roi_at_max=roi_max,
            impact_on_roi=impact_on_roi,
        )

    @staticmethod
    def _impact_tier(roi_min: Metric, roi_max: Metric) -> ImpactTier:
        if not (is_defined(roi_min) and is_defined(roi_max)):
            return ImpactTier.HIGH
        swing = abs(roi_max - roi_min)
        if swing >= HIGH_IMPACT_SWING:
            return ImpactTier.HIGH
        if swing >= MEDIUM_IMPACT_SWING:
            return ImpactTier.MEDIUM
        return ImpactTier.LOW

    def _scenario(
        self,
        inputs: ROIInputs,
        assumptions: ROIAssumptions,
        variables: Sequence[SensitivityVariable],
        favorable: bool,
    ) -> ROIResults:
        """Move each variable to its favorable (or unfavorable) bound in turn.

        ROI is monotone in every single input, and each variable still sits at
        its base value when its turn comes, so every step moves the scenario
        ROI in the requested direction.
        """
        current = inputs
        for var in variables:
            low = with_input(current, var.name, var.min_value)
            high = with_input(current, var.name, var.max_value)
            # Ties count the upper bound as the favorable one
            high_is_favorable = roi_rank(self.calculator.compute(high, assumptions)) >= roi_rank(
                self.calculator.compute(low, assumptions)
            )
            current = high if high_is_favorable == favorable else low
        return self.calculator.compute(current, assumptions)
