"""Pydantic models for the industry benchmark reference table."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from roi_engine.models.roi import IndustryAverages


class IndustryBenchmark(BaseModel):
    """Reference values for one industry."""

    label: str
    roi_percentage: float = Field(description="Typical first-year simple ROI, percent")
    payback_period: float = Field(gt=0, description="Typical payback, months")
    adoption_rate: float = Field(ge=0, le=100, description="Share of peers automating, percent")
    error_reduction: Optional[float] = Field(default=None, ge=0, le=100)
    productivity_increase: Optional[float] = Field(default=None, ge=0, le=100)
    best_practices: list[str] = Field(default_factory=list)
    source: str = Field(default="", description="Citation for the benchmark data")

    def to_averages(self) -> IndustryAverages:
        return IndustryAverages(
            roi_percentage=self.roi_percentage,
            payback_period=self.payback_period,
            adoption_rate=self.adoption_rate,
            error_reduction=self.error_reduction,
            productivity_increase=self.productivity_increase,
        )


class BenchmarkTable(BaseModel):
    """Top-level benchmark configuration, keyed by industry id."""

    version: str
    industries: dict[str, IndustryBenchmark] = Field(min_length=1)

    @field_validator("industries")
    @classmethod
    def industry_ids_are_lowercase(cls, v: dict[str, IndustryBenchmark]) -> dict[str, IndustryBenchmark]:
        for key in v:
            if key != key.lower():
                raise ValueError(f"Industry id '{key}' must be lowercase")
        return v
