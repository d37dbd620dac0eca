from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_BENCHMARKS = Path(__file__).resolve().parent.parent / "benchmarks" / "configs" / "industry_benchmarks.json"


class RiskWeights(BaseModel):
    technical: float = Field(default=0.25, ge=0)
    financial: float = Field(default=0.25, ge=0)
    operational: float = Field(default=0.25, ge=0)
    strategic: float = Field(default=0.25, ge=0)


class Settings(BaseSettings):
    log_level: str = "INFO"

    # IRR root finding, annualized percentages
    irr_lower_bound: float = -99.0
    irr_upper_bound: float = 1000.0
    irr_max_iterations: int = Field(default=100, ge=1, le=100)
    irr_tolerance: float = 1e-6

    benchmark_file: Path = _DEFAULT_BENCHMARKS
    benchmark_margin: float = 0.10
    default_industry: str = "technology"

    trend_up_threshold: float = 2.0
    trend_down_threshold: float = -2.0

    risk_weights: RiskWeights = Field(default_factory=RiskWeights)
    risk_exposure_reference: float = Field(default=100_000.0, gt=0)

    # Resolved alerts kept retrievable by id before the oldest are dropped
    resolved_alert_retention: int = Field(default=1000, ge=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ROI_ENGINE_",
        env_nested_delimiter="__",
        extra="ignore",
    )


def get_settings() -> Settings:
    return Settings()
