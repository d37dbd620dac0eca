"""Load, validate, and look up industry benchmarks from JSON files."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from roi_engine.benchmarks.schema import BenchmarkTable, IndustryBenchmark
from roi_engine.errors import ConfigurationError

# Default directory for benchmark config files
_CONFIG_DIR = Path(__file__).parent / "configs"


def load_benchmarks(file_path: Path | None = None) -> BenchmarkTable:
    """Load and validate a benchmark table from a JSON file.

    If no path is provided, loads the bundled reference table.
    """
    if file_path is None:
        file_path = _CONFIG_DIR / "industry_benchmarks.json"

    if not file_path.exists():
        raise ConfigurationError("benchmark file not found", source=str(file_path))

    try:
        with open(file_path, "r") as f:
            raw = json.load(f)
        return BenchmarkTable.model_validate(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"malformed JSON: {e}", source=str(file_path)) from e
    except PydanticValidationError as e:
        raise ConfigurationError(f"invalid benchmark data: {e}", source=str(file_path)) from e


def get_industry_benchmark(table: BenchmarkTable, industry: str) -> IndustryBenchmark:
    """Look up one industry, failing loudly when it is not configured."""
    benchmark = table.industries.get(industry.lower())
    if benchmark is None:
        raise ConfigurationError(
            f"no benchmark for industry '{industry}'; known: {sorted(table.industries)}",
            source=f"benchmarks v{table.version}",
        )
    return benchmark
