from .comparator import BenchmarkComparator
from .loader import get_industry_benchmark, load_benchmarks
from .schema import BenchmarkTable, IndustryBenchmark

__all__ = [
    "BenchmarkComparator",
    "BenchmarkTable",
    "IndustryBenchmark",
    "get_industry_benchmark",
    "load_benchmarks",
]
