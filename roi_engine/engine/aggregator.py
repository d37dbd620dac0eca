"""Statistical summaries over numeric series and business metric samples.

Aggregations are value objects computed on demand; they are never stored as
authoritative state.
"""

from __future__ import annotations

import math
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from roi_engine.errors import ValidationError
from roi_engine.models.business import (
    BusinessMetric,
    BusinessMetricsFilter,
    BusinessTrend,
    MetricAggregation,
    PeriodAggregation,
    Percentiles,
    TimeSeriesData,
    TrendPoint,
)
from roi_engine.models.enums import BusinessMetricType, MeasurementPeriod


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Linear interpolation between closest ranks: index = p/100 * (n - 1)."""
    if not sorted_values:
        return 0.0
    index = p / 100 * (len(sorted_values) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    fraction = index - lower
    return sorted_values[lower] + (sorted_values[upper] - sorted_values[lower]) * fraction


def aggregate(series: Iterable[float]) -> MetricAggregation:
    """Summarize a numeric series. An empty series yields all zeros."""
    values = list(series)
    for i, value in enumerate(values):
        if not math.isfinite(value):
            raise ValidationError(f"series[{i}]", value, "must be a finite number")
    if not values:
        return MetricAggregation()

    ordered = sorted(values)
    count = len(ordered)
    total = math.fsum(ordered)
    mean = total / count
    variance = math.fsum((v - mean) ** 2 for v in ordered) / count

    return MetricAggregation(
        sum=total,
        average=mean,
        min=ordered[0],
        max=ordered[-1],
        count=count,
        median=percentile(ordered, 50),
        standard_deviation=math.sqrt(variance),
        percentiles=Percentiles(
            p25=percentile(ordered, 25),
            p50=percentile(ordered, 50),
            p75=percentile(ordered, 75),
            p90=percentile(ordered, 90),
            p95=percentile(ordered, 95),
        ),
    )


def period_start(timestamp: datetime, period: MeasurementPeriod) -> datetime:
    """Start of the calendar bucket containing ``timestamp`` (weeks start Monday)."""
    day = timestamp.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is MeasurementPeriod.DAILY:
        return day
    if period is MeasurementPeriod.WEEKLY:
        return day - timedelta(days=day.weekday())
    if period is MeasurementPeriod.MONTHLY:
        return day.replace(day=1)
    if period is MeasurementPeriod.QUARTERLY:
        return day.replace(month=(day.month - 1) // 3 * 3 + 1, day=1)
    return day.replace(month=1, day=1)


def aggregate_time_series(
    points: Iterable[TimeSeriesData],
    period: MeasurementPeriod,
) -> tuple[PeriodAggregation, ...]:
    """Bucket points by calendar period and aggregate each bucket."""
    buckets: dict[datetime, list[float]] = defaultdict(list)
    for point in points:
        buckets[period_start(point.timestamp, period)].append(point.value)
    return tuple(
        PeriodAggregation(period=period, period_start=start, aggregation=aggregate(buckets[start]))
        for start in sorted(buckets)
    )


def filter_metrics(
    samples: Iterable[BusinessMetric],
    metrics_filter: BusinessMetricsFilter,
) -> tuple[BusinessMetric, ...]:
    """Select samples matching every populated filter criterion."""
    f = metrics_filter
    selected: list[BusinessMetric] = []
    for sample in samples:
        if f.organization_id is not None and sample.organization_id != f.organization_id:
            continue
        if f.workflow_ids and sample.workflow_id not in f.workflow_ids:
            continue
        if f.metric_types and sample.metric_type not in f.metric_types:
            continue
        if f.start is not None and sample.measured_at < f.start:
            continue
        if f.end is not None and sample.measured_at > f.end:
            continue
        if f.tags and not set(f.tags) & set(sample.tags):
            continue
        if f.impact_levels and sample.metadata.impact_level not in f.impact_levels:
            continue
        if f.validation_statuses and sample.metadata.validation_status not in f.validation_statuses:
            continue
        selected.append(sample)
    return tuple(selected)


def aggregate_samples(
    samples: Iterable[BusinessMetric],
    metric_type: Optional[BusinessMetricType] = None,
) -> MetricAggregation:
    return aggregate(
        s.metric_value for s in samples if metric_type is None or s.metric_type is metric_type
    )


def trend_from_samples(
    samples: Iterable[BusinessMetric],
    metric_type: BusinessMetricType,
    period: MeasurementPeriod,
) -> BusinessTrend:
    """Per-period averages of one metric type, oldest first.

    Direction and change rate are left for the dashboard to classify.
    """
    matching = [s for s in samples if s.metric_type is metric_type]
    targets: dict[datetime, list[float]] = defaultdict(list)
    for s in matching:
        if s.target_value is not None:
            targets[period_start(s.measured_at, period)].append(s.target_value)

    series = aggregate_time_series(
        (TimeSeriesData(timestamp=s.measured_at, value=s.metric_value) for s in matching),
        period,
    )
    points = tuple(
        TrendPoint(
            date=bucket.period_start,
            value=bucket.aggregation.average,
            target=aggregate(targets[bucket.period_start]).average
            if targets.get(bucket.period_start)
            else None,
        )
        for bucket in series
    )
    return BusinessTrend(metric_type=metric_type, period=period, data_points=points)
