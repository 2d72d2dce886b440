"""KPI metric derivation.

Turns a technology's score and raw metrics into display-ready summary
metrics. Formatting is driven entirely by the metric type.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional, Union

from .app_logging import get_logger
from .schema import KpiMetric, KpiMetricType, Technology, TechnologyScore

logger = get_logger(__name__)

RATING_SCALE = 5
RATING_DIVISOR = 100 / RATING_SCALE


@dataclass(frozen=True)
class MetricDisplay:
    """How a raw technology metric is surfaced as a KPI."""
    name: str
    type: KpiMetricType
    unit: Optional[str] = None
    description: Optional[str] = None
    formatter: Optional[Callable[[float], str]] = None  # Overrides the type's default display


def format_whole_number(value: float) -> str:
    """Whole number with thousands separators (220000 -> "220,000")."""
    return f"{int(round_half_up(value, 0)):,}"


def format_large_number(value: float) -> str:
    """Compact K/M/B form for large counts (20500000 -> "20.5M")."""
    for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if value >= threshold:
            return f"{round_half_up(value / threshold, 1):g}{suffix}"
    return format_whole_number(value)


# Known metric keys, in display order
METRIC_DISPLAY: dict[str, MetricDisplay] = {
    "performance_score": MetricDisplay("Performance", KpiMetricType.PERCENTAGE, None, "Speed, throughput and efficiency"),
    "scalability_score": MetricDisplay("Scalability", KpiMetricType.PERCENTAGE, None, "Ability to handle growth and scale"),
    "security_score": MetricDisplay("Security", KpiMetricType.PERCENTAGE, None, "Security features and track record"),
    "maturity_score": MetricDisplay("Maturity", KpiMetricType.PERCENTAGE, None, "Stability and production readiness"),
    "learning_curve_score": MetricDisplay("Learning Curve", KpiMetricType.PERCENTAGE, None, "Difficulty of adoption (lower is easier)"),
    "documentation_score": MetricDisplay("Documentation", KpiMetricType.PERCENTAGE, None, "Completeness and clarity of documentation"),
    "developer_experience_score": MetricDisplay("Developer Experience", KpiMetricType.PERCENTAGE, None, "Development velocity and tooling"),
    "community_score": MetricDisplay("Community", KpiMetricType.PERCENTAGE, None, "Community activity and ecosystem"),
    "satisfaction_score": MetricDisplay("Satisfaction", KpiMetricType.PERCENTAGE, None, "Developer satisfaction rating"),
    "cost_score": MetricDisplay("Cost Efficiency", KpiMetricType.PERCENTAGE, None, "Licensing, hosting and operational cost"),
    "github_stars": MetricDisplay("GitHub Stars", KpiMetricType.NUMERIC, "stars", "Community popularity on GitHub", format_whole_number),
    "npm_downloads": MetricDisplay("NPM Downloads", KpiMetricType.NUMERIC, "downloads/month", "Monthly NPM package downloads", format_large_number),
    "job_openings": MetricDisplay("Job Openings", KpiMetricType.NUMERIC, "jobs", "Current job market demand", format_whole_number),
}

SCORE_SUFFIX = "_score"


def round_half_up(value: float, places: int = 1) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_display_value(value: Union[int, float, str], metric_type: KpiMetricType) -> str:
    """Format a KPI value according to its type."""
    if metric_type in (KpiMetricType.CATEGORICAL, KpiMetricType.TREND) or isinstance(value, str):
        return str(value)
    if metric_type == KpiMetricType.PERCENTAGE:
        return f"{round_half_up(value, 1):.1f}%"
    if metric_type == KpiMetricType.COUNT:
        return f"{int(round_half_up(value, 0)):,}"
    if metric_type == KpiMetricType.RATING:
        return f"{round_half_up(value, 1):.1f}/{RATING_SCALE}"
    return f"{round_half_up(value, 2):.2f}"


def describe_metric(key: str) -> MetricDisplay:
    """Display settings for a metric key, derived from the key when unknown."""
    known = METRIC_DISPLAY.get(key)
    if known is not None:
        return known
    metric_type = KpiMetricType.PERCENTAGE if key.endswith(SCORE_SUFFIX) else KpiMetricType.NUMERIC
    return MetricDisplay(key.replace("_", " ").title(), metric_type)


class KpiMetricCalculator:
    """Derives KPI metrics for compared technologies.

    Each technology gets, in order:
    - its overall score as a 0-5 rating
    - one metric per raw technology metric
    - its tag count
    """

    def calculate(self, score: TechnologyScore, technology: Optional[Technology] = None) -> list[KpiMetric]:
        """KPI metrics for one technology (defaults to the scored technology)."""
        if technology is None:
            technology = score.technology
        metrics = [self._overall_rating(score)]
        metrics.extend(self._raw_metric(key, technology.metrics[key]) for key in self._ordered_keys(technology))
        metrics.append(self._make(
            "Tags", len(technology.tags), KpiMetricType.COUNT, "tags", "Number of descriptive tags",
        ))
        return metrics

    def calculate_all(self, scores: list[TechnologyScore]) -> dict[str, list[KpiMetric]]:
        """KPI metrics keyed by technology name."""
        kpis = {s.technology_name: self.calculate(s) for s in scores}
        logger.debug("Generated KPI metrics for %d technologies", len(kpis))
        return kpis

    def _overall_rating(self, score: TechnologyScore) -> KpiMetric:
        rating = round_half_up(score.overall_score / RATING_DIVISOR, 1)
        return self._make(
            "Overall Rating", rating, KpiMetricType.RATING, None, "Weighted overall comparison score on a 0-5 scale",
        )

    def _raw_metric(self, key: str, value: float) -> KpiMetric:
        display = describe_metric(key)
        return self._make(display.name, value, display.type, display.unit, display.description, display.formatter)

    @staticmethod
    def _ordered_keys(technology: Technology) -> list[str]:
        known = [k for k in METRIC_DISPLAY if k in technology.metrics]
        unknown = sorted(k for k in technology.metrics if k not in METRIC_DISPLAY)
        return known + unknown

    @staticmethod
    def _make(name, value, metric_type, unit, description, formatter=None) -> KpiMetric:
        display_value = formatter(value) if formatter else format_display_value(value, metric_type)
        return KpiMetric(
            name=name,
            value=value,
            display_value=display_value,
            unit=unit,
            description=description,
            type=metric_type,
        )
