"""Metric resolution: which raw metric on a technology backs a criterion.

Resolution is a fixed lookup table keyed by criterion type. CUSTOM criteria
use their own (normalized) name as the metric key.
"""

from dataclasses import dataclass
from typing import Optional

from .schema import Criterion, CriterionType, Technology


@dataclass(frozen=True)
class MetricSource:
    """Metric keys backing one criterion type."""
    keys: tuple[str, ...]  # Candidate keys, first present wins
    inverted: bool = False  # Lower raw value is better


@dataclass(frozen=True)
class ResolvedMetric:
    """A raw metric value found on a technology."""
    key: str
    value: float
    inverted: bool = False


METRIC_SOURCES: dict[CriterionType, MetricSource] = {
    CriterionType.PERFORMANCE: MetricSource(("performance_score",)),
    CriterionType.LEARNING_CURVE: MetricSource(("learning_curve_score",), inverted=True),
    CriterionType.COMMUNITY: MetricSource(("community_score", "github_stars")),
    CriterionType.DOCUMENTATION: MetricSource(("documentation_score",)),
    CriterionType.SCALABILITY: MetricSource(("scalability_score",)),
    CriterionType.SECURITY: MetricSource(("security_score",)),
    CriterionType.MATURITY: MetricSource(("maturity_score",)),
    CriterionType.DEVELOPER_EXPERIENCE: MetricSource(("developer_experience_score", "satisfaction_score")),
    CriterionType.COST: MetricSource(("cost_score",)),
}


def custom_metric_key(criterion_name: str) -> str:
    """Metric key for a CUSTOM criterion: lower-cased, spaces to underscores."""
    return "_".join(criterion_name.strip().lower().split())


class MetricResolver:
    """Maps criteria to raw metric values on technology records."""

    def source_for(self, criterion: Criterion) -> MetricSource:
        if criterion.type == CriterionType.CUSTOM:
            return MetricSource((custom_metric_key(criterion.name),))
        return METRIC_SOURCES[criterion.type]

    def metric_keys_for(self, criterion: Criterion) -> tuple[str, ...]:
        return self.source_for(criterion).keys

    def resolve(self, technology: Technology, criterion: Criterion) -> Optional[ResolvedMetric]:
        """Return the raw metric backing a criterion, or None when the technology has none."""
        source = self.source_for(criterion)
        for key in source.keys:
            value = technology.get_metric(key)
            if value is not None:
                return ResolvedMetric(key=key, value=float(value), inverted=source.inverted)
        return None
