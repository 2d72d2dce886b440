"""Score Normalizer.

Converts raw metric values into comparable 0-100 scores. Count-like metrics
are scaled relative to the other technologies in the same comparison, so a
batch must be built from the full technology set before any technology is
scored.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from .config import NormalizationConfig, get_config
from .metrics import MetricResolver, ResolvedMetric
from .schema import Criterion, Technology

MIN_SCORE = 0.0
MAX_SCORE = 100.0


def clamp_score(value: float) -> float:
    """Clamp a score into [0, 100]. NaN maps to 0."""
    if math.isnan(value):
        return MIN_SCORE
    return max(MIN_SCORE, min(MAX_SCORE, value))


@dataclass(frozen=True)
class MetricRange:
    """Observed range of one unbounded metric across a batch."""
    minimum: float
    maximum: float


@dataclass(frozen=True)
class NormalizationBatch:
    """Per-metric ranges for one comparison set."""
    ranges: dict[str, MetricRange] = field(default_factory=dict)
    size: int = 0

    def range_for(self, key: str) -> Optional[MetricRange]:
        return self.ranges.get(key)


class ScoreNormalizer:
    """Maps raw metric values onto a 0-100 scale.

    Policy:
    - Absent metric: neutral score
    - Bounded (0-100) metric: passed through, clamped
    - Unbounded metric: 100 * value / batch maximum (all-zero batch: neutral)
    - Inverted metric: lower raw value scores higher
    """

    def __init__(
        self,
        config: Optional[NormalizationConfig] = None,
        neutral_score: Optional[float] = None,
        resolver: Optional[MetricResolver] = None,
    ):
        cfg = get_config()
        self.config = config or cfg.normalization
        self.neutral_score = neutral_score if neutral_score is not None else cfg.scoring.neutral_score
        self.resolver = resolver or MetricResolver()
        self._bounded = frozenset(self.config.bounded_metrics)
        self._unbounded = frozenset(self.config.unbounded_metrics)

    def is_bounded(self, key: str) -> bool:
        """Whether a metric key is already on a 0-100 scale."""
        if key in self._unbounded:
            return False
        if key in self._bounded:
            return True
        suffix = self.config.bounded_suffix
        return bool(suffix) and key.endswith(suffix)

    def build_batch(
        self,
        technologies: list[Technology],
        criteria: list[Criterion],
    ) -> NormalizationBatch:
        """Collect the range of every unbounded metric the criteria resolve to."""
        values: dict[str, list[float]] = {}
        for criterion in criteria:
            for tech in technologies:
                resolved = self.resolver.resolve(tech, criterion)
                if resolved is None or self.is_bounded(resolved.key):
                    continue
                values.setdefault(resolved.key, []).append(max(0.0, resolved.value))

        ranges = {
            key: MetricRange(minimum=min(observed), maximum=max(observed))
            for key, observed in values.items()
        }
        return NormalizationBatch(ranges=ranges, size=len(technologies))

    def normalize(
        self,
        resolved: Optional[ResolvedMetric],
        batch: Optional[NormalizationBatch] = None,
    ) -> float:
        """Normalize one resolved metric against its batch."""
        if resolved is None:
            return self.neutral_score

        if self.is_bounded(resolved.key):
            score = clamp_score(resolved.value)
            return MAX_SCORE - score if resolved.inverted else score

        return self._normalize_unbounded(resolved, batch)

    def _normalize_unbounded(
        self,
        resolved: ResolvedMetric,
        batch: Optional[NormalizationBatch],
    ) -> float:
        value = max(0.0, resolved.value)
        metric_range = batch.range_for(resolved.key) if batch else None
        if metric_range is None:
            # Batch of one: the technology is its own maximum
            metric_range = MetricRange(minimum=value, maximum=value)

        if resolved.inverted:
            # Distance below the batch maximum; the lowest raw value gets 100
            value = metric_range.maximum - value
            maximum = metric_range.maximum - metric_range.minimum
        else:
            maximum = metric_range.maximum

        if maximum <= 0:
            return self.neutral_score
        return clamp_score(MAX_SCORE * (value / maximum))
