"""Weighted Scoring Engine.

Combines normalized metric scores and effective criterion weights into an
overall 0-100 score per technology, plus a per-criterion score map.
"""

from dataclasses import dataclass
from typing import Optional

from .app_logging import get_logger
from .config import ScoringConfig, get_config
from .errors import InvalidInputError
from .metrics import MetricResolver
from .normalizer import NormalizationBatch, ScoreNormalizer, clamp_score
from .schema import Criterion, Technology, TechnologyScore, UserConstraints
from .weights import WeightResolver

logger = get_logger(__name__)


@dataclass
class _CriterionEvaluation:
    criterion: Criterion
    metric_key: Optional[str]
    raw_value: Optional[float]
    normalized: float
    base_weight: float


def validate_technology_count(count: int, minimum: int, maximum: int) -> None:
    """Fail fast when a comparison set is outside [minimum, maximum]."""
    if count < minimum:
        raise InvalidInputError(
            f"At least {minimum} technologies are required for a comparison, got {count}"
        )
    if count > maximum:
        raise InvalidInputError(
            f"Cannot compare more than {maximum} technologies at once, got {count}"
        )


class WeightedScoringEngine:
    """Scores technologies against weighted criteria.

    Scoring principles:
    - Batch-relative normalization is computed once over the whole set
    - Missing metrics score neutral rather than zero
    - Zero total weight yields the neutral score, not an error
    - Priority-tag boosts emphasise a matching technology's strengths
    - Output order matches input order
    """

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        resolver: Optional[MetricResolver] = None,
        normalizer: Optional[ScoreNormalizer] = None,
        weight_resolver: Optional[WeightResolver] = None,
    ):
        self.config = config or get_config().scoring
        self.resolver = resolver or MetricResolver()
        self.normalizer = normalizer or ScoreNormalizer(
            neutral_score=self.config.neutral_score,
            resolver=self.resolver,
        )
        self.weight_resolver = weight_resolver or WeightResolver(self.config.priority_boost)

    def score(
        self,
        technologies: list[Technology],
        criteria: list[Criterion],
        constraints: Optional[UserConstraints] = None,
    ) -> list[TechnologyScore]:
        """Score a comparison set.

        Args:
            technologies: Technologies in comparison order (2-5 entries)
            criteria: Criteria to evaluate
            constraints: User constraints; only priority tags affect scores

        Returns:
            One TechnologyScore per technology, in input order

        Raises:
            InvalidInputError: Set size outside bounds, or no criteria while
                some technology has no metrics at all
        """
        validate_technology_count(
            len(technologies), self.config.min_technologies, self.config.max_technologies
        )
        self._validate_scorable(technologies, criteria)
        constraints = constraints or UserConstraints.empty()

        logger.debug(
            "Scoring %d technologies against %d criteria (priority tags: %s)",
            len(technologies), len(criteria), sorted(constraints.priority_tags),
        )

        batch = self.normalizer.build_batch(technologies, criteria)
        return [self._score_technology(tech, criteria, constraints, batch) for tech in technologies]

    def score_one(
        self,
        technology: Technology,
        criteria: list[Criterion],
        constraints: Optional[UserConstraints] = None,
    ) -> TechnologyScore:
        """Score a single technology on its own.

        The technology forms a batch of one, so any unbounded metric with a
        positive value normalizes to 100. Scores from this entry point are
        not comparable with multi-technology scores.
        """
        self._validate_scorable([technology], criteria)
        constraints = constraints or UserConstraints.empty()
        batch = self.normalizer.build_batch([technology], criteria)
        return self._score_technology(technology, criteria, constraints, batch)

    def _validate_scorable(self, technologies: list[Technology], criteria: list[Criterion]) -> None:
        if criteria:
            return
        unusable = [t.name for t in technologies if not t.has_metrics]
        if unusable:
            raise InvalidInputError(
                f"No criteria supplied and technologies have no metrics: {', '.join(unusable)}"
            )

    def _score_technology(
        self,
        technology: Technology,
        criteria: list[Criterion],
        constraints: UserConstraints,
        batch: NormalizationBatch,
    ) -> TechnologyScore:
        evaluations = [self._evaluate(technology, c, batch) for c in criteria]

        baseline = self._weighted_mean([(e.normalized, e.base_weight) for e in evaluations])

        criterion_scores: dict[str, float] = {}
        effective_weights: dict[str, float] = {}
        weighted_pairs = []
        for e in evaluations:
            # Boosting every criterion uniformly would cancel out in the mean
            is_strength = baseline is not None and e.normalized >= baseline
            weight = self.weight_resolver.resolve(e.criterion, technology, constraints, strength=is_strength)
            criterion_scores[e.criterion.name] = e.normalized
            effective_weights[e.criterion.name] = weight
            weighted_pairs.append((e.normalized, weight))

            logger.debug(
                "%s / %s: key=%s raw=%s normalized=%.2f weight=%.2f",
                technology.name, e.criterion.name, e.metric_key, e.raw_value, e.normalized, weight,
            )

        overall = self._weighted_mean(weighted_pairs)
        if overall is None:
            overall = self.config.neutral_score
        overall = clamp_score(overall)

        logger.debug("%s overall score: %.2f", technology.name, overall)

        return TechnologyScore(
            technology=technology,
            overall_score=overall,
            criterion_scores=criterion_scores,
            effective_weights=effective_weights,
        )

    def _evaluate(
        self,
        technology: Technology,
        criterion: Criterion,
        batch: NormalizationBatch,
    ) -> _CriterionEvaluation:
        resolved = self.resolver.resolve(technology, criterion)
        return _CriterionEvaluation(
            criterion=criterion,
            metric_key=resolved.key if resolved else None,
            raw_value=resolved.value if resolved else None,
            normalized=self.normalizer.normalize(resolved, batch),
            base_weight=max(0.0, criterion.weight),
        )

    @staticmethod
    def _weighted_mean(pairs: list[tuple[float, float]]) -> Optional[float]:
        """Weighted mean of (score, weight) pairs, None when total weight is zero."""
        total_weight = sum(w for _, w in pairs)
        if total_weight <= 0:
            return None
        return sum(s * w for s, w in pairs) / total_weight
