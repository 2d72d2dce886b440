"""Comparison Orchestrator.

Entry point that ties the pipeline together:
1. Validate the request (size, duplicates)
2. Resolve technologies through the repository, in caller order
3. Score against the active criteria
4. Build radar chart data and KPI metrics
5. Ask the narrative provider for a summary (optional, non-fatal)
"""

from datetime import datetime, timezone
from typing import Callable, Hashable, Iterable, Optional, TypeVar

from .app_logging import get_logger
from .config import EngineConfig, get_config
from .errors import InvalidInputError, NotFoundError
from .kpi import KpiMetricCalculator
from .narrative import NarrativeProvider
from .radar import RadarChartBuilder
from .repository import TechnologyRepository
from .schema import ComparisonResult, Technology, TechnologyScore, UserConstraints
from .scorer import WeightedScoringEngine, validate_technology_count

logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)


class ComparisonOrchestrator:
    """Runs complete technology comparisons.

    Holds no per-request state; a single instance may serve concurrent
    callers as long as the repository does.
    """

    def __init__(
        self,
        repository: TechnologyRepository,
        scorer: Optional[WeightedScoringEngine] = None,
        radar_builder: Optional[RadarChartBuilder] = None,
        kpi_calculator: Optional[KpiMetricCalculator] = None,
        narrative_provider: Optional[NarrativeProvider] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.repository = repository
        self.config = config or get_config()
        self.scorer = scorer or WeightedScoringEngine(self.config.scoring)
        self.radar_builder = radar_builder or RadarChartBuilder(self.config.scoring)
        self.kpi_calculator = kpi_calculator or KpiMetricCalculator()
        self.narrative_provider = narrative_provider

    def generate_comparison(
        self,
        technology_ids: list[int],
        constraints: Optional[UserConstraints] = None,
    ) -> ComparisonResult:
        """Compare technologies by id.

        Raises:
            InvalidInputError: Wrong number of ids, or an id repeated
            NotFoundError: Some ids do not exist
        """
        self._validate_request(technology_ids, lambda i: i, "id")

        found = self.repository.find_technologies_by_ids(technology_ids)
        technologies = self._in_caller_order(technology_ids, found, lambda t: t.id, lambda i: i, "ids")
        return self._compare(technologies, constraints)

    def generate_comparison_by_names(
        self,
        technology_names: list[str],
        constraints: Optional[UserConstraints] = None,
    ) -> ComparisonResult:
        """Compare technologies by name (case-insensitive).

        Raises:
            InvalidInputError: Wrong number of names, or a name repeated
            NotFoundError: Some names do not exist
        """
        self._validate_request(technology_names, _name_key, "name")

        found = self.repository.find_technologies_by_names(technology_names)
        technologies = self._in_caller_order(
            technology_names, found, lambda t: _name_key(t.name), _name_key, "names"
        )
        return self._compare(technologies, constraints)

    def score_technology(
        self,
        technology_id: int,
        constraints: Optional[UserConstraints] = None,
    ) -> TechnologyScore:
        """Score one technology on its own against the active criteria.

        Raises:
            NotFoundError: The id does not exist
        """
        technology = self.repository.find_technology_by_id(technology_id)
        if technology is None:
            raise NotFoundError(f"Technology not found: {technology_id}", missing=[technology_id])

        criteria = self.repository.get_active_criteria()
        return self.scorer.score_one(technology, criteria, constraints or UserConstraints.empty())

    def _compare(
        self,
        technologies: list[Technology],
        constraints: Optional[UserConstraints],
    ) -> ComparisonResult:
        constraints = constraints or UserConstraints.empty()
        criteria = self.repository.get_active_criteria()

        logger.info(
            "Generating comparison for %s against %d criteria",
            ", ".join(t.name for t in technologies), len(criteria),
        )

        scores = self.scorer.score(technologies, criteria, constraints)
        radar_data = self.radar_builder.build(scores, criteria)
        kpi_metrics = self.kpi_calculator.calculate_all(scores)
        summary = self._summarize(scores, constraints)

        return ComparisonResult(
            scores=scores,
            radar_data=radar_data,
            kpi_metrics=kpi_metrics,
            recommendation_summary=summary,
            generated_at=datetime.now(timezone.utc),
            constraints=constraints,
        )

    def _summarize(self, scores: list[TechnologyScore], constraints: UserConstraints) -> Optional[str]:
        if self.narrative_provider is None:
            return None
        try:
            return self.narrative_provider.summarize(scores, constraints)
        except Exception as e:
            logger.warning("Recommendation summary failed, continuing without one: %s", e)
            return None

    def _validate_request(self, identities: list, key: Callable[[object], Hashable], label: str) -> None:
        scoring = self.config.scoring
        validate_technology_count(len(identities), scoring.min_technologies, scoring.max_technologies)

        seen = set()
        for identity in identities:
            k = key(identity)
            if k in seen:
                raise InvalidInputError(f"Duplicate technology {label} in comparison request: {identity}")
            seen.add(k)

    @staticmethod
    def _in_caller_order(
        requested: Iterable[K],
        found: list[Technology],
        tech_key: Callable[[Technology], Hashable],
        request_key: Callable[[K], Hashable],
        label: str,
    ) -> list[Technology]:
        by_key = {tech_key(t): t for t in found}
        missing = [r for r in requested if request_key(r) not in by_key]
        if missing:
            raise NotFoundError(
                f"Technologies not found for {label}: {', '.join(str(m) for m in missing)}",
                missing=missing,
            )
        return [by_key[request_key(r)] for r in requested]


def _name_key(name: str) -> str:
    return name.strip().lower()
