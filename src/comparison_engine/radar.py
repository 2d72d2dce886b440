"""Radar chart data assembly.

Reshapes per-criterion scores for 2-5 technologies into one spoke per
criterion, with technology scores in comparison order (slots A..E).
"""

from typing import Optional

from .app_logging import get_logger
from .config import ScoringConfig, get_config
from .schema import RADAR_FULL_MARK, RADAR_SLOT_COUNT, Criterion, RadarChartData, TechnologyScore
from .scorer import validate_technology_count

logger = get_logger(__name__)


class RadarChartBuilder:
    """Builds RadarChartData entries from technology scores."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or get_config().scoring

    def build(
        self,
        technology_scores: list[TechnologyScore],
        criteria: list[Criterion],
    ) -> list[RadarChartData]:
        """Build one radar entry per criterion, in criteria order.

        Args:
            technology_scores: Scores in comparison order (2-5 entries)
            criteria: Criteria defining the spokes

        Returns:
            RadarChartData list; slot k holds technology_scores[k]'s score

        Raises:
            InvalidInputError: Number of scores outside the comparison bounds
        """
        validate_technology_count(
            len(technology_scores),
            self.config.min_technologies,
            min(self.config.max_technologies, RADAR_SLOT_COUNT),
        )

        radar_data = [self._build_spoke(c, technology_scores) for c in criteria]
        logger.debug(
            "Generated %d radar chart entries for %d technologies",
            len(radar_data), len(technology_scores),
        )
        return radar_data

    def _build_spoke(self, criterion: Criterion, technology_scores: list[TechnologyScore]) -> RadarChartData:
        slots = {}
        for index, ts in enumerate(technology_scores, start=1):
            score = ts.criterion_score(criterion.name)
            if score is None:
                logger.warning(
                    "No %s score for %s; using neutral score", criterion.name, ts.technology_name
                )
                score = self.config.neutral_score
            slots[f"slot_{index}"] = score

        return RadarChartData(subject=criterion.name, full_mark=RADAR_FULL_MARK, **slots)
