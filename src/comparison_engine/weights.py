"""Weight resolution with user priority-tag boosts."""

from typing import Optional

from .config import get_config
from .schema import Criterion, Technology, UserConstraints


class WeightResolver:
    """Computes the effective weight of a criterion for one technology.

    A technology sharing at least one tag with the user's priority tags
    has its weight multiplied by the priority boost (1.5 by default) on
    the criteria it is asked to emphasise.
    """

    def __init__(self, priority_boost: Optional[float] = None):
        if priority_boost is None:
            priority_boost = get_config().scoring.priority_boost
        self.priority_boost = priority_boost

    def matching_tags(self, technology: Technology, constraints: Optional[UserConstraints]) -> frozenset[str]:
        """Priority tags present on the technology (both sides are lower-cased)."""
        if constraints is None or not constraints.priority_tags:
            return frozenset()
        return technology.tags & constraints.priority_tags

    def matches_priority(self, technology: Technology, constraints: Optional[UserConstraints]) -> bool:
        return bool(self.matching_tags(technology, constraints))

    def boost(self, base_weight: float, boosted: bool) -> float:
        weight = max(0.0, base_weight)
        return weight * self.priority_boost if boosted else weight

    def resolve(
        self,
        criterion: Criterion,
        technology: Technology,
        constraints: Optional[UserConstraints],
        strength: bool = True,
    ) -> float:
        """Effective weight of the criterion for this technology.

        Args:
            criterion: Criterion being weighted
            technology: Technology being scored
            constraints: User constraints carrying the priority tags
            strength: Whether the criterion is one of the technology's strengths.
                The scoring engine only boosts strengths (scores at or above the
                technology's unboosted weighted mean); the default applies the
                boost to any criterion of a matching technology.
        """
        return self.boost(criterion.weight, strength and self.matches_priority(technology, constraints))
