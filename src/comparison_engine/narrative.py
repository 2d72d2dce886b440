"""Recommendation summary providers.

A narrative provider turns finished scores into a short human readable
summary. Providers may be backed by anything (a template, a remote text
generation service); the orchestrator treats any provider failure as
"no summary".
"""

from typing import Optional, Protocol, runtime_checkable

from .config import get_config
from .schema import TechnologyScore, UserConstraints


@runtime_checkable
class NarrativeProvider(Protocol):
    """Produces a recommendation summary for a scored comparison."""

    def summarize(self, scores: list[TechnologyScore], constraints: UserConstraints) -> Optional[str]:
        ...


class TemplateNarrativeProvider:
    """Template based summary naming the top scorer."""

    def __init__(self, priority_boost: Optional[float] = None):
        self.priority_boost = priority_boost if priority_boost is not None else get_config().scoring.priority_boost

    def summarize(self, scores: list[TechnologyScore], constraints: UserConstraints) -> Optional[str]:
        if not scores:
            return None

        top = max(scores, key=lambda s: s.overall_score)
        summary = f"Based on your criteria, {top.technology_name} scores highest with {top.overall_score:.1f} points."

        matched = [s for s in scores if s.technology.tags & constraints.priority_tags]
        if matched:
            names = ", ".join(s.technology_name for s in matched)
            tags = ", ".join(sorted(set().union(*(s.technology.tags & constraints.priority_tags for s in matched))))
            summary += (
                f" {names} matched your priority areas ({tags}), so criteria where they score"
                f" at or above their own average were weighted {self.priority_boost:g}x."
            )

        return summary
