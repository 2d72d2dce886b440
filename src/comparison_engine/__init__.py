"""Technology Comparison Engine.

Scores 2-5 technologies against weighted criteria and produces radar chart
data, KPI metrics and an optional recommendation summary.
"""

__version__ = "1.0.0"

from .cache import CachedComparisonService, ComparisonCache
from .engine import ComparisonOrchestrator
from .errors import CatalogLoadError, ComparisonError, InvalidInputError, NotFoundError
from .kpi import KpiMetricCalculator
from .narrative import NarrativeProvider, TemplateNarrativeProvider
from .radar import RadarChartBuilder
from .repository import InMemoryTechnologyRepository, TechnologyRepository, load_default_repository
from .schema import (
    ComparisonResult,
    Criterion,
    CriterionType,
    KpiMetric,
    KpiMetricType,
    RadarChartData,
    Technology,
    TechnologyScore,
    UserConstraints,
)
from .scorer import WeightedScoringEngine

__all__ = [
    "__version__",
    "CachedComparisonService",
    "ComparisonCache",
    "ComparisonOrchestrator",
    "CatalogLoadError",
    "ComparisonError",
    "InvalidInputError",
    "NotFoundError",
    "KpiMetricCalculator",
    "NarrativeProvider",
    "TemplateNarrativeProvider",
    "RadarChartBuilder",
    "InMemoryTechnologyRepository",
    "TechnologyRepository",
    "load_default_repository",
    "ComparisonResult",
    "Criterion",
    "CriterionType",
    "KpiMetric",
    "KpiMetricType",
    "RadarChartData",
    "Technology",
    "TechnologyScore",
    "UserConstraints",
    "WeightedScoringEngine",
]
