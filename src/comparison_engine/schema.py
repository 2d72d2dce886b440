"""Pydantic models for the Technology Comparison Engine.

Input records (technologies, criteria, user constraints) and the output
structures consumed by chart and dashboard renderers. JSON field names use
camelCase aliases; Python code uses the snake_case attribute names.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator


# =============================================================================
# Enums
# =============================================================================


class CriterionType(str, Enum):
    """Evaluation dimension a criterion measures.

    The type decides which metric keys back the criterion (see metrics.py).
    """
    PERFORMANCE = "PERFORMANCE"
    LEARNING_CURVE = "LEARNING_CURVE"
    COMMUNITY = "COMMUNITY"
    DOCUMENTATION = "DOCUMENTATION"
    SCALABILITY = "SCALABILITY"
    SECURITY = "SECURITY"
    MATURITY = "MATURITY"
    DEVELOPER_EXPERIENCE = "DEVELOPER_EXPERIENCE"
    COST = "COST"
    CUSTOM = "CUSTOM"

    @property
    def display_name(self) -> str:
        return _CRITERION_DISPLAY_NAMES[self]

    @classmethod
    def from_string(cls, value: str) -> "CriterionType":
        """Parse a criterion type from its name or display name (case-insensitive)."""
        if value is None:
            raise ValueError("Criterion type is required")
        lookup = value.strip().lower()
        for member in cls:
            if lookup in (member.value.lower(), member.display_name.lower()):
                return member
        # Also accept "learning-curve" / "learning curve" spellings
        normalized = lookup.replace("-", "_").replace(" ", "_")
        for member in cls:
            if normalized == member.value.lower():
                return member
        raise ValueError(f"Unknown criterion type: {value}")

    @classmethod
    def _missing_(cls, value: object) -> Optional["CriterionType"]:
        if isinstance(value, str):
            try:
                return cls.from_string(value)
            except ValueError:
                return None
        return None


_CRITERION_DISPLAY_NAMES = {
    CriterionType.PERFORMANCE: "Performance",
    CriterionType.LEARNING_CURVE: "Learning Curve",
    CriterionType.COMMUNITY: "Community Support",
    CriterionType.DOCUMENTATION: "Documentation Quality",
    CriterionType.SCALABILITY: "Scalability",
    CriterionType.SECURITY: "Security",
    CriterionType.MATURITY: "Maturity",
    CriterionType.DEVELOPER_EXPERIENCE: "Developer Experience",
    CriterionType.COST: "Cost",
    CriterionType.CUSTOM: "Custom",
}


class KpiMetricType(str, Enum):
    """How a KPI value is formatted for display."""
    NUMERIC = "NUMERIC"  # Two decimal places
    PERCENTAGE = "PERCENTAGE"  # One decimal place plus "%"
    RATING = "RATING"  # 0-5 scale, "x.y/5"
    COUNT = "COUNT"  # Integer with thousands separators
    TREND = "TREND"  # Reserved, not produced by computed metrics
    CATEGORICAL = "CATEGORICAL"  # Passed through as-is


# =============================================================================
# Input Models
# =============================================================================


def _normalize_tags(value: Any) -> frozenset:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = [value]
    return frozenset(str(t).strip().lower() for t in value if str(t).strip())


class Technology(BaseModel):
    """A software technology as supplied by the storage collaborator.

    Read-only for the duration of a comparison.
    """
    id: int
    name: str
    category: str = "uncategorized"
    description: Optional[str] = None
    metrics: dict[str, float] = Field(default_factory=dict)
    tags: frozenset[str] = Field(default_factory=frozenset)

    class Config:
        frozen = True

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Technology name is required")
        return v.strip()

    @field_validator("tags", mode="before")
    @classmethod
    def _lower_tags(cls, v: Any) -> frozenset:
        return _normalize_tags(v)

    @field_serializer("tags")
    def _serialize_tags(self, tags: frozenset[str]) -> list[str]:
        return sorted(tags)

    @property
    def has_metrics(self) -> bool:
        return bool(self.metrics)

    def get_metric(self, key: str) -> Optional[float]:
        return self.metrics.get(key)

    def has_tag(self, tag: str) -> bool:
        return tag.strip().lower() in self.tags


class Criterion(BaseModel):
    """A weighted evaluation dimension."""
    id: int
    name: str
    description: Optional[str] = None
    weight: float = Field(1.0, ge=0.0, le=10.0, description="Base importance, 0-10")
    type: CriterionType
    active: bool = True

    class Config:
        frozen = True

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Criterion name is required")
        return v.strip()


class UserConstraints(BaseModel):
    """User preferences for one comparison.

    Only priority_tags influence scoring. The remaining hints are passed
    through to narrative providers.
    """
    priority_tags: frozenset[str] = Field(default_factory=frozenset, alias="priorityTags")
    project_type: Optional[str] = Field(None, alias="projectType")
    team_size: Optional[str] = Field(None, alias="teamSize")
    timeline: Optional[str] = None

    class Config:
        frozen = True
        populate_by_name = True

    @field_validator("priority_tags", mode="before")
    @classmethod
    def _lower_tags(cls, v: Any) -> frozenset:
        return _normalize_tags(v)

    @field_serializer("priority_tags")
    def _serialize_tags(self, tags: frozenset[str]) -> list[str]:
        return sorted(tags)

    @classmethod
    def empty(cls) -> "UserConstraints":
        return cls()

    @classmethod
    def with_priority_tags(cls, tags) -> "UserConstraints":
        return cls(priority_tags=tags)

    def has_priority_tag(self, tag: str) -> bool:
        return tag.strip().lower() in self.priority_tags

    def signature(self) -> str:
        """Stable string identifying these constraints (used in cache keys)."""
        return "|".join([
            "tags=" + ",".join(sorted(self.priority_tags)),
            f"project={self.project_type or ''}",
            f"team={self.team_size or ''}",
            f"timeline={self.timeline or ''}",
        ])


# =============================================================================
# Output Models
# =============================================================================


def _check_score_range(name: str, value: float) -> None:
    if value < 0.0 or value > 100.0:
        raise ValueError(f"{name} score must be between 0.0 and 100.0, got: {value}")


class TechnologyScore(BaseModel):
    """Calculated score for one technology across all criteria."""
    technology: Technology
    overall_score: float = Field(..., ge=0.0, le=100.0, alias="overallScore")
    criterion_scores: dict[str, float] = Field(default_factory=dict, alias="criterionScores")
    effective_weights: dict[str, float] = Field(
        default_factory=dict,
        alias="effectiveWeights",
        description="Criterion name -> weight actually applied, after priority boosts"
    )

    class Config:
        frozen = True
        populate_by_name = True

    @field_validator("criterion_scores")
    @classmethod
    def _scores_in_range(cls, v: dict[str, float]) -> dict[str, float]:
        for name, score in v.items():
            _check_score_range(name, score)
        return v

    @property
    def technology_name(self) -> str:
        return self.technology.name

    @property
    def technology_id(self) -> int:
        return self.technology.id

    def criterion_score(self, criterion_name: str) -> Optional[float]:
        return self.criterion_scores.get(criterion_name)


RADAR_SLOT_COUNT = 5
RADAR_FULL_MARK = 100.0


class RadarChartData(BaseModel):
    """One radar chart spoke: a criterion and each technology's score on it.

    Slots serialize as A..E in comparison order; fullMark is always 100.
    """
    subject: str
    slot_1: float = Field(..., ge=0.0, le=100.0, alias="A")
    slot_2: Optional[float] = Field(None, ge=0.0, le=100.0, alias="B")
    slot_3: Optional[float] = Field(None, ge=0.0, le=100.0, alias="C")
    slot_4: Optional[float] = Field(None, ge=0.0, le=100.0, alias="D")
    slot_5: Optional[float] = Field(None, ge=0.0, le=100.0, alias="E")
    full_mark: float = Field(RADAR_FULL_MARK, alias="fullMark")

    class Config:
        frozen = True
        populate_by_name = True

    @model_validator(mode="after")
    def _slots_contiguous(self) -> "RadarChartData":
        if self.full_mark != RADAR_FULL_MARK:
            raise ValueError(f"fullMark must be {RADAR_FULL_MARK}, got: {self.full_mark}")
        seen_gap = False
        for index, value in enumerate(self._raw_slots(), start=1):
            if value is None:
                seen_gap = True
            elif seen_gap:
                raise ValueError(f"Radar slot {index} is set but an earlier slot is empty")
        return self

    def _raw_slots(self) -> list[Optional[float]]:
        return [self.slot_1, self.slot_2, self.slot_3, self.slot_4, self.slot_5]

    @property
    def slots(self) -> list[float]:
        """Present slot values in comparison order."""
        return [v for v in self._raw_slots() if v is not None]

    @property
    def technology_count(self) -> int:
        return len(self.slots)

    def score_for(self, index: int) -> Optional[float]:
        """Score for the technology at 0-based comparison position."""
        if index < 0 or index >= RADAR_SLOT_COUNT:
            raise IndexError(f"Invalid technology index: {index}")
        return self._raw_slots()[index]


class KpiMetric(BaseModel):
    """A display-ready summary statistic for one technology."""
    name: str
    value: Union[int, float, str]
    display_value: str = Field(..., alias="displayValue")
    unit: Optional[str] = None
    description: Optional[str] = None
    type: KpiMetricType = KpiMetricType.NUMERIC

    class Config:
        frozen = True
        populate_by_name = True

    @field_validator("value", mode="before")
    @classmethod
    def _decimal_to_float(cls, v: Any) -> Any:
        if isinstance(v, Decimal):
            return float(v)
        return v

    @property
    def numeric_value(self) -> Optional[float]:
        if isinstance(self.value, (int, float)):
            return float(self.value)
        return None

    @property
    def formatted_display(self) -> str:
        """Display value with its unit appended, when the unit is not already part of it."""
        if self.unit and self.unit.strip() and not self.display_value.endswith(self.unit):
            return f"{self.display_value} {self.unit}"
        return self.display_value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ComparisonResult(BaseModel):
    """Complete output of one technology comparison."""
    scores: list[TechnologyScore]
    radar_data: list[RadarChartData] = Field(default_factory=list, alias="radarData")
    kpi_metrics: dict[str, list[KpiMetric]] = Field(default_factory=dict, alias="kpiMetrics")
    recommendation_summary: Optional[str] = Field(None, alias="recommendationSummary")
    generated_at: datetime = Field(default_factory=_utcnow, alias="generatedAt")
    constraints: UserConstraints = Field(default_factory=UserConstraints)

    class Config:
        frozen = True
        populate_by_name = True

    @field_validator("scores")
    @classmethod
    def _at_least_one_score(cls, v: list[TechnologyScore]) -> list[TechnologyScore]:
        if not v:
            raise ValueError("At least one technology score is required")
        return v

    @property
    def technology_names(self) -> list[str]:
        return [s.technology_name for s in self.scores]

    @property
    def technology_count(self) -> int:
        return len(self.scores)

    @property
    def has_recommendation(self) -> bool:
        return bool(self.recommendation_summary and self.recommendation_summary.strip())

    def sorted_scores(self) -> list[TechnologyScore]:
        """Scores ordered highest first (stable for ties)."""
        return sorted(self.scores, key=lambda s: s.overall_score, reverse=True)

    def top_score(self) -> TechnologyScore:
        return self.sorted_scores()[0]

    def score_for_technology(self, technology_name: str) -> Optional[TechnologyScore]:
        lookup = technology_name.lower()
        return next((s for s in self.scores if s.technology_name.lower() == lookup), None)

    def kpi_metrics_for(self, technology_name: str) -> list[KpiMetric]:
        return self.kpi_metrics.get(technology_name, [])
