"""Tests for the data models."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from comparison_engine.schema import (
    ComparisonResult,
    Criterion,
    CriterionType,
    KpiMetric,
    KpiMetricType,
    Technology,
    TechnologyScore,
    UserConstraints,
)

from conftest import make_technology


class TestCriterionType:

    @pytest.mark.parametrize("text,expected", [
        ("PERFORMANCE", CriterionType.PERFORMANCE),
        ("learning_curve", CriterionType.LEARNING_CURVE),
        ("Learning Curve", CriterionType.LEARNING_CURVE),
        ("developer-experience", CriterionType.DEVELOPER_EXPERIENCE),
        ("Documentation Quality", CriterionType.DOCUMENTATION),
    ])
    def test_from_string(self, text, expected):
        assert CriterionType.from_string(text) == expected

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            CriterionType.from_string("vibes")

    def test_display_name(self):
        assert CriterionType.COMMUNITY.display_name == "Community Support"


class TestTechnology:

    def test_tags_lower_cased(self):
        tech = Technology(id=1, name="React", tags=["Frontend", " UI "])
        assert tech.tags == frozenset({"frontend", "ui"})
        assert tech.has_tag("FRONTEND")

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            Technology(id=1, name="  ")

    def test_is_immutable(self):
        tech = make_technology(1, "React")
        with pytest.raises(ValidationError):
            tech.name = "Vue"

    def test_tags_serialize_sorted(self):
        tech = make_technology(1, "React", tags=["b", "a"])
        assert tech.model_dump()["tags"] == ["a", "b"]


class TestCriterion:

    @pytest.mark.parametrize("weight", [-0.1, 10.5])
    def test_weight_range(self, weight):
        with pytest.raises(ValidationError):
            Criterion(id=1, name="Perf", type=CriterionType.PERFORMANCE, weight=weight)


class TestUserConstraints:

    def test_aliases_accepted(self):
        constraints = UserConstraints.model_validate({"priorityTags": ["Cloud"], "teamSize": "small"})
        assert constraints.priority_tags == frozenset({"cloud"})
        assert constraints.team_size == "small"

    def test_signature_is_order_independent(self):
        a = UserConstraints(priority_tags=["x", "y"], timeline="Q3")
        b = UserConstraints(priority_tags=["Y", "x"], timeline="Q3")
        assert a.signature() == b.signature()
        assert a.signature() != UserConstraints(priority_tags=["x"]).signature()

    def test_with_priority_tags(self):
        assert UserConstraints.with_priority_tags(["fast"]).has_priority_tag("Fast")


class TestTechnologyScore:

    def test_criterion_score_range(self):
        with pytest.raises(ValidationError):
            TechnologyScore(technology=make_technology(1, "A"), overall_score=50, criterion_scores={"X": 101})

    def test_overall_score_range(self):
        with pytest.raises(ValidationError):
            TechnologyScore(technology=make_technology(1, "A"), overall_score=-1)


class TestKpiMetric:

    def test_decimal_value_becomes_float(self):
        metric = KpiMetric(name="Rating", value=Decimal("3.9"), display_value="3.9/5", type=KpiMetricType.RATING)
        assert metric.value == 3.9
        assert metric.numeric_value == 3.9

    def test_categorical_has_no_numeric_value(self):
        metric = KpiMetric(name="Tier", value="Gold", display_value="Gold", type=KpiMetricType.CATEGORICAL)
        assert metric.numeric_value is None

    def test_formatted_display_avoids_duplicate_unit(self):
        metric = KpiMetric(name="Share", value=40.0, display_value="40.0%", unit="%", type=KpiMetricType.PERCENTAGE)
        assert metric.formatted_display == "40.0%"


class TestComparisonResult:

    def _result(self) -> ComparisonResult:
        return ComparisonResult(scores=[
            TechnologyScore(technology=make_technology(1, "Low"), overall_score=40),
            TechnologyScore(technology=make_technology(2, "High"), overall_score=90),
        ])

    def test_requires_scores(self):
        with pytest.raises(ValidationError):
            ComparisonResult(scores=[])

    def test_sorted_and_top_scores(self):
        result = self._result()
        assert [s.technology_name for s in result.sorted_scores()] == ["High", "Low"]
        assert result.top_score().technology_name == "High"
        assert result.technology_names == ["Low", "High"]

    def test_lookup_by_name(self):
        result = self._result()
        assert result.score_for_technology("high").overall_score == 90
        assert result.score_for_technology("missing") is None

    def test_generated_at_defaults_to_utc(self):
        generated = self._result().generated_at
        assert generated.tzinfo == timezone.utc
        assert generated <= datetime.now(timezone.utc)
