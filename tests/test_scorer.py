"""Tests for the weighted scoring engine."""

import pytest

from comparison_engine.config import ScoringConfig
from comparison_engine.errors import InvalidInputError
from comparison_engine.schema import CriterionType, UserConstraints
from comparison_engine.scorer import WeightedScoringEngine, validate_technology_count

from conftest import make_criterion, make_technology


@pytest.fixture
def engine():
    return WeightedScoringEngine()


BACKEND = UserConstraints(priority_tags=["backend"])


class TestEndToEndExample:
    """Two technologies, one tagged, with a priority tag on the request."""

    def test_tagged_technology_score(self, engine, example_technologies, example_criteria):
        scores = engine.score(example_technologies, example_criteria, BACKEND)

        a = scores[0]
        assert a.technology_name == "A"
        assert a.effective_weights == {"PERFORMANCE": 3.0, "COMMUNITY": 1.0}
        assert a.overall_score == pytest.approx(77.5)
        assert a.criterion_scores == {"PERFORMANCE": 90.0, "COMMUNITY": 40.0}

    def test_untagged_technology_score(self, engine, example_technologies, example_criteria):
        scores = engine.score(example_technologies, example_criteria, BACKEND)

        b = scores[1]
        assert b.technology_name == "B"
        assert b.effective_weights == {"PERFORMANCE": 2.0, "COMMUNITY": 1.0}
        assert b.overall_score == pytest.approx(66.6667, abs=1e-3)

    def test_without_priority_tags_uses_base_weights(self, engine, example_technologies, example_criteria):
        scores = engine.score(example_technologies, example_criteria)

        assert scores[0].effective_weights == {"PERFORMANCE": 2.0, "COMMUNITY": 1.0}
        assert scores[0].overall_score == pytest.approx(220 / 3)


class TestScoringProperties:

    def test_output_preserves_input_order(self, engine, example_technologies, example_criteria):
        reversed_techs = list(reversed(example_technologies))
        scores = engine.score(reversed_techs, example_criteria, BACKEND)
        assert [s.technology_name for s in scores] == ["B", "A"]

    def test_repeated_scoring_is_identical(self, engine, example_technologies, example_criteria):
        first = engine.score(example_technologies, example_criteria, BACKEND)
        second = engine.score(example_technologies, example_criteria, BACKEND)
        assert first == second

    def test_tagged_never_scores_below_identical_untagged(self, engine):
        metrics = dict(performance_score=30, community_score=95, github_stars=1000)
        techs = [
            make_technology(1, "Tagged", tags=["fast"], **metrics),
            make_technology(2, "Plain", **metrics),
        ]
        criteria = [
            make_criterion(1, "Performance", CriterionType.PERFORMANCE, weight=3.0),
            make_criterion(2, "Community", CriterionType.COMMUNITY, weight=1.0),
            make_criterion(3, "Docs", CriterionType.DOCUMENTATION, weight=2.0),
        ]
        tagged, plain = engine.score(techs, criteria, UserConstraints(priority_tags=["FAST"]))
        assert tagged.overall_score >= plain.overall_score

    def test_zero_total_weight_scores_neutral(self, engine, example_technologies):
        criteria = [
            make_criterion(1, "PERFORMANCE", CriterionType.PERFORMANCE, weight=0.0),
            make_criterion(2, "COMMUNITY", CriterionType.COMMUNITY, weight=0.0),
        ]
        scores = engine.score(example_technologies, criteria, BACKEND)
        assert [s.overall_score for s in scores] == [50.0, 50.0]

    def test_missing_metric_scores_neutral(self, engine):
        techs = [
            make_technology(1, "A", performance_score=80),
            make_technology(2, "B"),
        ]
        criteria = [make_criterion(1, "Performance", CriterionType.PERFORMANCE)]
        a, b = engine.score(techs, criteria)
        assert a.overall_score == 80.0
        assert b.overall_score == 50.0
        assert b.criterion_scores == {"Performance": 50.0}

    def test_unbounded_maximum_normalizes_to_100(self, engine):
        techs = [
            make_technology(1, "A", github_stars=2000),
            make_technology(2, "B", github_stars=8000),
            make_technology(3, "C", github_stars=4000),
        ]
        criteria = [make_criterion(1, "Community", CriterionType.COMMUNITY)]
        scores = engine.score(techs, criteria)
        assert [s.criterion_scores["Community"] for s in scores] == [25.0, 100.0, 50.0]

    def test_scores_stay_in_range(self, engine):
        techs = [
            make_technology(1, "A", performance_score=150, learning_curve_score=-20),
            make_technology(2, "B", performance_score=-5, learning_curve_score=130),
        ]
        criteria = [
            make_criterion(1, "Performance", CriterionType.PERFORMANCE),
            make_criterion(2, "Learning Curve", CriterionType.LEARNING_CURVE),
        ]
        for s in engine.score(techs, criteria):
            assert 0.0 <= s.overall_score <= 100.0
            assert all(0.0 <= v <= 100.0 for v in s.criterion_scores.values())

    def test_learning_curve_is_inverted(self, engine):
        techs = [
            make_technology(1, "Easy", learning_curve_score=20),
            make_technology(2, "Hard", learning_curve_score=70),
        ]
        criteria = [make_criterion(1, "Learning Curve", CriterionType.LEARNING_CURVE)]
        easy, hard = engine.score(techs, criteria)
        assert easy.overall_score == 80.0
        assert hard.overall_score == 30.0


class TestSizeValidation:

    def test_two_technologies_accepted(self, engine, example_technologies, example_criteria):
        assert len(engine.score(example_technologies, example_criteria)) == 2

    def test_one_technology_rejected(self, engine, example_technologies, example_criteria):
        with pytest.raises(InvalidInputError, match="At least 2"):
            engine.score(example_technologies[:1], example_criteria)

    def test_six_technologies_rejected(self, engine, example_criteria):
        techs = [make_technology(i, f"T{i}", performance_score=50) for i in range(1, 7)]
        with pytest.raises(InvalidInputError, match="more than 5"):
            engine.score(techs, example_criteria)

    def test_configured_bounds(self, example_technologies, example_criteria):
        engine = WeightedScoringEngine(ScoringConfig(min_technologies=3, max_technologies=4))
        with pytest.raises(InvalidInputError):
            engine.score(example_technologies, example_criteria)

    def test_validate_technology_count(self):
        validate_technology_count(3, 2, 5)
        with pytest.raises(ValueError):
            validate_technology_count(0, 2, 5)


class TestEmptyCriteria:

    def test_empty_criteria_with_metricless_technology_rejected(self, engine):
        techs = [
            make_technology(1, "A", performance_score=50),
            make_technology(2, "Empty"),
        ]
        with pytest.raises(InvalidInputError, match="Empty"):
            engine.score(techs, [])

    def test_empty_criteria_with_metrics_scores_neutral(self, engine, example_technologies):
        scores = engine.score(example_technologies, [])
        assert [s.overall_score for s in scores] == [50.0, 50.0]
        assert scores[0].criterion_scores == {}


class TestScoreOne:

    def test_single_technology_skips_size_check(self, engine, example_criteria):
        tech = make_technology(1, "Solo", performance_score=70, community_score=50)
        score = engine.score_one(tech, example_criteria)
        assert score.overall_score == pytest.approx((70 * 2 + 50) / 3)

    def test_single_technology_count_metric_is_100(self, engine):
        tech = make_technology(1, "Solo", github_stars=1234)
        criteria = [make_criterion(1, "Community", CriterionType.COMMUNITY)]
        assert engine.score_one(tech, criteria).criterion_scores["Community"] == 100.0

    def test_single_technology_zero_count_is_neutral(self, engine):
        tech = make_technology(1, "Solo", github_stars=0)
        criteria = [make_criterion(1, "Community", CriterionType.COMMUNITY)]
        assert engine.score_one(tech, criteria).criterion_scores["Community"] == 50.0
