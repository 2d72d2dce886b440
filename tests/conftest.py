"""Shared fixtures for the comparison engine tests."""

import logging

import pytest

from comparison_engine.app_logging import ROOT_LOGGER_NAME
from comparison_engine.config import reset_config
from comparison_engine.schema import Criterion, CriterionType, Technology


@pytest.fixture(autouse=True)
def _default_config(monkeypatch, tmp_path):
    """Every test starts from default configuration, isolated from user config files."""
    monkeypatch.delenv("COMPARISON_ENGINE_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def _detach_log_handlers():
    """Drop handlers a CLI test attached to its captured streams."""
    yield
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.handlers.clear()
    root.addHandler(logging.NullHandler())
    root.setLevel(logging.NOTSET)
    root.propagate = True


def make_technology(tech_id: int, name: str, tags=(), category: str = "framework", **metrics) -> Technology:
    """Build a technology with the given metrics as keyword arguments."""
    return Technology(id=tech_id, name=name, category=category, metrics=metrics, tags=list(tags))


def make_criterion(crit_id: int, name: str, criterion_type: CriterionType, weight: float = 1.0, active: bool = True) -> Criterion:
    return Criterion(id=crit_id, name=name, type=criterion_type, weight=weight, active=active)


@pytest.fixture
def example_technologies() -> list[Technology]:
    """Two technologies where only the first carries the 'backend' tag."""
    return [
        make_technology(1, "A", tags=["backend"], performance_score=90, community_score=40),
        make_technology(2, "B", performance_score=60, community_score=80),
    ]


@pytest.fixture
def example_criteria() -> list[Criterion]:
    return [
        make_criterion(1, "PERFORMANCE", CriterionType.PERFORMANCE, weight=2.0),
        make_criterion(2, "COMMUNITY", CriterionType.COMMUNITY, weight=1.0),
    ]
