"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from comparison_engine.config import (
    CONFIG_ENV_VAR,
    EngineConfig,
    ScoringConfig,
    find_config_file,
    get_config,
    load_config,
    reset_config,
    save_default_config,
)


class TestDefaults:

    def test_default_values(self):
        config = get_config()
        assert config.scoring.priority_boost == 1.5
        assert config.scoring.neutral_score == 50.0
        assert (config.scoring.min_technologies, config.scoring.max_technologies) == (2, 5)
        assert config.cache.ttl_seconds == 1800
        assert "github_stars" in config.normalization.unbounded_metrics

    def test_max_technologies_capped_at_radar_slots(self):
        with pytest.raises(ValidationError):
            ScoringConfig(max_technologies=6)

    @pytest.mark.parametrize("minimum", [0, 1])
    def test_comparison_needs_at_least_two(self, minimum):
        with pytest.raises(ValidationError):
            ScoringConfig(min_technologies=minimum)

    def test_single_technology_minimum_rejected_from_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("scoring:\n  min_technologies: 1\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_min_must_not_exceed_max(self):
        with pytest.raises(ValidationError):
            ScoringConfig(min_technologies=4, max_technologies=3)


class TestLoading:

    def test_load_partial_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("scoring:\n  priority_boost: 2.0\ncache:\n  enabled: false\n", encoding="utf-8")

        config = load_config(path)
        assert config.scoring.priority_boost == 2.0
        assert config.scoring.neutral_score == 50.0
        assert config.cache.enabled is False
        assert get_config() is config

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == EngineConfig()

    def test_reset(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("scoring:\n  neutral_score: 10\n", encoding="utf-8")
        load_config(path)
        reset_config()
        assert get_config().scoring.neutral_score == 50.0

    def test_save_default_config(self, tmp_path):
        path = tmp_path / "nested" / "comparison-config.yaml"
        save_default_config(path)

        text = path.read_text(encoding="utf-8")
        assert text.startswith("# Technology Comparison Engine Configuration")
        assert EngineConfig.model_validate(yaml.safe_load(text)) == EngineConfig()


class TestFindConfigFile:

    def test_none_found(self):
        assert find_config_file() is None

    def test_env_var_wins(self, tmp_path, monkeypatch):
        env_file = tmp_path / "env.yaml"
        env_file.write_text("{}", encoding="utf-8")
        (tmp_path / "comparison-config.yaml").write_text("{}", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_file))
        assert find_config_file() == env_file

    def test_current_directory(self, tmp_path):
        (tmp_path / "comparison-config.yml").write_text("{}", encoding="utf-8")
        assert find_config_file() == Path("comparison-config.yml")

    def test_user_config(self, tmp_path):
        user_file = tmp_path / ".config" / "comparison-engine" / "config.yaml"
        user_file.parent.mkdir(parents=True)
        user_file.write_text("{}", encoding="utf-8")
        assert find_config_file() == user_file
