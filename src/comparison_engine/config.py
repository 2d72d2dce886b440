"""Centralized configuration management for the comparison engine."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator


class ScoringConfig(BaseModel):
    """Weighted scoring behaviour.

    Controls the priority-tag boost, the neutral score used for degenerate
    input, and the number of technologies a comparison may include.
    """
    priority_boost: float = Field(
        1.5,
        ge=1.0,
        description="Multiplier applied to a criterion weight when a technology matches a priority tag"
    )
    neutral_score: float = Field(
        50.0,
        ge=0.0,
        le=100.0,
        description="Score used for absent metrics, zero total weight and all-zero batches"
    )
    min_technologies: int = Field(
        2,
        ge=2,
        description="Minimum number of technologies in one comparison"
    )
    max_technologies: int = Field(
        5,
        ge=2,
        le=5,
        description="Maximum number of technologies in one comparison (radar charts carry five slots)"
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> "ScoringConfig":
        if self.min_technologies > self.max_technologies:
            raise ValueError("min_technologies must not exceed max_technologies")
        return self


class NormalizationConfig(BaseModel):
    """Metric scale classification.

    Bounded metrics are already expressed on a 0-100 scale and pass through.
    Unbounded metrics are scaled relative to the comparison batch.
    """
    bounded_metrics: list[str] = Field(
        default_factory=lambda: ["community_score", "satisfaction_score", "performance_score"],
        description="Metric keys already on a 0-100 scale"
    )
    unbounded_metrics: list[str] = Field(
        default_factory=lambda: ["github_stars", "npm_downloads", "job_openings"],
        description="Count-like metric keys normalized against the batch maximum"
    )
    bounded_suffix: str = Field(
        "_score",
        description="Any metric key with this suffix is treated as bounded"
    )


class CacheConfig(BaseModel):
    """Caller-side comparison result cache."""
    enabled: bool = Field(True, description="Cache comparison results")
    ttl_seconds: float = Field(1800.0, gt=0, description="Lifetime of a cached comparison")
    max_entries: int = Field(256, ge=1, description="Maximum cached comparisons before the oldest is dropped")


class LoggingConfig(BaseModel):
    """Console logging used by the command line interface."""
    level: str = Field("INFO", description="Log level name")
    dev_mode: bool = Field(False, description="Use rich console log output")


class EngineConfig(BaseModel):
    """Complete configuration for the comparison engine."""
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


CONFIG_ENV_VAR = "COMPARISON_ENGINE_CONFIG"

# Global config instance
_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get the current configuration, initializing defaults on first use."""
    global _config
    if _config is None:
        _config = EngineConfig()
    return _config


def load_config(path: Path) -> EngineConfig:
    """Load configuration from a YAML file and make it current.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The loaded EngineConfig.
    """
    global _config

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    _config = EngineConfig.model_validate(data or {})
    return _config


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _config
    _config = EngineConfig()


def find_config_file() -> Optional[Path]:
    """Find a configuration file.

    Looks in (order of priority):
    1. COMPARISON_ENGINE_CONFIG environment variable
    2. ./comparison-config.yaml
    3. ./comparison-config.yml
    4. ~/.config/comparison-engine/config.yaml
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path

    for name in ["comparison-config.yaml", "comparison-config.yml"]:
        path = Path(name)
        if path.exists():
            return path

    user_config = Path.home() / ".config" / "comparison-engine" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def save_default_config(path: Path) -> None:
    """Write the default configuration to a YAML file.

    Args:
        path: Destination file. Parent directories are created.
    """
    data = EngineConfig().model_dump()

    yaml_content = """# Technology Comparison Engine Configuration
# ==========================================
#
# scoring        - priority-tag boost, neutral score, comparison size limits
# normalization  - which metric keys are 0-100 scores and which are counts
# cache          - caller-side comparison result cache
# logging        - console logging for the tech-compare CLI
#
# Copy this file to one of these locations:
#   - ./comparison-config.yaml (current directory)
#   - ~/.config/comparison-engine/config.yaml (user config)
#
# Or set the COMPARISON_ENGINE_CONFIG environment variable.

"""
    yaml_content += yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(yaml_content)
