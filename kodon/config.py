"""
Kodon Configuration System

Pydantic v2-based configuration with YAML/JSON support and environment overrides.

Features:
- Type-safe configuration models
- YAML/JSON file loading
- Environment variable overrides
- Conversion into the dataclass configs used by the engine
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator, model_validator

from .genome.operators import CrossoverConfig, CrossoverMethod
from .genome.population import MIN_POPULATION_SIZE, AgingConfig
from .genome.selection import SelectionConfig, SelectionMethod
from .genome.termination import TerminationConditions


# =============================================================================
# Engine Configuration
# =============================================================================


class EngineSettings(BaseModel):
    """Core search parameters."""

    maximize: bool = Field(
        default=True,
        description="Maximize fitness (False to minimize)",
    )

    population_size: int = Field(
        default=100,
        ge=MIN_POPULATION_SIZE,
        description="Number of individuals per generation",
    )

    elite_percentage: float = Field(
        default=15.0,
        ge=0.0,
        le=100.0,
        description="Share of the population kept unchanged, in percent",
    )

    selection: SelectionMethod = Field(
        default=SelectionMethod.FAST,
        description="Parent selection method",
    )

    crossover: CrossoverMethod = Field(
        default=CrossoverMethod.UNIFORM,
        description="Crossover method",
    )

    seed: int | None = Field(
        default=None,
        ge=0,
        description="Random seed (wall-clock derived when unset)",
    )

    history_limit: int | None = Field(
        default=None,
        ge=0,
        description="Generations kept in the run history (None keeps all, 0 records none)",
    )


class SelectionSettings(BaseModel):
    """Probability bands for parent selection, in percent."""

    first_parent_elite: float = Field(default=65.0, ge=0.0, le=100.0)
    first_parent_good: float = Field(default=27.0, ge=0.0, le=100.0)
    first_parent_any: float = Field(default=8.0, ge=0.0, le=100.0)

    second_parent_good: float = Field(default=75.0, ge=0.0, le=100.0)
    second_parent_biased: float = Field(default=15.0, ge=0.0, le=100.0)
    second_parent_any: float = Field(default=10.0, ge=0.0, le=100.0)

    good_range_factor: float = Field(default=1.5, ge=1.0)
    mixed_fast_percentage: float = Field(default=60.0, ge=0.0, le=100.0)

    @model_validator(mode="after")
    def validate_bands(self) -> SelectionSettings:
        """Ensure each parent's bands sum to 100."""
        is_valid, errors = self.to_config().validate()
        if not is_valid:
            raise ValueError("; ".join(errors))
        return self

    def to_config(self) -> SelectionConfig:
        return SelectionConfig(**self.model_dump())


class CrossoverSettings(BaseModel):
    """Mutation chance and MIXED crossover weights, in percent."""

    mutation_percentage: float = Field(
        default=1.5,
        ge=0.0,
        le=100.0,
        description="Mutation chance per offspring (per bit for uniform crossover)",
    )

    uniform_weight: float = Field(default=40.0, ge=0.0, le=100.0)
    one_point_weight: float = Field(default=25.0, ge=0.0, le=100.0)
    two_point_weight: float = Field(default=35.0, ge=0.0, le=100.0)

    @model_validator(mode="after")
    def validate_weights(self) -> CrossoverSettings:
        """Ensure the MIXED weights sum to 100."""
        is_valid, errors = self.to_config().validate()
        if not is_valid:
            raise ValueError("; ".join(errors))
        return self

    def to_config(self) -> CrossoverConfig:
        return CrossoverConfig(**self.model_dump())


class AgingSettings(BaseModel):
    """Age-based eviction of elite individuals."""

    kick_out_age: int | None = Field(
        default=None,
        ge=0,
        description="Age at which elite individuals may be evicted (None disables)",
    )
    except_best: bool = Field(
        default=True,
        description="Never evict the current best individual",
    )
    best_survival_percentage: float = Field(default=30.0, ge=0.0, le=100.0)
    elite_survival_percentage: float = Field(default=45.0, ge=0.0, le=100.0)

    def to_config(self) -> AgingConfig:
        return AgingConfig(**self.model_dump())


class TerminationSettings(BaseModel):
    """Stopping conditions; unset conditions are disabled."""

    max_generation: int | None = Field(
        default=500,
        ge=0,
        description="Generation cap (None for no cap)",
    )
    fitness_goal: float | None = Field(
        default=None,
        description="Stop once the best fitness reaches this value",
    )
    max_running_time_ms: float | None = Field(
        default=None,
        ge=0.0,
        description="Stop after this much wall-clock time",
    )
    max_iterations: int | None = Field(
        default=None,
        ge=1,
        description="Stop after this many generations without improvement",
    )

    def apply(self, conditions: TerminationConditions) -> None:
        """Copy these settings onto a ``TerminationConditions`` instance."""
        conditions.set_max_generation(self.max_generation)
        if self.fitness_goal is not None:
            conditions.set_fitness_goal(self.fitness_goal)
        if self.max_running_time_ms is not None:
            conditions.set_max_running_time_ms(self.max_running_time_ms)
        if self.max_iterations is not None:
            conditions.set_max_iterations(self.max_iterations)


class LoggingSettings(BaseModel):
    """Logging output."""

    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: Path | None = None
    serialize: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


# =============================================================================
# Main Configuration
# =============================================================================


class KodonConfig(BaseModel):
    """Complete Kodon configuration."""

    engine: EngineSettings = Field(default_factory=EngineSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    crossover: CrossoverSettings = Field(default_factory=CrossoverSettings)
    aging: AgingSettings = Field(default_factory=AgingSettings)
    termination: TerminationSettings = Field(default_factory=TerminationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> KodonConfig:
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML file

        Returns:
            KodonConfig instance
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        logger.info(f"Loaded configuration from {path}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str | Path) -> KodonConfig:
        """
        Load configuration from JSON file.

        Args:
            path: Path to JSON file

        Returns:
            KodonConfig instance
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        logger.info(f"Loaded configuration from {path}")
        return cls(**data)

    @classmethod
    def from_env(cls, prefix: str = "KODON_") -> KodonConfig:
        """
        Load configuration from environment variables.

        Environment variables should be in the format:
        KODON_ENGINE__POPULATION_SIZE=200
        KODON_TERMINATION__FITNESS_GOAL=3

        Args:
            prefix: Environment variable prefix

        Returns:
            KodonConfig instance
        """
        config_dict: dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue

            # Remove prefix and convert to nested dict
            parts = key[len(prefix):].lower().split("__")

            current = config_dict
            for part in parts[:-1]:
                current = current.setdefault(part, {})

            # Pydantic coerces numeric strings; only bools and nulls need help
            lowered = value.lower()
            if lowered in ("true", "false"):
                current[parts[-1]] = lowered == "true"
            elif lowered in ("none", "null", ""):
                current[parts[-1]] = None
            else:
                current[parts[-1]] = value

        logger.info(f"Loaded configuration from environment variables (prefix={prefix})")
        return cls(**config_dict)

    def to_yaml(self, path: str | Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Path to YAML file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.safe_dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

        logger.info(f"Saved configuration to {path}")

    def to_json(self, path: str | Path) -> None:
        """
        Save configuration to JSON file.

        Args:
            path: Path to JSON file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)

        logger.info(f"Saved configuration to {path}")


# =============================================================================
# Configuration Factory
# =============================================================================


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "KODON_",
) -> KodonConfig:
    """
    Load configuration with automatic format detection.

    Priority:
    1. Explicit config file (YAML or JSON)
    2. Environment variables
    3. Defaults

    Args:
        config_path: Path to config file (YAML or JSON)
        env_prefix: Environment variable prefix

    Returns:
        KodonConfig instance
    """
    if config_path:
        path = Path(config_path)
        if path.suffix in (".yaml", ".yml"):
            return KodonConfig.from_yaml(path)
        elif path.suffix == ".json":
            return KodonConfig.from_json(path)
        else:
            raise ValueError(f"Unknown config format: {path.suffix}")

    if any(key.startswith(env_prefix) for key in os.environ):
        return KodonConfig.from_env(env_prefix)

    logger.info("Using default configuration")
    return KodonConfig()


__all__ = [
    "EngineSettings",
    "SelectionSettings",
    "CrossoverSettings",
    "AgingSettings",
    "TerminationSettings",
    "LoggingSettings",
    "KodonConfig",
    "load_config",
]
