"""
Tests for the configuration system.

Tests cover:
- Defaults and validation
- YAML/JSON persistence
- Environment overrides
- Conversion into engine configs
"""

import os

import pytest
import yaml
from pydantic import ValidationError

from kodon import KodonConfig, TerminationConditions, load_config
from kodon.config import (
    CrossoverSettings,
    EngineSettings,
    LoggingSettings,
    SelectionSettings,
    TerminationSettings,
)
from kodon.genome import CrossoverConfig, CrossoverMethod, SelectionConfig, SelectionMethod


@pytest.fixture
def clean_env(monkeypatch):
    """Remove any KODON_ variables inherited from the shell."""
    for key in list(os.environ):
        if key.startswith("KODON_"):
            monkeypatch.delenv(key)
    return monkeypatch


class TestDefaults:
    """Test default configuration values."""

    def test_engine_defaults(self):
        config = KodonConfig()
        assert config.engine.maximize
        assert config.engine.population_size == 100
        assert config.engine.elite_percentage == 15.0
        assert config.engine.selection is SelectionMethod.FAST
        assert config.engine.crossover is CrossoverMethod.UNIFORM
        assert config.engine.seed is None
        assert config.engine.history_limit is None

    def test_termination_defaults(self):
        termination = KodonConfig().termination
        assert termination.max_generation == 500
        assert termination.fitness_goal is None
        assert termination.max_running_time_ms is None
        assert termination.max_iterations is None

    def test_to_config(self):
        config = KodonConfig()
        assert config.selection.to_config() == SelectionConfig()
        assert config.crossover.to_config() == CrossoverConfig()
        assert not config.aging.to_config().enabled


class TestValidation:
    """Test rejected settings."""

    def test_population_minimum(self):
        with pytest.raises(ValidationError):
            EngineSettings(population_size=10)

    def test_elite_percentage_range(self):
        with pytest.raises(ValidationError):
            EngineSettings(elite_percentage=120)

    def test_history_limit_non_negative(self):
        with pytest.raises(ValidationError):
            EngineSettings(history_limit=-1)
        assert EngineSettings(history_limit=0).history_limit == 0

    def test_unknown_selection(self):
        with pytest.raises(ValidationError):
            EngineSettings(selection="tournament")

    def test_selection_bands_sum(self):
        with pytest.raises(ValidationError):
            SelectionSettings(first_parent_elite=80)

    def test_crossover_weights_sum(self):
        with pytest.raises(ValidationError):
            CrossoverSettings(uniform_weight=50)

    def test_max_iterations_positive(self):
        with pytest.raises(ValidationError):
            TerminationSettings(max_iterations=0)

    def test_logging_level_normalized(self):
        assert LoggingSettings(level="debug").level == "DEBUG"
        with pytest.raises(ValidationError):
            LoggingSettings(level="verbose")


class TestPersistence:
    """Test YAML and JSON files."""

    def test_yaml_round_trip(self, tmp_path):
        config = KodonConfig(
            engine={"population_size": 40, "seed": 5, "crossover": "two_point"},
            termination={"fitness_goal": 12.5},
        )
        path = tmp_path / "nested" / "kodon.yaml"
        config.to_yaml(path)

        with open(path) as f:
            raw = yaml.safe_load(f)
        assert raw["engine"]["crossover"] == "two_point"

        assert KodonConfig.from_yaml(path) == config

    def test_json_round_trip(self, tmp_path):
        config = KodonConfig(aging={"kick_out_age": 8, "except_best": False})
        path = tmp_path / "kodon.json"
        config.to_json(path)
        assert KodonConfig.from_json(path) == config

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert KodonConfig.from_yaml(path) == KodonConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            KodonConfig.from_yaml(tmp_path / "missing.yaml")
        with pytest.raises(FileNotFoundError):
            KodonConfig.from_json(tmp_path / "missing.json")


class TestEnvironment:
    """Test environment variable overrides."""

    def test_from_env(self, clean_env):
        clean_env.setenv("KODON_ENGINE__POPULATION_SIZE", "200")
        clean_env.setenv("KODON_ENGINE__MAXIMIZE", "false")
        clean_env.setenv("KODON_TERMINATION__MAX_GENERATION", "none")
        clean_env.setenv("KODON_TERMINATION__FITNESS_GOAL", "3")

        config = KodonConfig.from_env()

        assert config.engine.population_size == 200
        assert config.engine.maximize is False
        assert config.termination.max_generation is None
        assert config.termination.fitness_goal == 3.0

    def test_load_config_prefers_env(self, clean_env):
        clean_env.setenv("KODON_ENGINE__SEED", "11")
        assert load_config().engine.seed == 11

    def test_load_config_defaults(self, clean_env):
        assert load_config() == KodonConfig()


class TestLoadConfig:
    """Test format detection."""

    @pytest.mark.parametrize("suffix", [".yaml", ".yml", ".json"])
    def test_detects_format(self, tmp_path, suffix):
        config = KodonConfig(engine={"seed": 21})
        path = tmp_path / f"kodon{suffix}"
        if suffix == ".json":
            config.to_json(path)
        else:
            config.to_yaml(path)
        assert load_config(path).engine.seed == 21

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValueError):
            load_config(tmp_path / "kodon.toml")


class TestTerminationSettings:
    """Test applying termination settings to conditions."""

    def test_apply(self):
        conditions = TerminationConditions()
        TerminationSettings(
            max_generation=None,
            fitness_goal=1010,
            max_running_time_ms=250,
            max_iterations=50,
        ).apply(conditions)

        assert conditions.max_generation is None
        assert conditions.fitness_goal == 1010.0
        assert conditions.max_running_time_ms == 250
        assert conditions.max_iterations == 50

    def test_apply_leaves_unset_disabled(self):
        conditions = TerminationConditions()
        TerminationSettings().apply(conditions)
        assert conditions.max_generation == 500
        assert not conditions.goal_enabled
        assert not conditions.timeout_enabled
        assert not conditions.stagnation_enabled
