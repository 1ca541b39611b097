"""
Unit tests for canonical_orient.project_config module.

Tests:
- Default values and validation
- JSON serialization
- Config file discovery and loading
- Config merging
"""

import json
from pathlib import Path

import pytest

from canonical_orient.orientation.rotation import DegenerateStrategy
from canonical_orient.project_config import (
    CONFIG_FILENAME,
    LoggingConfig,
    ProjectConfig,
    TransformConfig,
    create_sample_config,
    find_config_file,
    load_config,
    merge_configs,
)


@pytest.fixture
def isolated_dirs(tmp_path, monkeypatch):
    """Run with an empty cwd and home so no stray config is picked up."""
    cwd = tmp_path / "cwd"
    home = tmp_path / "home"
    cwd.mkdir()
    home.mkdir()
    monkeypatch.chdir(cwd)
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    return cwd, home


class TestDefaults:
    """Tests for default configuration values."""

    def test_transform_defaults(self):
        """Test TransformConfig defaults."""
        config = TransformConfig()
        assert config.ap_key == "AP_orientation"
        assert config.lr_key == "LR_orientation"
        assert config.rounding_tolerance == 0.1
        assert config.strategy is DegenerateStrategy.AXIS_ALIGNED

    def test_logging_defaults(self):
        """Test LoggingConfig defaults."""
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.json_file is None
        assert config.use_colors is True

    def test_defaults_valid(self):
        """Test that the default configuration validates."""
        assert ProjectConfig().validate() is not None


class TestValidation:
    """Tests for setting validation."""

    def test_empty_key(self):
        """Test that empty orientation keys are rejected."""
        with pytest.raises(ValueError):
            TransformConfig(ap_key="").validate()

    @pytest.mark.parametrize("tolerance", [-0.1, 0.5, 2.0])
    def test_tolerance_out_of_range(self, tolerance):
        """Test rounding tolerance bounds."""
        with pytest.raises(ValueError):
            TransformConfig(rounding_tolerance=tolerance).validate()

    @pytest.mark.parametrize("tolerance", [None, "0.1", True, float("nan")])
    def test_tolerance_not_a_number(self, tolerance):
        """Test that a non-numeric tolerance is a ValueError."""
        with pytest.raises(ValueError):
            TransformConfig(rounding_tolerance=tolerance).validate()

    def test_null_tolerance_in_file(self):
        """Test a JSON null tolerance."""
        with pytest.raises(ValueError):
            ProjectConfig.from_json('{"transform": {"rounding_tolerance": null}}')

    def test_unknown_strategy(self):
        """Test that an unknown degenerate strategy is rejected."""
        with pytest.raises(ValueError):
            TransformConfig(degenerate_strategy="random").validate()

    def test_perpendicular_strategy(self):
        """Test the general degenerate strategy is accepted."""
        config = TransformConfig(degenerate_strategy="perpendicular")
        config.validate()
        assert config.strategy is DegenerateStrategy.PERPENDICULAR

    def test_unknown_log_level(self):
        """Test that an unknown log level is rejected."""
        with pytest.raises(ValueError):
            LoggingConfig(level="LOUD").validate()

    def test_log_level_case_insensitive(self):
        """Test lowercase level names."""
        LoggingConfig(level="debug").validate()


class TestSerialization:
    """Tests for dict/JSON conversion."""

    def test_to_dict(self):
        """Test conversion to nested dict."""
        data = ProjectConfig().to_dict()
        assert data["transform"]["ap_key"] == "AP_orientation"
        assert data["logging"]["level"] == "INFO"

    def test_from_dict_partial(self):
        """Test that missing settings keep their defaults."""
        config = ProjectConfig.from_dict({"transform": {"ap_key": "ap"}})
        assert config.transform.ap_key == "ap"
        assert config.transform.lr_key == "LR_orientation"
        assert config.logging.level == "INFO"

    def test_from_dict_ignores_unknown_and_comments(self):
        """Test that unknown keys and comment keys are skipped."""
        config = ProjectConfig.from_dict({
            "_comment": "top",
            "transform": {"_comment": "section", "colour": "red"},
            "extras": {"x": 1},
        })
        assert not hasattr(config.transform, "colour")
        assert not hasattr(config.transform, "_comment")

    def test_from_dict_invalid_value(self):
        """Test that invalid values raise ValueError."""
        with pytest.raises(ValueError):
            ProjectConfig.from_dict({"transform": {"degenerate_strategy": "nope"}})

    def test_json_roundtrip(self):
        """Test JSON serialization of a customised config."""
        original = ProjectConfig(
            transform=TransformConfig(lr_key="lr", degenerate_strategy="perpendicular"),
            logging=LoggingConfig(level="DEBUG", use_colors=False),
        )
        restored = ProjectConfig.from_json(original.to_json())
        assert restored == original

    def test_save_and_load(self, tmp_path):
        """Test writing to and reading from disk."""
        path = tmp_path / CONFIG_FILENAME
        ProjectConfig(transform=TransformConfig(rounding_tolerance=0.2)).save(path)

        loaded = ProjectConfig.load(path)
        assert loaded.transform.rounding_tolerance == 0.2


class TestFindConfigFile:
    """Tests for config file discovery."""

    def test_nothing_found(self, isolated_dirs):
        """Test that None is returned when no file exists."""
        assert find_config_file() is None

    def test_explicit(self, isolated_dirs, tmp_path):
        """Test that an explicit path wins."""
        explicit = tmp_path / "custom.json"
        explicit.write_text("{}", encoding="utf-8")
        (isolated_dirs[0] / CONFIG_FILENAME).write_text("{}", encoding="utf-8")

        assert find_config_file(explicit_config=explicit) == explicit

    def test_missing_explicit_falls_through(self, isolated_dirs, tmp_path):
        """Test that a missing explicit path falls back to the search."""
        cwd_config = isolated_dirs[0] / CONFIG_FILENAME
        cwd_config.write_text("{}", encoding="utf-8")

        found = find_config_file(explicit_config=tmp_path / "absent.json")
        assert found is not None
        assert found.resolve() == cwd_config.resolve()

    def test_dataset_directory(self, isolated_dirs, tmp_path):
        """Test discovery next to a dataset file."""
        dataset_dir = tmp_path / "embryo_01"
        dataset_dir.mkdir()
        (dataset_dir / CONFIG_FILENAME).write_text("{}", encoding="utf-8")
        dataset_file = dataset_dir / "stack.tif"

        assert find_config_file(dataset_path=dataset_file) == dataset_dir / CONFIG_FILENAME
        assert find_config_file(dataset_path=dataset_dir) == dataset_dir / CONFIG_FILENAME

    def test_home(self, isolated_dirs):
        """Test discovery in the home directory."""
        home_config = isolated_dirs[1] / CONFIG_FILENAME
        home_config.write_text("{}", encoding="utf-8")

        assert find_config_file() == home_config


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_when_absent(self, isolated_dirs):
        """Test that defaults are used with no file."""
        assert load_config() == ProjectConfig()

    def test_loads_found_file(self, isolated_dirs):
        """Test that a discovered file is loaded."""
        (isolated_dirs[0] / CONFIG_FILENAME).write_text(
            json.dumps({"transform": {"ap_key": "ap_dir"}}), encoding="utf-8"
        )
        assert load_config().transform.ap_key == "ap_dir"

    def test_invalid_json_gives_defaults(self, isolated_dirs):
        """Test that unreadable JSON falls back to defaults."""
        (isolated_dirs[0] / CONFIG_FILENAME).write_text("{not json", encoding="utf-8")
        assert load_config() == ProjectConfig()

    def test_invalid_setting_raises(self, isolated_dirs):
        """Test that a readable file with bad settings is an error."""
        (isolated_dirs[0] / CONFIG_FILENAME).write_text(
            json.dumps({"transform": {"rounding_tolerance": 3}}), encoding="utf-8"
        )
        with pytest.raises(ValueError):
            load_config()


class TestMergeConfigs:
    """Tests for merge_configs."""

    def test_non_default_override_applied(self):
        """Test that changed override values win."""
        base = ProjectConfig(transform=TransformConfig(ap_key="base_ap"))
        override = ProjectConfig(logging=LoggingConfig(level="DEBUG"))

        merged = merge_configs(base, override)

        assert merged.transform.ap_key == "base_ap"
        assert merged.logging.level == "DEBUG"

    def test_default_override_ignored(self):
        """Test that default override values do not reset the base."""
        base = ProjectConfig(transform=TransformConfig(degenerate_strategy="perpendicular"))
        merged = merge_configs(base, ProjectConfig())
        assert merged.transform.strategy is DegenerateStrategy.PERPENDICULAR

    def test_inputs_not_modified(self):
        """Test that merging leaves both inputs untouched."""
        base = ProjectConfig()
        override = ProjectConfig(transform=TransformConfig(lr_key="lr"))
        merge_configs(base, override)
        assert base.transform.lr_key == "LR_orientation"


class TestSampleConfig:
    """Tests for create_sample_config."""

    def test_sample_loadable(self, tmp_path):
        """Test that the sample file loads back to the defaults."""
        path = tmp_path / CONFIG_FILENAME
        create_sample_config(path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert "_comment" in data
        assert "_comment" in data["transform"]
        assert ProjectConfig.load(path) == ProjectConfig()
