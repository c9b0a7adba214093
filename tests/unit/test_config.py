"""
Unit tests for ARMVIZ configuration system.

Tests configuration loading, validation, dependency validation, and
environment variable overrides.
"""

import os
import tempfile
from pathlib import Path

import pytest
import yaml

from armviz.config import (
    ArmConfig,
    ArmVizConfig,
    MirrorConfig,
    get_config_paths,
    load_config,
)
from armviz.exceptions import ConfigurationError


class TestMirrorConfig:
    """Tests for MirrorConfig model."""

    def test_default_values(self) -> None:
        """Test MirrorConfig defaults."""
        config = MirrorConfig()
        assert config.src_arm_name == ""
        assert config.dst_arm_name == ""
        assert config.sync_period_sec == 1.0
        assert config.schedule == "fixed_delay"
        assert config.stop_timeout_sec == 5.0

    def test_period_must_be_positive(self) -> None:
        """Test sync period validation."""
        MirrorConfig(sync_period_sec=0.001)

        with pytest.raises(ValueError):
            MirrorConfig(sync_period_sec=0.0)
        with pytest.raises(ValueError):
            MirrorConfig(sync_period_sec=-1.0)

    def test_schedule_options(self) -> None:
        """Test valid schedule literals."""
        for schedule in ["fixed_delay", "fixed_rate"]:
            assert MirrorConfig(schedule=schedule).schedule == schedule

        with pytest.raises(ValueError):
            MirrorConfig(schedule="as_fast_as_possible")


class TestValidateDependencies:
    """Tests for MirrorConfig.validate_dependencies."""

    def test_returns_both_arm_names(self) -> None:
        """Test the named arms are returned as dependencies."""
        config = MirrorConfig(src_arm_name="left_arm", dst_arm_name="right_arm")
        assert config.validate_dependencies() == ["left_arm", "right_arm"]

    def test_missing_source(self) -> None:
        """Test an empty source name is rejected with its path."""
        config = MirrorConfig(dst_arm_name="right_arm")
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_dependencies("services.viz.attributes")
        assert exc_info.value.config_key == "src_arm_name"
        assert "services.viz.attributes: src_arm_name is required" in str(exc_info.value)

    def test_missing_destination(self) -> None:
        """Test an empty destination name is rejected."""
        config = MirrorConfig(src_arm_name="left_arm")
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_dependencies()
        assert exc_info.value.config_key == "dst_arm_name"
        assert "mirror: dst_arm_name is required" in str(exc_info.value)

    def test_source_checked_first(self) -> None:
        """Test the source is reported when both names are empty."""
        with pytest.raises(ConfigurationError) as exc_info:
            MirrorConfig().validate_dependencies()
        assert exc_info.value.config_key == "src_arm_name"

    def test_same_arm_allowed(self) -> None:
        """Test mirroring an arm onto itself is not rejected."""
        config = MirrorConfig(src_arm_name="arm", dst_arm_name="arm")
        assert config.validate_dependencies() == ["arm", "arm"]


class TestArmConfig:
    """Tests for ArmConfig model."""

    def test_default_values(self) -> None:
        """Test ArmConfig defaults."""
        config = ArmConfig(name="left_arm")
        assert config.joint_count == 6
        assert config.link_length_m == 0.2
        assert config.latency_sec == 0.01
        assert config.timeout_sec == 2.0
        assert config.joint_limit_deg == 360.0
        assert config.initial_positions is None

    def test_name_required(self) -> None:
        """Test an arm needs a non-empty name."""
        with pytest.raises(ValueError):
            ArmConfig(name="")

    def test_joint_count_range(self) -> None:
        """Test joint count validation (1-32)."""
        ArmConfig(name="a", joint_count=1)
        ArmConfig(name="a", joint_count=32)

        with pytest.raises(ValueError):
            ArmConfig(name="a", joint_count=0)
        with pytest.raises(ValueError):
            ArmConfig(name="a", joint_count=33)

    def test_initial_positions_length(self) -> None:
        """Test initial positions must match the joint count."""
        ArmConfig(name="a", joint_count=2, initial_positions=[0.0, 10.0])

        with pytest.raises(ValueError):
            ArmConfig(name="a", joint_count=2, initial_positions=[0.0])

    def test_initial_positions_within_limits(self) -> None:
        """Test initial positions must respect the joint limit."""
        with pytest.raises(ValueError):
            ArmConfig(name="a", joint_count=1, joint_limit_deg=90.0, initial_positions=[91.0])


class TestArmVizConfig:
    """Tests for the top-level configuration."""

    def test_default_configuration(self) -> None:
        """Test default top-level configuration."""
        config = ArmVizConfig()
        assert isinstance(config.mirror, MirrorConfig)
        assert config.arms == []
        assert config.log_level == "INFO"
        assert config.log_file is None
        assert config.log_json is False

    def test_duplicate_arm_names_rejected(self) -> None:
        """Test arm names must be unique."""
        with pytest.raises(ValueError) as exc_info:
            ArmVizConfig(arms=[ArmConfig(name="a"), ArmConfig(name="a")])
        assert "duplicate arm names: a" in str(exc_info.value)

    def test_log_level_options(self) -> None:
        """Test log level literals."""
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            assert ArmVizConfig(log_level=level).log_level == level

        with pytest.raises(ValueError):
            ArmVizConfig(log_level="VERBOSE")


class TestConfigPaths:
    """Tests for configuration file discovery."""

    def test_get_config_paths_returns_list(self) -> None:
        """Test get_config_paths returns a list of Paths."""
        paths = get_config_paths()
        assert isinstance(paths, list)
        assert all(isinstance(p, Path) for p in paths)

    def test_config_paths_order(self) -> None:
        """Test local file first, then home, then system."""
        paths = get_config_paths()
        assert paths[0] == Path("./armviz.yaml")
        assert paths[1] == Path.home() / ".armviz" / "config.yaml"
        assert paths[2] == Path("/etc/armviz/config.yaml")


class TestLoadConfig:
    """Tests for configuration loading."""

    def test_load_from_yaml_file(self) -> None:
        """Test loading config from YAML file."""
        config_data = {
            "mirror": {
                "src_arm_name": "left_arm",
                "dst_arm_name": "right_arm",
                "sync_period_sec": 0.5,
            },
            "arms": [
                {"name": "left_arm", "joint_count": 3},
                {"name": "right_arm", "joint_count": 3},
            ],
            "log_level": "DEBUG",
        }

        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".yaml", delete=False
        ) as f:
            yaml.dump(config_data, f)
            temp_path = f.name

        try:
            config = load_config(temp_path)
            assert config.mirror.src_arm_name == "left_arm"
            assert config.mirror.dst_arm_name == "right_arm"
            assert config.mirror.sync_period_sec == 0.5
            assert [arm.name for arm in config.arms] == ["left_arm", "right_arm"]
            assert config.arms[0].joint_count == 3
            assert config.log_level == "DEBUG"
            # Defaults still applied
            assert config.mirror.schedule == "fixed_delay"
        finally:
            os.unlink(temp_path)

    def test_load_empty_file(self) -> None:
        """Test an empty file yields defaults."""
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".yaml", delete=False
        ) as f:
            temp_path = f.name

        try:
            config = load_config(temp_path)
            assert config.mirror.sync_period_sec == 1.0
        finally:
            os.unlink(temp_path)

    def test_load_nonexistent_file_raises_error(self) -> None:
        """Test loading nonexistent file raises ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config("/nonexistent/path/config.yaml")
        assert "not found" in str(exc_info.value)
        assert exc_info.value.config_file == "/nonexistent/path/config.yaml"

    def test_load_invalid_yaml_raises_error(self) -> None:
        """Test loading invalid YAML raises ConfigurationError."""
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".yaml", delete=False
        ) as f:
            f.write("invalid: yaml: content: [")
            temp_path = f.name

        try:
            with pytest.raises(ConfigurationError) as exc_info:
                load_config(temp_path)
            assert "Invalid YAML" in str(exc_info.value)
        finally:
            os.unlink(temp_path)

    def test_load_non_mapping_raises_error(self) -> None:
        """Test a YAML list at the top level is rejected."""
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".yaml", delete=False
        ) as f:
            f.write("- one\n- two\n")
            temp_path = f.name

        try:
            with pytest.raises(ConfigurationError) as exc_info:
                load_config(temp_path)
            assert "must be a mapping" in str(exc_info.value)
        finally:
            os.unlink(temp_path)

    def test_load_invalid_config_raises_error(self) -> None:
        """Test loading invalid config values raises ConfigurationError."""
        config_data = {
            "mirror": {
                "sync_period_sec": -2.0,  # Invalid period
            },
        }

        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".yaml", delete=False
        ) as f:
            yaml.dump(config_data, f)
            temp_path = f.name

        try:
            with pytest.raises(ConfigurationError) as exc_info:
                load_config(temp_path)
            assert "validation failed" in str(exc_info.value)
        finally:
            os.unlink(temp_path)


class TestEnvironmentOverrides:
    """Tests for environment variable overrides."""

    def test_env_override_string(self, tmp_path: Path) -> None:
        """Test environment variable overrides string values."""
        path = tmp_path / "config.yaml"
        path.write_text("{}\n")
        os.environ["ARMVIZ_MIRROR_SRC_ARM_NAME"] = "env_arm"
        try:
            config = load_config(path)
            assert config.mirror.src_arm_name == "env_arm"
        finally:
            del os.environ["ARMVIZ_MIRROR_SRC_ARM_NAME"]

    def test_env_override_float(self, tmp_path: Path) -> None:
        """Test environment variable overrides float values."""
        path = tmp_path / "config.yaml"
        path.write_text("{}\n")
        os.environ["ARMVIZ_MIRROR_SYNC_PERIOD_SEC"] = "0.25"
        try:
            config = load_config(path)
            assert config.mirror.sync_period_sec == 0.25
        finally:
            del os.environ["ARMVIZ_MIRROR_SYNC_PERIOD_SEC"]

    def test_env_override_top_level(self, tmp_path: Path) -> None:
        """Test top-level fields can be overridden."""
        path = tmp_path / "config.yaml"
        path.write_text("{}\n")
        os.environ["ARMVIZ_LOG_LEVEL"] = "WARNING"
        os.environ["ARMVIZ_LOG_JSON"] = "true"
        try:
            config = load_config(path)
            assert config.log_level == "WARNING"
            assert config.log_json is True
        finally:
            del os.environ["ARMVIZ_LOG_LEVEL"]
            del os.environ["ARMVIZ_LOG_JSON"]

    def test_env_override_with_file(self) -> None:
        """Test environment variables override file values."""
        config_data = {"mirror": {"src_arm_name": "file_arm", "dst_arm_name": "right_arm"}}

        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".yaml", delete=False
        ) as f:
            yaml.dump(config_data, f)
            temp_path = f.name

        os.environ["ARMVIZ_MIRROR_SRC_ARM_NAME"] = "env_arm"
        try:
            config = load_config(temp_path)
            assert config.mirror.src_arm_name == "env_arm"
            assert config.mirror.dst_arm_name == "right_arm"
        finally:
            del os.environ["ARMVIZ_MIRROR_SRC_ARM_NAME"]
            os.unlink(temp_path)

    def test_invalid_env_value_raises_error(self, tmp_path: Path) -> None:
        """Test a bad override fails validation like a bad file value."""
        path = tmp_path / "config.yaml"
        path.write_text("{}\n")
        os.environ["ARMVIZ_MIRROR_SYNC_PERIOD_SEC"] = "soon"
        try:
            with pytest.raises(ConfigurationError):
                load_config(path)
        finally:
            del os.environ["ARMVIZ_MIRROR_SYNC_PERIOD_SEC"]


class TestConfigIntegration:
    """Integration tests for configuration system."""

    def test_full_config_roundtrip(self) -> None:
        """Test creating, saving, and loading a full configuration."""
        original = ArmVizConfig(
            mirror=MirrorConfig(src_arm_name="a", dst_arm_name="b", schedule="fixed_rate"),
            arms=[ArmConfig(name="a", joint_count=2), ArmConfig(name="b", joint_count=2)],
        )

        config_dict = original.model_dump()

        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".yaml", delete=False
        ) as f:
            yaml.dump(config_dict, f)
            temp_path = f.name

        try:
            loaded = load_config(temp_path)
            assert loaded.mirror.schedule == "fixed_rate"
            assert loaded.mirror.validate_dependencies() == ["a", "b"]
            assert loaded.arms[1].joint_count == 2
        finally:
            os.unlink(temp_path)
