"""
ARMVIZ Configuration

Pydantic models for the mirroring service and the simulated arms the CLI
builds, loaded from YAML with environment variable overrides.

Lookup order for the configuration file:
    1. Explicit path passed to load_config()
    2. ./armviz.yaml
    3. ~/.armviz/config.yaml
    4. /etc/armviz/config.yaml

Environment overrides use the form ARMVIZ_<SECTION>_<KEY>, for example
ARMVIZ_MIRROR_SRC_ARM_NAME=left_arm. They win over file values and are
coerced to the field type by pydantic.
"""

import logging
import os
from pathlib import Path
from typing import Any, Literal, Optional, get_origin

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from armviz.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "ARMVIZ_"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
ScheduleName = Literal["fixed_delay", "fixed_rate"]


class MirrorConfig(BaseModel):
    """Which arm is mirrored onto which, and how often."""

    src_arm_name: str = ""
    dst_arm_name: str = ""
    sync_period_sec: float = Field(default=1.0, gt=0)
    schedule: ScheduleName = "fixed_delay"
    stop_timeout_sec: float = Field(default=5.0, gt=0)

    def validate_dependencies(self, path: str = "mirror") -> list[str]:
        """Check the required arm names and return them as dependencies.

        Args:
            path: Location of this block in the host configuration, used in
                  error messages

        Returns:
            Names of the arms that must be resolved before construction

        Raises:
            ConfigurationError: If either arm name is empty
        """
        if not self.src_arm_name:
            raise ConfigurationError(
                f"{path}: src_arm_name is required", config_key="src_arm_name"
            )
        if not self.dst_arm_name:
            raise ConfigurationError(
                f"{path}: dst_arm_name is required", config_key="dst_arm_name"
            )
        return [self.src_arm_name, self.dst_arm_name]


class ArmConfig(BaseModel):
    """A simulated arm the CLI registers as a dependency."""

    name: str = Field(min_length=1)
    joint_count: int = Field(default=6, ge=1, le=32)
    link_length_m: float = Field(default=0.2, gt=0)
    latency_sec: float = Field(default=0.01, ge=0)
    timeout_sec: float = Field(default=2.0, gt=0)
    joint_limit_deg: float = Field(default=360.0, gt=0)
    initial_positions: Optional[list[float]] = None

    @model_validator(mode="after")
    def _check_initial_positions(self) -> "ArmConfig":
        if self.initial_positions is not None:
            if len(self.initial_positions) != self.joint_count:
                raise ValueError(
                    f"initial_positions has {len(self.initial_positions)} values, "
                    f"expected {self.joint_count}"
                )
            if any(abs(p) > self.joint_limit_deg for p in self.initial_positions):
                raise ValueError("initial_positions exceed joint_limit_deg")
        return self


class ArmVizConfig(BaseModel):
    """Top-level configuration."""

    mirror: MirrorConfig = Field(default_factory=MirrorConfig)
    arms: list[ArmConfig] = Field(default_factory=list)
    log_level: LogLevel = "INFO"
    log_file: Optional[str] = None
    log_json: bool = False

    @field_validator("arms")
    @classmethod
    def _unique_arm_names(cls, arms: list[ArmConfig]) -> list[ArmConfig]:
        names = [arm.name for arm in arms]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate arm names: {', '.join(duplicates)}")
        return arms


def get_config_paths() -> list[Path]:
    """Return configuration file locations in lookup order."""
    return [
        Path("./armviz.yaml"),
        Path.home() / ".armviz" / "config.yaml",
        Path("/etc/armviz/config.yaml"),
    ]


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", config_file=str(path)) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration: {e}", config_file=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Invalid YAML: top level must be a mapping", config_file=str(path)
        )
    return data


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay ARMVIZ_<SECTION>_<KEY> variables onto nested sections."""
    sections = {
        name
        for name, info in ArmVizConfig.model_fields.items()
        if get_origin(info.annotation) is None
        and isinstance(info.annotation, type)
        and issubclass(info.annotation, BaseModel)
    }

    for var, value in os.environ.items():
        if not var.startswith(ENV_PREFIX):
            continue
        remainder = var[len(ENV_PREFIX):].lower()
        section, _, key = remainder.partition("_")
        if section in sections and key:
            block = data.setdefault(section, {})
            if isinstance(block, dict):
                block[key] = value
                logger.debug(f"Config override from {var}")
        elif remainder in ArmVizConfig.model_fields and remainder not in sections:
            data[remainder] = value
            logger.debug(f"Config override from {var}")
    return data


def load_config(path: Optional[str | Path] = None) -> ArmVizConfig:
    """Load and validate configuration.

    Args:
        path: Explicit configuration file. When omitted the standard
              locations are searched and defaults are used if none exists.

    Returns:
        Validated ArmVizConfig

    Raises:
        ConfigurationError: File missing, unreadable YAML, or invalid values
    """
    data: dict[str, Any] = {}
    source: Optional[Path] = None

    if path is not None:
        source = Path(path)
        if not source.exists():
            raise ConfigurationError(
                f"Configuration file not found: {source}", config_file=str(source)
            )
    else:
        source = next((p for p in get_config_paths() if p.exists()), None)

    if source is not None:
        data = _read_yaml(source)
        logger.debug(f"Loaded configuration from {source}")

    data = _apply_env_overrides(data)

    try:
        return ArmVizConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            config_file=str(source) if source else None,
        ) from e
