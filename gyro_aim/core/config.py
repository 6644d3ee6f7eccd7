"""Configuration management for gyro aim tracking."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os

import yaml


@dataclass
class TrackerConfig:
    """Orientation tracker configuration."""
    discontinuity_ns: int = 500_000_000
    renormalize_interval: int = 100


@dataclass
class BiasConfig:
    """Stationary gyro bias detection configuration."""
    enabled: bool = False
    window_size: int = 500
    block_count: int = 10
    tolerance: float = 0.01
    max_bias_rad_s: float = 0.1


@dataclass
class GyroMouseConfig:
    """Gyro-as-mouse view mapping configuration."""
    mode: int = 2
    turning_axis: int = 0
    yaw_sensitivity: float = 1.0
    pitch_sensitivity: float = 1.0
    tightening_deg_s: float = 3.5


@dataclass
class QuaternionValidationConfig:
    """Quaternion validation configuration."""
    norm_tolerance: float = 0.01
    divergence_threshold: float = 0.1


@dataclass
class SampleValidationConfig:
    """Sensor sample validation configuration."""
    max_rate_dps: float = 2000.0


@dataclass
class ValidationConfig:
    """Validation configuration."""
    quaternion: QuaternionValidationConfig = field(default_factory=QuaternionValidationConfig)
    sample: SampleValidationConfig = field(default_factory=SampleValidationConfig)


@dataclass
class MonitoringConfig:
    """Stream monitoring configuration."""
    window_size: int = 1000
    log_interval_s: float = 10.0


@dataclass
class Config:
    """Complete configuration for gyro aim tracking."""
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    bias: BiasConfig = field(default_factory=BiasConfig)
    gyro_mouse: GyroMouseConfig = field(default_factory=GyroMouseConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


def _dict_to_dataclass(data: dict, cls: type, section: str = "") -> object:
    """Recursively convert dictionary to dataclass, ignoring unknown keys.

    Raises:
        ValueError: If a section is not a mapping.
    """
    if not hasattr(cls, "__dataclass_fields__"):
        return data

    if not isinstance(data, dict):
        name = section or "configuration root"
        raise ValueError(f"{name} must be a mapping, got {data!r}")

    field_types = {f.name: f.type for f in cls.__dataclass_fields__.values()}
    kwargs = {}

    for key, value in data.items():
        if key in field_types:
            field_type = field_types[key]
            if hasattr(field_type, "__dataclass_fields__"):
                name = f"{section}.{key}" if section else key
                kwargs[key] = _dict_to_dataclass(value, field_type, name)
            else:
                kwargs[key] = value

    return cls(**kwargs)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file. If None, uses
            GYRO_AIM_CONFIG_PATH or the packaged default.

    Returns:
        Configuration object with all settings.

    Raises:
        FileNotFoundError: If specified config file doesn't exist.
        ValueError: If the file is not valid YAML, a section is not a
            mapping, or a configured value has the wrong type or is out
            of range.
    """
    if config_path is None:
        env_path = os.environ.get("GYRO_AIM_CONFIG_PATH")
        if env_path:
            config_path = env_path
        else:
            default_path = Path(__file__).parent.parent / "config" / "default.yaml"
            if default_path.exists():
                config_path = str(default_path)
            else:
                return Config()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return Config()

    config = _dict_to_dataclass(data, Config)
    validate_config(config)
    return config


_INT_FIELDS = (
    "tracker.discontinuity_ns",
    "tracker.renormalize_interval",
    "bias.window_size",
    "bias.block_count",
    "gyro_mouse.mode",
    "gyro_mouse.turning_axis",
    "monitoring.window_size",
)

_FLOAT_FIELDS = (
    "bias.tolerance",
    "bias.max_bias_rad_s",
    "gyro_mouse.yaw_sensitivity",
    "gyro_mouse.pitch_sensitivity",
    "gyro_mouse.tightening_deg_s",
    "validation.quaternion.norm_tolerance",
    "validation.quaternion.divergence_threshold",
    "validation.sample.max_rate_dps",
    "monitoring.log_interval_s",
)


def _lookup(config: Config, dotted: str):
    value = config
    for part in dotted.split("."):
        value = getattr(value, part)
    return value


def _check_types(config: Config) -> None:
    """Reject values of the wrong type, e.g. ``5e8`` read by YAML as a string."""
    for name in _INT_FIELDS:
        value = _lookup(config, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer, got {value!r}")
    for name in _FLOAT_FIELDS:
        value = _lookup(config, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{name} must be a number, got {value!r}")
    if not isinstance(config.bias.enabled, bool):
        raise ValueError(f"bias.enabled must be true or false, got {config.bias.enabled!r}")


def validate_config(config: Config) -> None:
    """Reject values the tracker cannot work with.

    Raises:
        ValueError: On the first invalid value found.
    """
    _check_types(config)

    if config.tracker.discontinuity_ns <= 0:
        raise ValueError(
            f"tracker.discontinuity_ns must be positive, got {config.tracker.discontinuity_ns}"
        )
    if config.tracker.renormalize_interval < 0:
        raise ValueError(
            f"tracker.renormalize_interval must be >= 0, got {config.tracker.renormalize_interval}"
        )
    if config.bias.window_size <= 0 or config.bias.block_count <= 0:
        raise ValueError("bias.window_size and bias.block_count must be positive")
    if config.bias.window_size % config.bias.block_count != 0:
        raise ValueError(
            f"bias.window_size ({config.bias.window_size}) must be a multiple "
            f"of bias.block_count ({config.bias.block_count})"
        )
    if config.gyro_mouse.mode not in (0, 1, 2, 3):
        raise ValueError(f"Unknown gyro_mouse.mode: {config.gyro_mouse.mode}")
    if config.gyro_mouse.turning_axis not in (0, 1):
        raise ValueError(f"Unknown gyro_mouse.turning_axis: {config.gyro_mouse.turning_axis}")
    if config.monitoring.window_size <= 0:
        raise ValueError("monitoring.window_size must be positive")
