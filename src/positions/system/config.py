"""
System configuration.

One YAML file configures the whole toolkit:

    valuation:
      target: CAD
      allow_inverse: false
      precision: 28

    logging:
      level: INFO
      format: console

Values support ``${VAR}`` environment substitution. Missing keys fall back
to the dataclass defaults.

Search order when no path is given:
1. config/positions.yaml
2. positions.yaml
"""

import os
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from positions.system.log_system import LoggingConfig as LoggerConfig

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path("config/positions.yaml"),
    Path("positions.yaml"),
)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


@dataclass
class ValuationConfig:
    """Valuation defaults (HOW expressions are evaluated).

    Attributes:
        target: Asset code equity is reported in when none is given
        allow_inverse: Traverse instruments quote -> base by dividing by price
        precision: Significant digits of the decimal context used for evaluation
    """

    target: str = "USD"
    allow_inverse: bool = False
    precision: int = 28

    def __post_init__(self) -> None:
        if self.precision < 1:
            raise ValueError(f"precision must be positive, got {self.precision}")


@dataclass
class LoggingConfig:
    """Logging section of the system configuration."""

    level: str = "INFO"
    format: str = "console"
    timestamp_format: str = "compact"
    enable_file: bool = False
    file_path: str = "logs/positions.log"
    file_level: str = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3

    def to_logger_config(self) -> LoggerConfig:
        """Convert to the log_system model consumed by LoggerFactory."""
        return LoggerConfig(
            level=self.level,  # type: ignore[arg-type]
            format=self.format,  # type: ignore[arg-type]
            timestamp_format=self.timestamp_format,  # type: ignore[arg-type]
            enable_file=self.enable_file,
            file_path=Path(self.file_path),
            file_level=self.file_level,  # type: ignore[arg-type]
            file_rotation=self.file_rotation,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class SystemConfig:
    """Complete system configuration."""

    valuation: ValuationConfig = field(default_factory=ValuationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "SystemConfig":
        """
        Load configuration from YAML, merged over built-in defaults.

        Args:
            path: Explicit config file. If None, searches DEFAULT_CONFIG_PATHS.
                A missing file yields the defaults.

        Raises:
            ValueError: If the YAML cannot be parsed or has unknown keys
        """
        config_path: Path | None
        if path is not None:
            config_path = Path(path)
        else:
            config_path = next((p for p in DEFAULT_CONFIG_PATHS if p.exists()), None)

        if config_path is None or not config_path.exists():
            return cls()

        try:
            with open(config_path, "r") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML from {config_path}: {e}")

        if not isinstance(raw, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")

        defaults = asdict(cls())
        merged = _deep_merge(defaults, _substitute_env_vars(raw))
        return cls._from_dict(merged)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """Build config from a (possibly partial) dictionary."""
        try:
            return cls(
                valuation=ValuationConfig(**data.get("valuation", {})),
                logging=LoggingConfig(**data.get("logging", {})),
            )
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {e}")


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``; override wins."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(value: Any) -> Any:
    """Replace ``${VAR}`` in strings (recursively); undefined variables are left as-is."""
    if isinstance(value, dict):
        return {key: _substitute_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


_system_config: SystemConfig | None = None


def get_system_config(path: Path | str | None = None) -> SystemConfig:
    """
    Get the cached system configuration.

    An explicit path always reloads and replaces the cached instance.
    """
    global _system_config
    if path is not None or _system_config is None:
        _system_config = SystemConfig.load(path)
    return _system_config


def reload_system_config(path: Path | str | None = None) -> SystemConfig:
    """Force a reload of the system configuration."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
