"""
Configuration for clockmock.

Settings come from an optional YAML file and can be overridden through
environment variables, so a test suite can tune interception without code
changes.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from clockmock.exceptions import ConfigurationError, InvalidInstantError
from clockmock.instants import resolve_timezone


DEFAULT_CONFIG_FILE = "clockmock.yaml"

# Modules whose own timing must keep using the real clock: the test runner,
# thread/process primitives and a few libraries known to break when frozen.
DEFAULT_IGNORE = (
    "_pytest",
    "pluggy",
    "threading",
    "queue",
    "multiprocessing",
    "selenium",
    "gi",
    "prompt_toolkit",
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ClockMockConfig:
    """
    Configuration for the interception engine.

    Attributes:
        ignore: Extra module-name prefixes whose imported names are never rebound
        scan_modules: Rebind names imported from ``time``/``datetime``/``dateutil``
            in already loaded modules, not only the owner module attributes
        default_timezone: IANA zone used for naive instants
    """

    ignore: list[str] = field(default_factory=list)
    scan_modules: bool = True
    default_timezone: str = "UTC"

    def __post_init__(self):
        """Always keep the built-in ignore prefixes, without duplicates."""
        merged = list(DEFAULT_IGNORE)
        for prefix in self.ignore or []:
            if prefix and prefix not in merged:
                merged.append(prefix)
        self.ignore = merged

    @classmethod
    def from_yaml(cls, config_path: Path | None = None) -> "ClockMockConfig":
        """Load configuration from a YAML file or use defaults.

        Args:
            config_path: Path to YAML config file. Defaults to ./clockmock.yaml

        Returns:
            ClockMockConfig instance with loaded or default values

        Raises:
            ConfigurationError: If the file is not valid YAML or has unknown keys
        """
        if config_path is None:
            config_path = Path.cwd() / DEFAULT_CONFIG_FILE

        if not config_path.exists():
            return cls()

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if data is None:
            config_dict = {}
        elif not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {config_path}")
        elif "clockmock" in data:
            config_dict = data["clockmock"] or {}
        else:
            config_dict = data

        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Expected a mapping in {config_path}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys in {config_path}: {', '.join(unknown)}")

        return cls(**config_dict)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "ClockMockConfig":
        """
        Load configuration from file and environment.

        The file path comes from ``config_path``, then ``CLOCKMOCK_CONFIG``, then
        ./clockmock.yaml. Environment variables then override file values:

        - CLOCKMOCK_IGNORE: comma-separated module prefixes, appended
        - CLOCKMOCK_SCAN_MODULES: true/false
        - CLOCKMOCK_DEFAULT_TIMEZONE: IANA zone name

        Raises:
            ConfigurationError: If a file or environment value is invalid
        """
        if config_path is None:
            env_path = os.getenv("CLOCKMOCK_CONFIG")
            config_path = Path(env_path) if env_path else None

        config = cls.from_yaml(config_path)

        ignore = os.getenv("CLOCKMOCK_IGNORE", "")
        for prefix in ignore.split(","):
            prefix = prefix.strip()
            if prefix and prefix not in config.ignore:
                config.ignore.append(prefix)

        scan = os.getenv("CLOCKMOCK_SCAN_MODULES")
        if scan is not None:
            config.scan_modules = _parse_bool("CLOCKMOCK_SCAN_MODULES", scan)

        timezone_name = os.getenv("CLOCKMOCK_DEFAULT_TIMEZONE")
        if timezone_name:
            config.default_timezone = timezone_name

        errors = config.validate()
        if errors:
            raise ConfigurationError("; ".join(errors))

        return config

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of error messages.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        try:
            resolve_timezone(self.default_timezone)
        except InvalidInstantError as e:
            errors.append(str(e))

        if not isinstance(self.scan_modules, bool):
            errors.append(f"scan_modules must be a boolean, got: {self.scan_modules!r}")

        bad_prefixes = [prefix for prefix in self.ignore if not isinstance(prefix, str)]
        if bad_prefixes:
            errors.append(f"ignore entries must be strings, got: {bad_prefixes!r}")

        return errors


def _parse_bool(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be true or false, got: {value!r}")
