"""Configuration management for toggl-cli."""

import copy
import logging
from collections.abc import Iterator
from datetime import timedelta, tzinfo
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import tzlocal
import yaml  # type: ignore[import-untyped]
from jsonschema import ValidationError, validate  # type: ignore[import-untyped]

from toggl_cli.core.durations import parse_duration

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".toggl-cli" / "config.yml"


def _section(**properties: dict[str, Any]) -> dict[str, Any]:
    return {"type": "object", "properties": properties}


def _enum(*values: str) -> dict[str, Any]:
    return {"type": "string", "enum": list(values)}


_TEXT = {"type": "string", "minLength": 1}


class ConfigManager:
    """Load, validate and persist the YAML configuration file.

    Keys are addressed in dot notation (``report.daily_limit``). Missing
    keys in the file fall back to :attr:`DEFAULT_CONFIG`.
    """

    DEFAULT_CONFIG = {
        "version": "1.0",
        "general": {
            "api_token": None,
            "default_workspace": None,
            "timezone": "local",
        },
        "entries": {
            "default_duration_unit": "minutes",
            "lunch_break": "1h",
            "billable": True,
        },
        "report": {
            "daily_limit": "10h",
            "break_threshold": "6h",
            "min_break": "30m",
            "weekend": [5, 6],
        },
        "display": {
            "format": "table",
        },
        "advanced": {
            "log_level": "WARNING",
        },
    }

    CONFIG_SCHEMA = {
        "type": "object",
        "required": ["version"],
        "properties": {
            "version": {"type": "string"},
            "general": _section(
                api_token={"type": ["string", "null"]},
                default_workspace={"type": ["string", "integer", "null"]},
                timezone=_TEXT,
            ),
            "entries": _section(
                default_duration_unit=_enum("seconds", "minutes", "hours"),
                lunch_break=_TEXT,
                billable={"type": "boolean"},
            ),
            "report": _section(
                daily_limit=_TEXT,
                break_threshold=_TEXT,
                min_break=_TEXT,
                weekend={
                    "type": "array",
                    "items": {"type": "integer", "minimum": 0, "maximum": 6},
                    "uniqueItems": True,
                },
            ),
            "display": _section(format=_enum("table", "json", "raw")),
            "advanced": _section(log_level=_enum("DEBUG", "INFO", "WARNING", "ERROR")),
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        A missing file is created with the defaults.

        Args:
            config_path: Path to config file. Defaults to ~/.toggl-cli/config.yml

        Raises:
            ValueError: If the existing file is invalid. It is moved aside to
                ``config.yml.backup`` and replaced with the defaults first.
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._config: dict[str, Any] = copy.deepcopy(self.DEFAULT_CONFIG)

        if not self.config_path.exists():
            logger.debug("Creating default configuration at %s", self.config_path)
            self.save()
            return

        with open(self.config_path, encoding="utf-8") as f:
            stored = yaml.safe_load(f) or {}
        _overlay(self._config, stored)

        try:
            self.validate()
        except ValueError as e:
            backup_path = self.config_path.with_suffix(".yml.backup")
            self.config_path.replace(backup_path)
            self.reset()
            raise ValueError(
                f"Config validation failed, backed up to {backup_path}. "
                f"Using defaults. Error: {e}"
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., 'report.daily_limit')
            default: Returned when the key is missing or unset

        Example:
            >>> config.get('report.min_break')
            '30m'
        """
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def duration(self, key: str) -> timedelta:
        """Get a duration setting such as ``report.min_break`` as a timedelta.

        Raises:
            ValueError: If the stored text is not a valid duration
        """
        return parse_duration(str(self.get(key, "")))

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot notation and save it.

        Missing intermediate sections are created.

        Raises:
            ValueError: If configuration is invalid after setting; the
                previous value is kept
        """
        *parents, leaf = key.split(".")
        candidate = copy.deepcopy(self._config)
        node = candidate
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value

        self._check(candidate)
        self._config = candidate
        self.save()

    def validate(self) -> bool:
        """Validate the current configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        self._check(self._config)
        return True

    def _check(self, config: dict[str, Any]) -> None:
        try:
            validate(instance=config, schema=self.CONFIG_SCHEMA)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e.message}")

    def save(self) -> None:
        """Write configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)

    def reset(self) -> None:
        """Reset to default configuration and save it."""
        self._config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.save()

    def to_dict(self) -> dict[str, Any]:
        """Get a copy of the full configuration."""
        return copy.deepcopy(self._config)

    def get_all_keys(self) -> list[str]:
        """Get all leaf keys in dot notation, e.g. ``['version', 'general.api_token', ...]``."""
        return list(_leaf_keys(self._config))

    def timezone(self, override: Optional[str] = None) -> tzinfo:
        """Resolve the reference timezone.

        Args:
            override: Timezone name taking precedence over ``general.timezone``

        Returns:
            The system timezone for ``"local"``, otherwise the named IANA zone

        Raises:
            ValueError: If the timezone name is unknown
        """
        name = override or self.get("general.timezone", "local")
        if name == "local":
            return tzlocal.get_localzone()
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {name}")


def _overlay(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Recursively copy ``override`` onto ``base`` (in place)."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _overlay(base[key], value)
        else:
            base[key] = value


def _leaf_keys(node: dict[str, Any], prefix: str = "") -> Iterator[str]:
    for key, value in node.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from _leaf_keys(value, f"{full_key}.")
        else:
            yield full_key
