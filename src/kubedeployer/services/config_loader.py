"""Typed configuration for kubedeployer.

Values come from a YAML file and from CLI overrides. Both are checked
against the field types of :class:`DeploymentSettings` (plus the keys only
the CLI consumes) before any deployment step runs, so a bad value fails the
run up front instead of after the image has been pushed.
"""

from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from kubedeployer.errors import ConfigError
from kubedeployer.models import DeploymentSettings

SETTING_TYPES: Dict[str, type] = {
    f.name: f.type for f in fields(DeploymentSettings) if f.type in (str, int, float)
}

CLI_TYPES: Dict[str, type] = {
    "environment": str,
    "version": str,
    "slack_webhook": str,
    "verbose": bool,
    "log_file": str,
    "dry_run": bool,
    "report_file": str,
}

_TYPE_LABELS = {str: "a string", int: "an integer", float: "a number", bool: "true or false"}


class ConfigLoader:
    """Loads and type-checks deployment configuration."""

    KEY_TYPES: Dict[str, type] = {**SETTING_TYPES, **CLI_TYPES}

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ConfigError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ConfigError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(str(key) for key in parsed if key not in self.KEY_TYPES)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        return self.coerce(parsed)

    def coerce(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Converts each value to its key's type; ``None`` values are dropped."""
        return {
            key: self._coerce_value(key, value, self.KEY_TYPES[key])
            for key, value in values.items()
            if value is not None
        }

    def build_settings(
        self,
        config_values: Mapping[str, Any],
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> DeploymentSettings:
        """Merges CLI overrides over config values into ``DeploymentSettings``."""
        merged = {key: value for key, value in config_values.items() if key in SETTING_TYPES}
        for key, value in (overrides or {}).items():
            if value is not None:
                merged[key] = value
        return DeploymentSettings(**self.coerce(merged))

    def _coerce_value(self, key: str, value: Any, expected: type) -> Any:
        label = _TYPE_LABELS[expected]

        if expected is bool:
            if isinstance(value, bool):
                return value
            raise ConfigError(f"Configuration key '{key}' must be {label}, got {value!r}.")

        if isinstance(value, (dict, list, bool)):
            raise ConfigError(f"Configuration key '{key}' must be {label}, got {value!r}.")

        if expected is str:
            return str(value)

        if expected is int and isinstance(value, float) and not value.is_integer():
            raise ConfigError(f"Configuration key '{key}' must be {label}, got {value!r}.")

        try:
            coerced = expected(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(
                f"Configuration key '{key}' must be {label}, got {value!r}."
            ) from exc

        if coerced < 0:
            raise ConfigError(f"Configuration key '{key}' must not be negative, got {value!r}.")
        return coerced
