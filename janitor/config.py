"""Janitor configuration.

Configuration lives in a YAML file (``$JANITOR_CONFIG`` or
``~/.janitor/config.yaml``). Nested mappings are flattened into dotted keys, so

    janitor:
      leashed: false
      summaryEmail:
        to: ops@example.com

yields ``janitor.leashed`` and ``janitor.summaryEmail.to``. Environment
variables prefixed with ``JANITOR_CFG_`` override file values, with ``__``
standing for a dot (``JANITOR_CFG_janitor__leashed=false``).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

NS = "janitor."
ENV_PREFIX = "JANITOR_CFG_"
DEFAULT_CONFIG_PATH = Path.home() / ".janitor" / "config.yaml"

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, f"{full_key}."))
        else:
            flat[full_key] = value
    return flat


class JanitorConfig:
    """Reloadable key/value configuration.

    Attributes:
        path: Configuration file path (None for environment/overrides only)
    """

    def __init__(self, path: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None) -> None:
        """Initialize configuration and load it.

        Args:
            path: YAML file to read (default: $JANITOR_CONFIG or ~/.janitor/config.yaml)
            overrides: Values that take precedence over the file and environment
        """
        if path is None:
            path = os.environ.get("JANITOR_CONFIG", str(DEFAULT_CONFIG_PATH))
        self.path = Path(path) if path else None
        self._overrides: Dict[str, Any] = dict(overrides or {})
        self._values: Dict[str, Any] = {}
        self.reload()

    @classmethod
    def load(cls, path: Optional[str] = None) -> JanitorConfig:
        """Load configuration from the default or given location."""
        return cls(path=path)

    def reload(self) -> None:
        """Re-read the configuration file and environment overrides.

        Raises:
            ConfigurationError: If the file is not valid YAML or not a mapping
        """
        values: Dict[str, Any] = {}

        if self.path is not None and self.path.exists():
            try:
                with open(self.path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid configuration file {self.path}: {e}") from e
            if not isinstance(data, Mapping):
                raise ConfigurationError(f"Configuration file {self.path} must contain a mapping")
            values.update(_flatten(data))
            logger.debug(f"Loaded {len(values)} configuration values from {self.path}")

        for name, value in os.environ.items():
            if name.startswith(ENV_PREFIX):
                values[name[len(ENV_PREFIX):].replace("__", ".")] = value

        values.update(self._overrides)
        self._values = values

    def set(self, key: str, value: Any) -> None:
        """Set an override that survives reloads."""
        self._overrides[key] = value
        self._values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def get_bool_or_else(self, key: str, default: bool) -> bool:
        """Get a boolean value.

        Raises:
            ConfigurationError: If the value cannot be read as a boolean
        """
        value = self._values.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ConfigurationError(f"Invalid boolean for {key}: {value!r}")

    def get_str(self, key: str) -> str:
        """Get a string value, empty string when missing."""
        value = self._values.get(key)
        return "" if value is None else str(value)

    def get_str_or_else(self, key: str, default: str) -> str:
        return self.get_str(key) or default

    def get_int_or_else(self, key: str, default: int) -> int:
        """Get an integer value.

        Raises:
            ConfigurationError: If the value is not an integer
        """
        value = self._values.get(key)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid integer for {key}: {value!r}")

    def get_list(self, key: str) -> List[str]:
        """Get a list value; comma-separated strings are split."""
        value = self._values.get(key)
        if value is None or value == "":
            return []
        if isinstance(value, (list, tuple)):
            return [str(v).strip() for v in value]
        return [part.strip() for part in str(value).split(",") if part.strip()]
