"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups. It can also be read from the environment or a
JSON file::

    config = AppConfig.from_env()              # PERCH_PORT=8080 ...
    config = AppConfig.load("config.json")     # {"port": 8080, "readTimeout": 5}
"""

import json
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from perch.errors import ConfigurationError
from perch.faults.kinds import Kind

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=8080, shutdown_timeout=10.0)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    workers: int = 1

    # Timeouts, in seconds
    read_timeout: float = 5.0
    write_timeout: float = 5.0
    shutdown_timeout: float = 30.0

    # Logging
    log_level: str = "info"
    log_format: str = "text"
    access_log: bool = True

    # Kind given to errors wrapped without a classification
    default_fault_kind: Kind = Kind.INTERNAL

    def validate(self) -> "AppConfig":
        """Check field values. Returns ``self`` so calls can be chained.

        Raises:
            ConfigurationError: If the port is outside 1..65535 or a
                timeout is negative.
        """
        if not 0 < self.port <= 65535:
            msg = f"Invalid port {self.port}: must be between 1 and 65535."
            raise ConfigurationError(msg)
        for name in ("read_timeout", "write_timeout", "shutdown_timeout"):
            if getattr(self, name) < 0:
                msg = f"Invalid {name} {getattr(self, name)}: must not be negative."
                raise ConfigurationError(msg)
        return self

    @classmethod
    def from_env(
        cls,
        prefix: str = "PERCH_",
        environ: Mapping[str, str] | None = None,
    ) -> "AppConfig":
        """Build a config from ``{prefix}{FIELD}`` environment variables.

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(f"{prefix}{f.name.upper()}")
            if raw is not None:
                values[f.name] = _coerce(f.name, f.type, raw.strip())
        return cls(**values).validate()

    @classmethod
    def load(cls, path: str | Path) -> "AppConfig":
        """Read a JSON config file and validate it.

        Keys may be field names or their camelCase form (``readTimeout``).

        Raises:
            ConfigurationError: If the file cannot be read or parsed, has
                unknown keys, or fails ``validate()``.
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            msg = f"Cannot load config from {str(path)!r}: {exc}"
            raise ConfigurationError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Config file {str(path)!r} must contain a JSON object."
            raise ConfigurationError(msg)
        return cls().merge(data)

    def merge(self, data: Mapping[str, Any]) -> "AppConfig":
        """Copy of this config with *data* applied, validated."""
        types = {f.name: f.type for f in fields(self)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _snake(key)
            if name not in types:
                msg = f"Unknown config key {key!r}."
                raise ConfigurationError(msg)
            values[name] = _coerce(name, types[name], value)
        return replace(self, **values).validate()


def _snake(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _coerce(name: str, type_: Any, value: Any) -> Any:
    try:
        if type_ is bool:
            if isinstance(value, bool):
                return value
            text = str(value).lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise ValueError(value)
        if type_ is int:
            return int(value)
        if type_ is float:
            return float(value)
        if type_ is Kind:
            if isinstance(value, str) and not value.isdigit():
                return Kind[value.upper()]
            return Kind(int(value))
        return str(value)
    except (KeyError, TypeError, ValueError) as exc:
        msg = f"Invalid value for {name}: {value!r}"
        raise ConfigurationError(msg) from exc
