from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError

DEFAULT_KNOWN_BINARY = "/usr/bin/php"
DEFAULT_TIMEOUT_SECONDS = 10.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class CheckerConfig:
    php_binary: str | None = None
    known_binary: str = DEFAULT_KNOWN_BINARY
    external_enabled: bool = True
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    temp_dir: Path | None = None
    include: tuple[str, ...] = ("*.php",)


def load_config(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> CheckerConfig:
    """Resolve configuration: defaults, then YAML file, then PHPCHECK_* variables."""
    environ = os.environ if env is None else env
    config = CheckerConfig()

    config_path = path or environ.get("PHPCHECK_CONFIG")
    if config_path:
        config = _apply(config, _read_yaml(Path(config_path)), source=str(config_path))

    overrides: dict[str, Any] = {}
    if environ.get("PHPCHECK_PHP_BINARY"):
        overrides["php_binary"] = environ["PHPCHECK_PHP_BINARY"]
    if environ.get("PHPCHECK_KNOWN_BINARY"):
        overrides["known_binary"] = environ["PHPCHECK_KNOWN_BINARY"]
    if "PHPCHECK_EXTERNAL" in environ:
        overrides["external_enabled"] = environ["PHPCHECK_EXTERNAL"]
    if environ.get("PHPCHECK_TIMEOUT_SECONDS"):
        overrides["timeout_seconds"] = environ["PHPCHECK_TIMEOUT_SECONDS"]
    if environ.get("PHPCHECK_TMPDIR"):
        overrides["temp_dir"] = environ["PHPCHECK_TMPDIR"]
    return _apply(config, overrides, source="environment")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    try:
        payload = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"{path.name} must be a mapping.")
    return payload


def _apply(config: CheckerConfig, values: Mapping[str, Any], source: str) -> CheckerConfig:
    known = {field.name for field in fields(CheckerConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"{source}: unknown config keys {unknown}.")
    parsed: dict[str, Any] = {}
    for key, value in values.items():
        parsed[key] = _coerce(key, value, source)
    return replace(config, **parsed)


def _coerce(key: str, value: Any, source: str) -> Any:
    if key == "external_enabled":
        return _parse_bool(value, key, source)
    if key == "timeout_seconds":
        try:
            timeout = float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{source}: {key} must be a number.") from exc
        if timeout <= 0:
            raise ConfigError(f"{source}: {key} must be > 0.")
        return timeout
    if key == "temp_dir":
        return Path(value) if value else None
    if key == "include":
        if isinstance(value, str):
            return (value,)
        if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
            raise ConfigError(f"{source}: {key} must be a list of glob patterns.")
        return tuple(value)
    if key == "php_binary" and value is None:
        return None
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{source}: {key} must be a non-empty string.")
    return value


def _parse_bool(value: Any, key: str, source: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"{source}: {key} must be a boolean.")
