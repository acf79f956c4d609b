"""CSP configuration loading (csp.config.json and friends)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import yaml

from .constants import (
    CONFIG_FILE_NAMES,
    DEVELOPMENT_DEFAULTS,
    ENHANCED_DIRECTIVES,
    PRODUCTION_DEFAULTS,
    UNSAFE_CONFIG_KEYS,
)
from .logging import get_logger
from .mode import BuildMode
from .models import CSPConfig, ConfigLoadResult, ConfigSource, EnvironmentVariables
from .templates import placeholder, resolve_template

logger = get_logger("config")


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be parsed or written."""


@dataclass(frozen=True)
class DefaultConfigs:
    """Built-in development and production base configurations."""

    development: Mapping[str, Any] = field(default_factory=lambda: DEVELOPMENT_DEFAULTS)
    production: Mapping[str, Any] = field(default_factory=lambda: PRODUCTION_DEFAULTS)

    def for_mode(self, mode: BuildMode) -> CSPConfig:
        data = self.production if mode.is_production else self.development
        return CSPConfig.from_mapping(data)


BUILTIN_DEFAULTS = DefaultConfigs()


def default_config(mode: BuildMode, defaults: DefaultConfigs = BUILTIN_DEFAULTS) -> CSPConfig:
    """Fresh copy of the built-in configuration for ``mode``."""
    return defaults.for_mode(mode)


def load_config(
    mode: BuildMode,
    config_path: Path | str | None = None,
    env_vars: Optional[Mapping[str, str]] = None,
    *,
    search_dir: Path | str | None = None,
    defaults: DefaultConfigs = BUILTIN_DEFAULTS,
) -> ConfigLoadResult:
    """Resolve the effective CSP configuration.

    Order: a readable config file (explicit, else discovered in
    ``search_dir``), then defaults enhanced with framework variable
    placeholders, then the plain built-in defaults for ``mode``.
    """
    variables = env_vars if isinstance(env_vars, EnvironmentVariables) else EnvironmentVariables(env_vars)
    search_root = Path(search_dir) if search_dir is not None else Path.cwd()

    found = _read_config_file(config_path, search_root)
    if found is not None:
        path, text = found
        try:
            user_config = parse_config_text(resolve_template(text, variables), path)
        except ConfigError as exc:
            logger.warning("Invalid config file %s, using defaults: %s", path, exc)
        else:
            logger.info("Loaded CSP configuration from %s", path)
            return ConfigLoadResult(
                config=defaults.for_mode(mode).merged(user_config),
                source=ConfigSource.FILE,
                path=path,
            )

    framework_keys = variables.framework_keys()
    if framework_keys:
        return ConfigLoadResult(
            config=enhance_config(defaults.for_mode(mode), framework_keys),
            source=ConfigSource.ENHANCED_DEFAULTS,
        )

    return ConfigLoadResult(config=defaults.for_mode(mode), source=ConfigSource.DEFAULTS)


def merge_with_defaults(
    overrides: Mapping[str, Any] | CSPConfig,
    mode: BuildMode,
    defaults: DefaultConfigs = BUILTIN_DEFAULTS,
) -> CSPConfig:
    """Merge caller-supplied overrides over the built-in base for ``mode``."""
    return defaults.for_mode(mode).merged(overrides)


def enhance_config(config: CSPConfig, variable_names: Iterable[str]) -> CSPConfig:
    """Append ``{{NAME}}`` for every variable to script-src, connect-src and img-src."""
    placeholders = [placeholder(name) for name in variable_names]
    directives = {name: list(values) for name, values in config.directives.items()}
    for directive in ENHANCED_DIRECTIVES:
        if directive in directives:
            directives[directive] = directives[directive] + placeholders
    return config.merged({"directives": directives})


def find_config_file(search_dir: Path) -> Optional[Path]:
    """First conventional config file present in ``search_dir``."""
    for name in CONFIG_FILE_NAMES:
        candidate = search_dir / name
        if candidate.is_file():
            return candidate
    return None


def parse_config_text(text: str, path: Path) -> Dict[str, Any]:
    """Parse JSON (or YAML for .yml/.yaml) and strip unsafe keys."""
    if not text.strip():
        raise ConfigError(f"{path.name} is empty")
    try:
        if path.suffix.lower() in {".yml", ".yaml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc

    data = strip_unsafe_keys(data)
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain an object at the root")
    return data


def strip_unsafe_keys(value: Any) -> Any:
    """Recursively drop __proto__/constructor/prototype keys."""
    if isinstance(value, dict):
        return {
            key: strip_unsafe_keys(item)
            for key, item in value.items()
            if key not in UNSAFE_CONFIG_KEYS
        }
    if isinstance(value, list):
        return [strip_unsafe_keys(item) for item in value]
    return value


def _read_config_file(
    config_path: Path | str | None, search_dir: Path
) -> Optional[Tuple[Path, str]]:
    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            logger.warning("Config file %s not found, using defaults", path)
            return None
    else:
        path = find_config_file(search_dir)
        if path is None:
            return None

    try:
        return path, path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read config file %s, using defaults: %s", path, exc)
        return None


__all__ = [
    "BUILTIN_DEFAULTS",
    "ConfigError",
    "DefaultConfigs",
    "default_config",
    "enhance_config",
    "find_config_file",
    "load_config",
    "merge_with_defaults",
    "parse_config_text",
    "strip_unsafe_keys",
]
