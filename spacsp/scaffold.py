"""Starter ``csp.config.json`` generation for ``spacsp init``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .config import ConfigError
from .constants import (
    ANGULAR_PREFIX,
    BLOB,
    CONNECT_SRC,
    DATA,
    DEFAULT_SRC,
    FONT_SRC,
    IMG_SRC,
    MANIFEST_SRC,
    NONCE_PLACEHOLDER,
    REACT_PREFIX,
    SCRIPT_SRC,
    SELF,
    STYLE_SRC,
    UNSAFE_INLINE,
    VITE_PREFIX,
    WORKER_SRC,
    WS,
    WSS,
)
from .logging import get_logger
from .templates import placeholder

logger = get_logger("scaffold")

FRAMEWORKS = ("react", "vite", "angular", "generic")
CONFIG_TYPES = ("development", "production", "custom")

FRAMEWORK_ENV_PREFIXES = {
    "react": REACT_PREFIX,
    "vite": VITE_PREFIX,
    "angular": ANGULAR_PREFIX,
}


def framework_directives(framework: str, config_type: str) -> Dict[str, List[str]]:
    """Common directives plus the framework-specific ones; unknown frameworks get ``generic``."""
    script_src = [SELF, UNSAFE_INLINE] if config_type == "development" else [SELF]
    specific: Dict[str, Dict[str, List[str]]] = {
        "react": {SCRIPT_SRC: script_src, CONNECT_SRC: [SELF]},
        "vite": {
            SCRIPT_SRC: script_src,
            CONNECT_SRC: [SELF, WS, WSS],
            WORKER_SRC: [SELF, BLOB],
        },
        "angular": {
            SCRIPT_SRC: script_src,
            CONNECT_SRC: [SELF],
            WORKER_SRC: [SELF, BLOB],
            MANIFEST_SRC: [SELF],
        },
        "generic": {SCRIPT_SRC: [SELF, UNSAFE_INLINE], CONNECT_SRC: [SELF]},
    }
    directives: Dict[str, List[str]] = {
        DEFAULT_SRC: [SELF],
        IMG_SRC: [SELF, DATA, BLOB],
        FONT_SRC: [SELF, DATA],
        STYLE_SRC: [SELF, UNSAFE_INLINE],
    }
    for name, values in specific.get(framework, specific["generic"]).items():
        directives[name] = list(values)
    return directives


def add_env_templates(directives: Dict[str, List[str]], framework: str) -> None:
    """Append ``{{<PREFIX>API_URL}}`` / ``{{<PREFIX>CDN_URL}}`` templates in place."""
    prefix = FRAMEWORK_ENV_PREFIXES.get(framework)
    if not prefix:
        return
    templates = {
        SCRIPT_SRC: placeholder(f"{prefix}API_URL"),
        CONNECT_SRC: placeholder(f"{prefix}API_URL"),
        IMG_SRC: placeholder(f"{prefix}CDN_URL"),
    }
    for name, template in templates.items():
        if name in directives:
            directives[name].append(template)


def build_starter_config(
    framework: str = "generic",
    config_type: str = "development",
    use_nonce: bool = False,
    report_only: bool = False,
    include_env_vars: bool = False,
) -> Dict[str, Any]:
    """JSON-ready starter configuration for the given choices."""
    directives = framework_directives(framework, config_type)
    if include_env_vars:
        add_env_templates(directives, framework)
    directives = {
        name: [value for value in values if value.strip()]
        for name, values in directives.items()
    }
    if use_nonce:
        for name in (SCRIPT_SRC, STYLE_SRC):
            if name in directives:
                directives[name].append(NONCE_PLACEHOLDER)
    return {"directives": directives, "useNonce": use_nonce, "reportOnly": report_only}


def build_default_config() -> Dict[str, Any]:
    """Configuration written by a plain ``spacsp init``."""
    return {
        "directives": {
            DEFAULT_SRC: [SELF],
            SCRIPT_SRC: [SELF, UNSAFE_INLINE],
            STYLE_SRC: [SELF, UNSAFE_INLINE],
            IMG_SRC: [SELF, DATA, BLOB],
            FONT_SRC: [SELF, DATA],
            CONNECT_SRC: [SELF],
            WORKER_SRC: [SELF, BLOB],
            MANIFEST_SRC: [SELF],
        },
        "useNonce": False,
        "reportOnly": False,
    }


def write_starter_config(
    path: Path | str, data: Mapping[str, Any], overwrite: bool = False
) -> bool:
    """Write ``data`` as indented JSON; returns False when ``path`` exists and is kept."""
    path = Path(path)
    if path.exists() and not overwrite:
        logger.info("Config file %s already exists, leaving it untouched", path)
        return False
    try:
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to create config file {path}: {exc}") from exc
    logger.debug("Wrote starter config to %s", path)
    return True


__all__ = [
    "CONFIG_TYPES",
    "FRAMEWORKS",
    "add_env_templates",
    "build_default_config",
    "build_starter_config",
    "framework_directives",
    "write_starter_config",
]
