"""React and VITE ``.env`` file loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from dotenv import dotenv_values

from ..constants import DOTENV_PREFIXES
from ..logging import get_logger
from ..mode import BuildMode

logger = get_logger("environment.dotenv")


def env_file_names(mode: BuildMode) -> List[str]:
    """Files in ascending precedence; later names override earlier ones."""
    return [".env", f".env.{mode.value}", ".env.local", f".env.{mode.value}.local"]


def parse_env_file(path: Path, prefixes: Sequence[str] = DOTENV_PREFIXES) -> Dict[str, str]:
    """Read ``NAME=VALUE`` entries whose name starts with one of ``prefixes``.

    Surrounding quotes are removed by the dotenv parser; no ``${VAR}``
    interpolation is applied. Unreadable files yield an empty mapping.
    """
    try:
        values = dotenv_values(path, interpolate=False, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read %s: %s", path, exc)
        return {}

    return {
        key: value
        for key, value in values.items()
        if value is not None and key.startswith(tuple(prefixes))
    }


def load_dotenv_env(
    root: Path,
    mode: BuildMode,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Merge REACT_APP_/VITE_ variables from .env files and the process environment."""
    env_vars: Dict[str, str] = {}
    for name in env_file_names(mode):
        path = root / name
        if not path.is_file():
            continue
        parsed = parse_env_file(path)
        logger.debug("Loaded %d variables from %s", len(parsed), path)
        env_vars.update(parsed)

    process_env = os.environ if environ is None else environ
    for key, value in process_env.items():
        if key.startswith(DOTENV_PREFIXES) and value is not None:
            env_vars[key] = value

    return env_vars


__all__ = ["env_file_names", "load_dotenv_env", "parse_env_file"]
