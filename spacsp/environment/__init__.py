"""Framework environment variable loading for React, VITE and Angular projects."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

from ..detectors.project import is_angular_project, is_react_project
from ..logging import get_logger
from ..mode import BuildMode
from ..models import EnvironmentVariables
from .angular import load_angular_env, parse_angular_env_file, parse_angular_env_source
from .dotenv_files import load_dotenv_env, parse_env_file

logger = get_logger("environment")


def load_environment_variables(
    project_root: Path | str | None = None,
    target_html: Path | str | None = None,
    *,
    mode: Optional[BuildMode] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EnvironmentVariables:
    """Load and merge framework variables for ``project_root``.

    ``mode`` selects development or production files; when omitted it is read
    from NODE_ENV, and anything but ``production`` selects development
    files. ``environ`` is only read, never modified.
    """
    root = Path(project_root) if project_root is not None else Path.cwd()
    mode = mode or BuildMode.from_environment(environ)
    html = Path(target_html) if target_html is not None else None

    if is_angular_project(root):
        source = "angular"
        env_vars = load_angular_env(root, mode, html)
    elif is_react_project(root):
        source = "dotenv"
        env_vars = load_dotenv_env(root, mode, environ)
    else:
        source = "mixed"
        env_vars = load_dotenv_env(root, mode, environ)
        env_vars.update(load_angular_env(root, mode, html))

    result = EnvironmentVariables(env_vars)
    logger.debug(
        "Loaded %d %s variables from %s (%s)", len(result), mode.value, root, source
    )
    return result


__all__ = [
    "load_angular_env",
    "load_dotenv_env",
    "load_environment_variables",
    "parse_angular_env_file",
    "parse_angular_env_source",
    "parse_env_file",
]
