"""Locate the entry HTML file of a single-page application."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import List, Optional

from ..constants import ANGULAR_ENV_FILES, CSP_DETECTION_PATTERN, HTML_SEARCH_PATHS
from ..logging import get_logger
from ..mode import BuildMode
from ..models import HTMLDetectionResult
from .utils import is_within, list_subdirectories, load_angular_workspace

logger = get_logger("detectors.html")

_WORKSPACE_HTML = re.compile(r"^(.*?)projects/([^/]+)/src/index\.html$")


def has_existing_csp(content: str) -> bool:
    """True when any line carries a Content-Security-Policy meta tag."""
    return CSP_DETECTION_PATTERN.search(content) is not None


def html_search_paths(mode: BuildMode, root: Path) -> List[str]:
    """Ordered candidate paths for ``mode``, relative to ``root``."""
    if not mode.is_production:
        return list(HTML_SEARCH_PATHS["development"])
    return angular_build_paths(root) + list(HTML_SEARCH_PATHS["production"])


def angular_build_paths(root: Path) -> List[str]:
    """``<outputPath>/index.html`` for every project in angular.json."""
    workspace = load_angular_workspace(root)
    if workspace is None:
        return []
    return [
        f"{project.output_path.rstrip('/')}/index.html"
        for project in workspace.projects.values()
        if project.output_path
    ]


def detect_html(
    mode: BuildMode = BuildMode.PRODUCTION, root: Path | str | None = None
) -> Optional[HTMLDetectionResult]:
    """Return the first existing entry HTML for ``mode`` or None."""
    root = Path(root) if root is not None else Path.cwd()
    for candidate in html_search_paths(mode, root):
        result = _find_candidate(root, candidate)
        if result is not None:
            logger.debug("Detected %s HTML at %s", mode.value, result.path)
            return result
    logger.debug("No %s HTML found under %s", mode.value, root)
    return None


def describe_html(path: Path, label: str) -> HTMLDetectionResult:
    """Build a detection result for an existing file."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        content = ""
    build_dir = os.path.dirname(label) or "."
    return HTMLDetectionResult(
        path=path.resolve(),
        build_dir=build_dir,
        has_existing_csp=has_existing_csp(content),
    )


def _find_candidate(root: Path, candidate: str) -> Optional[HTMLDetectionResult]:
    if "*" in candidate:
        return _expand_glob(root, candidate)
    path = root / candidate
    if path.is_file():
        return describe_html(path, candidate)
    return None


def _expand_glob(root: Path, candidate: str) -> Optional[HTMLDetectionResult]:
    before, _, after = candidate.partition("*")
    if not before:
        return None
    search_dir = root / before
    if not search_dir.is_dir():
        return None
    for subdir in list_subdirectories(search_dir):
        path = Path(f"{subdir}{after}")
        try:
            exists = path.is_file()
        except OSError:
            continue
        if exists:
            return describe_html(path, path.relative_to(root).as_posix())
    return None


def detect_workspace_root(project_root: Path, html_path: Path, cwd: Path | None = None) -> Path:
    """Shift the environment root to ``projects/<name>`` for workspace HTML.

    Applies only when ``html_path`` (relative to ``cwd``) has the shape
    ``[...]projects/<name>/src/index.html`` and that project ships its own
    ``src/environments/environment.ts``.
    """
    cwd = cwd or Path.cwd()
    if not is_within(cwd, html_path):
        return project_root
    relative = os.path.relpath(html_path, cwd).replace(os.sep, "/")
    match = _WORKSPACE_HTML.match(relative)
    if not match:
        return project_root

    prefix, name = match.groups()
    candidate = (cwd / prefix / "projects" / name).resolve()
    env_file = candidate / "src" / "environments" / ANGULAR_ENV_FILES["development"]
    if env_file.is_file():
        logger.info("Using workspace project root %s for environment loading", candidate)
        return candidate
    return project_root


__all__ = [
    "angular_build_paths",
    "describe_html",
    "detect_html",
    "detect_workspace_root",
    "has_existing_csp",
    "html_search_paths",
]
