"""Project type classification from filesystem evidence."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..constants import ANGULAR_CONFIG_FILES, VITE_CONFIG_FILES
from ..logging import get_logger
from ..models import ProjectType
from .utils import count_angular_projects, load_node_dependencies

logger = get_logger("detectors.project")

_REACT_PACKAGES = ("react", "@types/react")


def is_vite_project(root: Path) -> bool:
    return any((root / name).is_file() for name in VITE_CONFIG_FILES)


def has_angular_layout(root: Path) -> bool:
    """Angular-shaped directories without a workspace descriptor."""
    return (root / "src" / "environments").exists() or (root / "projects").exists()


def is_angular_project(root: Path) -> bool:
    """True for angular.json/.angular-cli.json or an Angular-shaped tree."""
    if any((root / name).exists() for name in ANGULAR_CONFIG_FILES):
        logger.debug("Found Angular config file in %s", root)
        return True
    if has_angular_layout(root):
        logger.debug("Found Angular environment directories in %s", root)
        return True
    return False


def is_react_project(root: Path) -> bool:
    """True when package.json lists react or @types/react."""
    deps = load_node_dependencies(root)
    return any(name in deps for name in _REACT_PACKAGES)


def detect_angular_type(root: Path) -> Optional[ProjectType]:
    """Classify by angular.json; an unreadable file still means standalone."""
    if not (root / "angular.json").exists():
        return None
    count = count_angular_projects(root)
    if count is not None and count > 1:
        return ProjectType.ANGULAR_WORKSPACE
    return ProjectType.ANGULAR_STANDALONE


def classify_project(root: Path | str | None = None) -> ProjectType:
    """Determine the project type of ``root`` (defaults to the working directory)."""
    root = Path(root) if root is not None else Path.cwd()
    logger.debug("Classifying project in %s", root)

    if is_vite_project(root):
        project_type = ProjectType.REACT_VITE
    else:
        project_type = detect_angular_type(root) or _fallback_type(root)

    logger.debug("Project type for %s: %s", root, project_type.value)
    return project_type


def _fallback_type(root: Path) -> ProjectType:
    if is_angular_project(root):
        return ProjectType.ANGULAR_STANDALONE
    if is_react_project(root):
        return ProjectType.REACT_CRA
    return ProjectType.UNKNOWN


__all__ = [
    "classify_project",
    "detect_angular_type",
    "has_angular_layout",
    "is_angular_project",
    "is_react_project",
    "is_vite_project",
]
