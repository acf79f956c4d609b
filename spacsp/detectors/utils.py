"""Shared filesystem probes for project and HTML detection."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..logging import get_logger
from ..models import AngularProject, AngularWorkspace

logger = get_logger("detectors")


def read_json(path: Path) -> Optional[Any]:
    """Return parsed JSON from ``path`` or None when missing or malformed."""
    if not path.is_file():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return None


def load_package_json(root: Path) -> Dict[str, object]:
    """Return the parsed package.json contents or an empty dict."""
    data = read_json(root / "package.json")
    if isinstance(data, dict):
        return data
    return {}


def load_node_dependencies(root: Path) -> Dict[str, str]:
    """Return dependencies and devDependencies merged into one mapping."""
    data = load_package_json(root)
    merged: Dict[str, str] = {}
    for key in ("dependencies", "devDependencies"):
        deps = data.get(key)
        if isinstance(deps, dict):
            merged.update({str(name): str(version) for name, version in deps.items()})
    return merged


def load_angular_workspace(root: Path) -> Optional[AngularWorkspace]:
    """Parse angular.json under ``root``; None when absent or unparseable."""
    path = root / "angular.json"
    data = read_json(path)
    if not isinstance(data, dict):
        return None

    projects: Dict[str, AngularProject] = {}
    raw_projects = data.get("projects")
    if isinstance(raw_projects, dict):
        for name, entry in raw_projects.items():
            if not isinstance(entry, dict):
                continue
            project_root = _as_str(entry.get("root")) or ""
            source_root = _as_str(entry.get("sourceRoot")) or _join(project_root, "src")
            projects[str(name)] = AngularProject(
                name=str(name),
                project_type=_as_str(entry.get("projectType")),
                root=project_root,
                source_root=source_root,
                output_path=_output_path(entry),
            )
    return AngularWorkspace(path=path, projects=projects)


def count_angular_projects(root: Path) -> Optional[int]:
    """Return the number of project entries in angular.json, None when unreadable."""
    data = read_json(root / "angular.json")
    if not isinstance(data, dict):
        return None
    projects = data.get("projects")
    return len(projects) if isinstance(projects, dict) else 0


def list_subdirectories(directory: Path) -> List[Path]:
    """Immediate subdirectories of ``directory`` in ascending name order."""
    try:
        return sorted((item for item in directory.iterdir() if item.is_dir()), key=lambda p: p.name)
    except OSError:
        return []


def is_within(base: Path, target: Path) -> bool:
    """True when ``target`` sits inside ``base`` without parent traversal."""
    relative = os.path.relpath(target, base)
    return not relative.startswith("..") and not os.path.isabs(relative)


def _output_path(entry: Dict[str, Any]) -> Optional[str]:
    architect = entry.get("architect") or entry.get("targets")
    if not isinstance(architect, dict):
        return None
    build = architect.get("build")
    if not isinstance(build, dict):
        return None
    options = build.get("options")
    if not isinstance(options, dict):
        return None
    output = options.get("outputPath")
    if isinstance(output, str) and output:
        return output
    # Application builder form: {"base": "dist/app", "browser": "browser"}
    if isinstance(output, dict):
        base = _as_str(output.get("base"))
        if base:
            browser = output.get("browser", "browser")
            return _join(base, browser) if isinstance(browser, str) else base
    return None


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _join(*parts: str) -> str:
    return "/".join(part.strip("/") for part in parts if part and part.strip("/"))


__all__ = [
    "count_angular_projects",
    "is_within",
    "list_subdirectories",
    "load_angular_workspace",
    "load_node_dependencies",
    "load_package_json",
    "read_json",
]
