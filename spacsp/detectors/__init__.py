"""Filesystem detectors: project classification and entry HTML lookup."""

from __future__ import annotations

from .html import describe_html, detect_html, detect_workspace_root, has_existing_csp
from .project import classify_project, is_angular_project, is_react_project, is_vite_project

__all__ = [
    "classify_project",
    "describe_html",
    "detect_html",
    "detect_workspace_root",
    "has_existing_csp",
    "is_angular_project",
    "is_react_project",
    "is_vite_project",
]
