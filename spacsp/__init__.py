"""Content-Security-Policy injection for React, VITE and Angular single-page apps."""

from __future__ import annotations

__version__ = "1.0.1"

from .config import ConfigError, load_config
from .detectors import classify_project, detect_html
from .environment import load_environment_variables
from .injector import CSPInjector, InjectionError, build_csp, generate_nonce
from .mode import BuildMode
from .models import (
    CSPConfig,
    CSPInjectionResult,
    EnvironmentVariables,
    HTMLDetectionResult,
    InjectOptions,
    ProjectType,
)
from .orchestrator import HTMLNotFoundError, Orchestrator, inject, preview
from .templates import resolve_template

__all__ = [
    "BuildMode",
    "CSPConfig",
    "CSPInjectionResult",
    "CSPInjector",
    "ConfigError",
    "EnvironmentVariables",
    "HTMLDetectionResult",
    "HTMLNotFoundError",
    "InjectOptions",
    "InjectionError",
    "Orchestrator",
    "ProjectType",
    "__version__",
    "build_csp",
    "classify_project",
    "detect_html",
    "generate_nonce",
    "inject",
    "load_config",
    "load_environment_variables",
    "preview",
    "resolve_template",
]
