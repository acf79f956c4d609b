"""End-to-end CSP injection: locate HTML, load variables and config, write the tag."""

from __future__ import annotations

import os
from pathlib import Path
from typing import MutableMapping, Optional, Tuple

from .config import load_config, merge_with_defaults
from .detectors.html import describe_html, detect_html, detect_workspace_root
from .environment import load_environment_variables
from .injector import CSPInjector, build_csp
from .logging import get_logger
from .mode import BuildMode, forced_node_env
from .models import (
    ConfigLoadResult,
    ConfigSource,
    CSPInjectionResult,
    EnvironmentVariables,
    HTMLDetectionResult,
    InjectionPreview,
    InjectOptions,
)
from .templates import find_placeholders

logger = get_logger("orchestrator")

_NONCE_NAMES = ("nonce", "CSP_NONCE")


class HTMLNotFoundError(FileNotFoundError):
    """No entry HTML: the explicit path is missing or detection found nothing."""

    def __init__(self, message: str, mode: BuildMode, html_path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.mode = mode
        self.html_path = html_path


class Orchestrator:
    """Coordinates one injection run.

    ``cwd`` and ``environ`` default to the process working directory and
    ``os.environ``; NODE_ENV in ``environ`` is read once to pick the build
    mode and is forced to that mode while variables and config are loaded.
    """

    def __init__(
        self,
        cwd: Path | str | None = None,
        environ: Optional[MutableMapping[str, str]] = None,
    ) -> None:
        self.cwd = Path(cwd).resolve() if cwd is not None else Path.cwd().resolve()
        self.environ = os.environ if environ is None else environ

    def resolve_mode(self, options: InjectOptions) -> BuildMode:
        return BuildMode.resolve(options.dev_mode, self.environ)

    def inject(self, options: InjectOptions | None = None) -> CSPInjectionResult:
        """Inject a freshly built CSP meta tag into the target HTML file."""
        options = options or InjectOptions()
        mode = self.resolve_mode(options)
        html, project_root = self._resolve_target(options, mode)
        logger.info("Injecting %s CSP into %s", mode.value, html.path)

        with forced_node_env(mode, self.environ):
            env_vars = self._load_env(options, project_root, html.path, mode)
            loaded = self._load_config(options, mode, env_vars)
            injector = CSPInjector(loaded.config, env_vars)
            result = injector.inject_csp(html.path)
        _warn_unresolved(result.csp_string)
        return result

    def preview(self, options: InjectOptions | None = None) -> InjectionPreview:
        """Resolve everything ``inject`` would use without writing the file."""
        options = options or InjectOptions()
        mode = self.resolve_mode(options)
        html, project_root = self._resolve_target(options, mode)

        with forced_node_env(mode, self.environ):
            env_vars = self._load_env(options, project_root, html.path, mode)
            loaded = self._load_config(options, mode, env_vars)

        csp_string = build_csp(loaded.config, env_vars)
        _warn_unresolved(csp_string)
        return InjectionPreview(
            html=html,
            project_root=project_root,
            mode=mode,
            env_vars=env_vars,
            config=loaded,
            csp_string=csp_string,
        )

    def _resolve_target(
        self, options: InjectOptions, mode: BuildMode
    ) -> Tuple[HTMLDetectionResult, Path]:
        config_path = self._absolute(options.config_path)
        project_root = config_path.parent if config_path is not None else self.cwd

        if options.html_path is not None:
            html_path = self._absolute(options.html_path)
            if not html_path.is_file():
                raise HTMLNotFoundError(f"HTML file not found: {html_path}", mode, html_path)
            html = describe_html(html_path, os.path.relpath(html_path, self.cwd))
        else:
            detected = detect_html(mode, self.cwd)
            if detected is None:
                raise HTMLNotFoundError(
                    f"Could not find an index.html for a {mode.value} build under {self.cwd}",
                    mode,
                )
            html = detected

        if config_path is None:
            project_root = detect_workspace_root(project_root, html.path, self.cwd)
        return html, project_root

    def _load_env(
        self, options: InjectOptions, project_root: Path, html_path: Path, mode: BuildMode
    ) -> EnvironmentVariables:
        if options.env_vars is not None:
            return EnvironmentVariables(options.env_vars)
        return load_environment_variables(
            project_root, html_path, mode=mode, environ=self.environ
        )

    def _load_config(
        self, options: InjectOptions, mode: BuildMode, env_vars: EnvironmentVariables
    ) -> ConfigLoadResult:
        if options.config is not None:
            return ConfigLoadResult(
                config=merge_with_defaults(options.config, mode),
                source=ConfigSource.OVERRIDE,
            )
        return load_config(
            mode,
            self._absolute(options.config_path),
            env_vars,
            search_dir=self.cwd,
        )

    def _absolute(self, path: Path | str | None) -> Optional[Path]:
        if path is None:
            return None
        path = Path(path)
        return path if path.is_absolute() else self.cwd / path


def _warn_unresolved(csp: str) -> None:
    names = [name for name in find_placeholders(csp) if name not in _NONCE_NAMES]
    if names:
        logger.warning("Unresolved placeholders left in the policy: %s", ", ".join(names))


def inject(
    options: InjectOptions | None = None,
    *,
    cwd: Path | str | None = None,
    environ: Optional[MutableMapping[str, str]] = None,
) -> CSPInjectionResult:
    return Orchestrator(cwd=cwd, environ=environ).inject(options)


def preview(
    options: InjectOptions | None = None,
    *,
    cwd: Path | str | None = None,
    environ: Optional[MutableMapping[str, str]] = None,
) -> InjectionPreview:
    return Orchestrator(cwd=cwd, environ=environ).preview(options)


__all__ = ["HTMLNotFoundError", "Orchestrator", "inject", "preview"]
