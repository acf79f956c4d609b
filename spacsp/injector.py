"""CSP string construction and meta tag injection."""

from __future__ import annotations

import base64
import secrets
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

from .constants import (
    CSP_HEADER,
    CSP_REPORT_ONLY_HEADER,
    CSP_TAG_PATTERN,
    DEFAULT_NONCE_LENGTH,
    HEAD_TAG_PATTERN,
    NONCE_PLACEHOLDER,
    NONCE_TOKEN,
)
from .logging import get_logger
from .models import CSPConfig, CSPInjectionResult, EnvironmentVariables
from .templates import resolve_template

logger = get_logger("injector")


class InjectionError(RuntimeError):
    """Raised when the target HTML cannot be read or written."""


def generate_nonce(length: int = DEFAULT_NONCE_LENGTH) -> str:
    """Base64 encoding of ``length`` cryptographically random bytes."""
    return base64.b64encode(secrets.token_bytes(length)).decode("ascii")


def resolve_csp_value(value: str, env_vars: Mapping[str, str], nonce: Optional[str] = None) -> str:
    if nonce:
        value = value.replace(NONCE_PLACEHOLDER, f"'nonce-{nonce}'").replace(NONCE_TOKEN, nonce)
    return resolve_template(value, env_vars)


def build_csp(
    config: CSPConfig, env_vars: Mapping[str, str] | None = None, nonce: Optional[str] = None
) -> str:
    """Render ``directive value value; directive value`` in configuration order.

    Values that resolve to empty or whitespace-only strings are dropped. A
    directive left with no values is emitted as its bare name.
    """
    variables = env_vars or {}
    parts: List[str] = []
    for directive, values in config.directives.items():
        resolved = [resolve_csp_value(value, variables, nonce) for value in values]
        kept = [value for value in resolved if value and value.strip()]
        parts.append(" ".join([directive, *kept]))
    return "; ".join(parts)


def build_meta_tag(csp: str, report_only: bool = False) -> str:
    header = CSP_REPORT_ONLY_HEADER if report_only else CSP_HEADER
    content = csp.replace("&", "&amp;").replace('"', "&quot;")
    return f'<meta http-equiv="{header}" content="{content}">'


def rewrite_html(html: str, csp: str, report_only: bool = False) -> Tuple[str, int]:
    """Replace every CSP meta tag in ``html`` with a single fresh one.

    The new tag goes right after the opening ``<head>`` tag, or at the very
    start of the document when there is none. Returns the new document and
    the number of tags removed.
    """
    stripped, removed = CSP_TAG_PATTERN.subn("", html)
    meta_tag = build_meta_tag(csp, report_only)

    head = HEAD_TAG_PATTERN.search(stripped)
    if head is None:
        return f"{meta_tag}\n{stripped}", removed
    return f"{stripped[:head.end()]}\n{meta_tag}{stripped[head.end():]}", removed


class CSPInjector:
    """Builds a policy from a config and environment, then writes it into HTML."""

    def __init__(
        self,
        config: CSPConfig | Mapping[str, Any] | None = None,
        env_vars: Mapping[str, str] | None = None,
    ) -> None:
        if config is None:
            config = CSPConfig()
        elif not isinstance(config, CSPConfig):
            config = CSPConfig.from_mapping(config)
        self.config = config
        self.env_vars = (
            env_vars if isinstance(env_vars, EnvironmentVariables) else EnvironmentVariables(env_vars)
        )

    def build_csp(self, nonce: Optional[str] = None) -> str:
        return build_csp(self.config, self.env_vars, nonce)

    def generate_nonce(self) -> str:
        return generate_nonce(self.config.nonce_length)

    def inject_csp(self, html_path: Path | str, csp_string: Optional[str] = None) -> CSPInjectionResult:
        """Rewrite the CSP meta tag of ``html_path`` in place."""
        path = Path(html_path)
        try:
            with path.open(encoding="utf-8", newline="") as handle:
                html = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise InjectionError(f"Failed to inject CSP: cannot read {path}: {exc}") from exc

        nonce: Optional[str] = None
        if csp_string is None:
            nonce = self.generate_nonce() if self.config.use_nonce else None
            csp_string = self.build_csp(nonce)

        modified, replaced = rewrite_html(html, csp_string, self.config.report_only)

        try:
            with path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(modified)
        except OSError as exc:
            raise InjectionError(f"Failed to inject CSP: cannot write {path}: {exc}") from exc

        logger.info("Injected CSP into %s (replaced %d existing tag(s))", path, replaced)
        return CSPInjectionResult(
            html_path=path,
            csp_string=csp_string,
            replaced_tags=replaced,
            nonce=nonce,
            env_vars=self.env_vars,
        )


__all__ = [
    "CSPInjector",
    "InjectionError",
    "build_csp",
    "build_meta_tag",
    "generate_nonce",
    "resolve_csp_value",
    "rewrite_html",
]
