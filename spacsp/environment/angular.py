"""Angular ``environment*.ts`` loading.

Only a narrow, config-like shape is understood: a single
``export const environment = { ... }`` object literal whose top-level
properties are quoted strings or booleans. Booleans are discarded; nested
objects, arrays, numbers and expressions are skipped rather than guessed at.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional

from ..constants import ANGULAR_ENV_FILES, ANGULAR_PREFIX
from ..detectors.utils import is_within, load_angular_workspace
from ..logging import get_logger
from ..mode import BuildMode
from ..models import AngularWorkspace, is_valid_env_value

logger = get_logger("environment.angular")

_EXPORT = re.compile(r"export\s+const\s+environment\s*(?::\s*[\w.<>\[\]|\s]+?)?\s*=\s*\{")
_PROPERTY = re.compile(r"^\s*(?:(['\"])(\w+)\1|(\w+))\s*:\s*(.*?)\s*$", re.DOTALL)
_STRING = re.compile(r"^(['\"`])(.*)\1$", re.DOTALL)
_UPPER_KEY = re.compile(r"^[A-Z0-9_]+$")
_OPENERS = "{[("
_CLOSERS = "}])"


def angular_env_file(mode: BuildMode) -> str:
    return ANGULAR_ENV_FILES[mode.value]


def env_key_for(name: str) -> str:
    """``apiUrl`` -> ``NG_API_URL``; all-caps names keep their spelling."""
    if _UPPER_KEY.match(name):
        return f"{ANGULAR_PREFIX}{name}"
    converted = re.sub(r"([A-Z])", r"_\1", name).upper()
    return f"{ANGULAR_PREFIX}{converted.removeprefix('_')}"


def parse_angular_env_source(source: str) -> Dict[str, str]:
    """Extract string properties from the exported environment object."""
    source = _strip_comments(source)
    match = _EXPORT.search(source)
    if match is None:
        return {}
    body = _object_body(source, match.end())
    if body is None:
        return {}

    env_vars: Dict[str, str] = {}
    for entry in _split_top_level(body):
        prop = _PROPERTY.match(entry)
        if prop is None:
            continue
        name = prop.group(2) or prop.group(3)
        raw_value = prop.group(4)
        value = _string_value(raw_value)
        if value is None:
            if raw_value not in {"true", "false"}:
                logger.debug("Skipping non-string environment property %s", name)
            continue
        if is_valid_env_value(value):
            env_vars[env_key_for(name)] = value
    return env_vars


def parse_angular_env_file(path: Path) -> Dict[str, str]:
    """Parse one environment file; missing or unreadable files yield {}."""
    if not path.is_file():
        return {}
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read %s: %s", path, exc)
        return {}
    return parse_angular_env_source(source)


def find_project_env(
    workspace: AngularWorkspace, root: Path, target_html: Path, env_file: str
) -> Dict[str, str]:
    """Variables of the application whose source root contains ``target_html``."""
    target = target_html if target_html.is_absolute() else root / target_html
    target = target.resolve()
    for project in workspace.applications():
        source_root = (root / project.source_root).resolve()
        if is_within(source_root, target):
            logger.debug("HTML %s belongs to workspace project %s", target, project.name)
            return parse_angular_env_file(source_root / "environments" / env_file)
    return {}


def load_workspace_env(workspace: AngularWorkspace, root: Path, env_file: str) -> Dict[str, str]:
    """Merge environment files of every application in the workspace."""
    env_vars: Dict[str, str] = {}
    for project in workspace.applications():
        env_vars.update(
            parse_angular_env_file(root / project.source_root / "environments" / env_file)
        )
    return env_vars


def load_angular_env(
    root: Path, mode: BuildMode, target_html: Optional[Path] = None
) -> Dict[str, str]:
    """Load NG_ variables, preferring the workspace project that owns ``target_html``."""
    env_file = angular_env_file(mode)
    workspace = load_angular_workspace(root)

    if workspace is not None:
        if target_html is not None:
            project_vars = find_project_env(workspace, root, Path(target_html), env_file)
            if project_vars:
                return project_vars
        workspace_vars = load_workspace_env(workspace, root, env_file)
        if workspace_vars:
            return workspace_vars

    return parse_angular_env_file(root / "src" / "environments" / env_file)


def _strip_comments(source: str) -> str:
    out: List[str] = []
    index = 0
    quote: Optional[str] = None
    length = len(source)
    while index < length:
        char = source[index]
        if quote:
            out.append(char)
            if char == "\\" and index + 1 < length:
                out.append(source[index + 1])
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"`":
            quote = char
            out.append(char)
        elif source.startswith("//", index):
            newline = source.find("\n", index)
            index = length if newline == -1 else newline
            continue
        elif source.startswith("/*", index):
            end = source.find("*/", index + 2)
            index = length if end == -1 else end + 2
            continue
        else:
            out.append(char)
        index += 1
    return "".join(out)


def _object_body(source: str, start: int) -> Optional[str]:
    depth = 1
    quote: Optional[str] = None
    index = start
    while index < len(source):
        char = source[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"`":
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth == 0:
                return source[start:index]
        index += 1
    return None


def _split_top_level(body: str) -> List[str]:
    entries: List[str] = []
    current: List[str] = []
    depth = 0
    quote: Optional[str] = None
    index = 0
    while index < len(body):
        char = body[index]
        if quote:
            current.append(char)
            if char == "\\" and index + 1 < len(body):
                current.append(body[index + 1])
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"`":
            quote = char
            current.append(char)
        elif char in _OPENERS:
            depth += 1
            current.append(char)
        elif char in _CLOSERS:
            depth -= 1
            current.append(char)
        elif char == "," and depth == 0:
            entries.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    if "".join(current).strip():
        entries.append("".join(current))
    return entries


def _string_value(raw: str) -> Optional[str]:
    match = _STRING.match(raw)
    if match is None:
        return None
    quote, inner = match.groups()
    if quote in inner.replace("\\" + quote, ""):
        return None
    if quote == "`" and "${" in inner:
        return None
    return inner.replace("\\" + quote, quote)


__all__ = [
    "angular_env_file",
    "env_key_for",
    "find_project_env",
    "load_angular_env",
    "load_workspace_env",
    "parse_angular_env_file",
    "parse_angular_env_source",
]
