"""Core data models shared across spacsp components."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .constants import DEFAULT_NONCE_LENGTH, FRAMEWORK_PREFIXES, MAX_NONCE_LENGTH
from .mode import BuildMode

_QUOTE_ARTIFACT = re.compile(r"^['\"]?\s*['\"]?$")


def is_valid_env_value(value: object) -> bool:
    """Return True for non-empty strings that are not placeholder artifacts."""
    if not isinstance(value, str):
        return False
    if not value.strip() or value in {"undefined", "null"}:
        return False
    return _QUOTE_ARTIFACT.match(value) is None


class EnvironmentVariables(Mapping[str, str]):
    """Immutable name -> value mapping holding only valid, non-empty values."""

    __slots__ = ("_data",)

    def __init__(
        self,
        data: Mapping[str, Any] | Iterable[Tuple[str, Any]] | None = None,
    ) -> None:
        items = data.items() if isinstance(data, Mapping) else (data or ())
        self._data: Dict[str, str] = {
            str(key): value for key, value in items if is_valid_env_value(value)
        }

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"EnvironmentVariables({self._data!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EnvironmentVariables):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._data.items()))

    def merged(self, other: Mapping[str, Any]) -> "EnvironmentVariables":
        """Return a new instance where ``other`` wins on conflicting names."""
        combined = dict(self._data)
        combined.update(other)
        return EnvironmentVariables(combined)

    def with_prefix(self, prefix: str) -> List[str]:
        return [key for key in self._data if key.startswith(prefix)]

    def framework_keys(self) -> List[str]:
        """Names carrying a REACT_APP_, VITE_ or NG_ prefix, in insertion order."""
        return [key for key in self._data if key.startswith(FRAMEWORK_PREFIXES)]

    def to_dict(self) -> Dict[str, str]:
        return dict(self._data)


class ProjectType(str, Enum):
    """Project layouts recognised by the classifier."""

    REACT_CRA = "react-cra"
    REACT_VITE = "react-vite"
    ANGULAR_STANDALONE = "angular-standalone"
    ANGULAR_WORKSPACE = "angular-workspace"
    UNKNOWN = "unknown"


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_source_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, str)]
    return []


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass
class CSPConfig:
    """Directives plus nonce and delivery flags."""

    directives: Dict[str, List[str]] = field(default_factory=dict)
    use_nonce: bool = False
    nonce_length: int = DEFAULT_NONCE_LENGTH
    report_only: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CSPConfig":
        """Build a config from JSON-shaped data (``useNonce`` etc.)."""
        return cls().merged(data)

    def merged(self, overrides: Mapping[str, Any] | "CSPConfig") -> "CSPConfig":
        """Shallow-merge ``overrides`` on top of this config.

        Directives are merged key by key, so a directive named in the overrides
        replaces the base list entirely. Flags are replaced when present.
        """
        if isinstance(overrides, CSPConfig):
            overrides = overrides.to_dict()

        directives = {name: list(values) for name, values in self.directives.items()}
        raw_directives = overrides.get("directives")
        if isinstance(raw_directives, Mapping):
            for name, values in raw_directives.items():
                directives[str(name)] = _as_source_list(values)

        use_nonce = _as_bool(_pick(overrides, "useNonce", "use_nonce"))
        report_only = _as_bool(_pick(overrides, "reportOnly", "report_only"))
        nonce_length = _as_int(_pick(overrides, "nonceLength", "nonce_length"))

        return CSPConfig(
            directives=directives,
            use_nonce=self.use_nonce if use_nonce is None else use_nonce,
            nonce_length=_clamp_nonce_length(
                self.nonce_length if nonce_length is None else nonce_length
            ),
            report_only=self.report_only if report_only is None else report_only,
        )

    def copy(self) -> "CSPConfig":
        return self.merged({})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "directives": {name: list(values) for name, values in self.directives.items()},
            "useNonce": self.use_nonce,
            "nonceLength": self.nonce_length,
            "reportOnly": self.report_only,
        }


def _clamp_nonce_length(length: int) -> int:
    return max(1, min(MAX_NONCE_LENGTH, length))


class ConfigSource(str, Enum):
    """Where an effective CSP configuration came from."""

    FILE = "file"
    ENHANCED_DEFAULTS = "enhanced-defaults"
    DEFAULTS = "defaults"
    OVERRIDE = "override"


@dataclass
class ConfigLoadResult:
    """Effective configuration plus its provenance."""

    config: CSPConfig
    source: ConfigSource
    path: Optional[Path] = None


@dataclass
class HTMLDetectionResult:
    """Entry HTML file located for a build mode."""

    path: Path
    build_dir: str
    has_existing_csp: bool


@dataclass
class CSPInjectionResult:
    """Outcome of one completed CSP write."""

    html_path: Path
    csp_string: str
    replaced_tags: int
    nonce: Optional[str] = None
    env_vars: Optional[EnvironmentVariables] = None


@dataclass
class InjectOptions:
    """Caller-supplied options for a single injection run."""

    html_path: Optional[str | Path] = None
    config_path: Optional[str | Path] = None
    dev_mode: Optional[bool] = None
    config: Optional[Mapping[str, Any]] = None
    env_vars: Optional[Mapping[str, str]] = None


@dataclass
class AngularProject:
    """Single project entry from angular.json."""

    name: str
    project_type: Optional[str]
    root: str
    source_root: str
    output_path: Optional[str] = None

    @property
    def is_application(self) -> bool:
        return self.project_type in (None, "application")


@dataclass
class AngularWorkspace:
    """Parsed angular.json descriptor."""

    path: Path
    projects: Dict[str, AngularProject] = field(default_factory=dict)

    def applications(self) -> List[AngularProject]:
        return [project for project in self.projects.values() if project.is_application]


@dataclass
class InjectionPreview:
    """Everything an injection would use, computed without touching the file."""

    html: HTMLDetectionResult
    project_root: Path
    mode: BuildMode
    env_vars: EnvironmentVariables
    config: ConfigLoadResult
    csp_string: str


__all__ = [
    "AngularProject",
    "AngularWorkspace",
    "CSPConfig",
    "CSPInjectionResult",
    "ConfigLoadResult",
    "ConfigSource",
    "EnvironmentVariables",
    "HTMLDetectionResult",
    "InjectOptions",
    "InjectionPreview",
    "ProjectType",
    "is_valid_env_value",
]
