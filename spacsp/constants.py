"""Shared constants and built-in CSP defaults."""

from __future__ import annotations

import re
from typing import Dict, List

# Environment variable prefixes per framework.
REACT_PREFIX = "REACT_APP_"
VITE_PREFIX = "VITE_"
ANGULAR_PREFIX = "NG_"

DOTENV_PREFIXES = (REACT_PREFIX, VITE_PREFIX)
FRAMEWORK_PREFIXES = (REACT_PREFIX, VITE_PREFIX, ANGULAR_PREFIX)

ANGULAR_ENV_FILES = {
    "development": "environment.ts",
    "production": "environment.prod.ts",
}

ANGULAR_CONFIG_FILES = ("angular.json", ".angular-cli.json")
VITE_CONFIG_FILES = ("vite.config.js", "vite.config.ts")

HTML_SEARCH_PATHS: Dict[str, List[str]] = {
    "development": [
        "projects/*/src/index.html",
        "src/index.html",
        "public/index.html",
        "index.html",
    ],
    "production": [
        "dist/*/index.html",
        "dist/index.html",
        "build/index.html",
        "www/index.html",
        "public/index.html",
        "index.html",
    ],
}

CONFIG_FILE_NAMES = (
    "csp.config.json",
    ".csprc",
    ".csprc.json",
    "csp.json",
    "csp.config.yml",
    "csp.config.yaml",
)

# Directive names
DEFAULT_SRC = "default-src"
SCRIPT_SRC = "script-src"
STYLE_SRC = "style-src"
IMG_SRC = "img-src"
FONT_SRC = "font-src"
CONNECT_SRC = "connect-src"
WORKER_SRC = "worker-src"
MANIFEST_SRC = "manifest-src"
MEDIA_SRC = "media-src"
OBJECT_SRC = "object-src"
BASE_URI = "base-uri"
FORM_ACTION = "form-action"
FRAME_ANCESTORS = "frame-ancestors"
UPGRADE_INSECURE_REQUESTS = "upgrade-insecure-requests"

# Source expressions
SELF = "'self'"
UNSAFE_INLINE = "'unsafe-inline'"
NONE = "'none'"
DATA = "data:"
BLOB = "blob:"
WS = "ws:"
WSS = "wss:"

# Directives that receive {{NAME}} placeholders for every framework variable.
ENHANCED_DIRECTIVES = (SCRIPT_SRC, CONNECT_SRC, IMG_SRC)

NONCE_PLACEHOLDER = "'nonce-{{nonce}}'"
NONCE_TOKEN = "{{CSP_NONCE}}"
DEFAULT_NONCE_LENGTH = 16
PRODUCTION_NONCE_LENGTH = 24
MAX_NONCE_LENGTH = 64

CSP_HEADER = "Content-Security-Policy"
CSP_REPORT_ONLY_HEADER = "Content-Security-Policy-Report-Only"

BASE_DIRECTIVES: Dict[str, List[str]] = {
    DEFAULT_SRC: [SELF],
    STYLE_SRC: [SELF, UNSAFE_INLINE],
    IMG_SRC: [SELF, DATA, BLOB],
    FONT_SRC: [SELF, DATA],
    CONNECT_SRC: [SELF],
    WORKER_SRC: [SELF, BLOB],
    MANIFEST_SRC: [SELF],
    MEDIA_SRC: [SELF],
    OBJECT_SRC: [NONE],
    BASE_URI: [SELF],
    FORM_ACTION: [SELF],
    FRAME_ANCESTORS: [NONE],
}

DEVELOPMENT_DEFAULTS: Dict[str, object] = {
    "directives": {**BASE_DIRECTIVES, SCRIPT_SRC: [SELF, UNSAFE_INLINE]},
    "useNonce": False,
    "nonceLength": DEFAULT_NONCE_LENGTH,
    "reportOnly": False,
}

PRODUCTION_DEFAULTS: Dict[str, object] = {
    "directives": {**BASE_DIRECTIVES, SCRIPT_SRC: [SELF], UPGRADE_INSECURE_REQUESTS: []},
    "useNonce": True,
    "nonceLength": PRODUCTION_NONCE_LENGTH,
    "reportOnly": False,
}

# Keys stripped from parsed config files to prevent prototype pollution downstream.
UNSAFE_CONFIG_KEYS = frozenset({"__proto__", "constructor", "prototype"})

PLACEHOLDER_PATTERN = re.compile(r"\{\{([A-Za-z0-9_]+)\}\}")
CSP_DETECTION_PATTERN = re.compile(
    r"^.*<meta\s+[^>]*http-equiv\s*=\s*[\"']Content-Security-Policy.*$",
    re.IGNORECASE | re.MULTILINE,
)
CSP_TAG_PATTERN = re.compile(
    r"(?:^[ \t]*\r?\n)*(?:^[ \t]*)?<meta\s+(?:[^>]*\s)?http-equiv\s*=\s*[\"']Content-Security-Policy"
    r"(?:-Report-Only)?[\"'][^>]*>(?:[ \t]*\r?\n)*",
    re.IGNORECASE | re.MULTILINE,
)
HEAD_TAG_PATTERN = re.compile(r"<head(?:\s[^>]*)?>", re.IGNORECASE)
