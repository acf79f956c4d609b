"""Placeholder substitution for ``{{NAME}}`` tokens."""

from __future__ import annotations

from typing import Any, List, Mapping

from .constants import PLACEHOLDER_PATTERN


def resolve_template(template: Any, variables: Any) -> str:
    """Replace every ``{{NAME}}`` whose name is present in ``variables``.

    Placeholders with no matching entry are left exactly as written. Names are
    looked up verbatim; no prefix fallback is attempted.
    """
    if not isinstance(template, str) or not template:
        return ""
    if not isinstance(variables, Mapping) or not variables:
        return template

    def _substitute(match) -> str:
        value = variables.get(match.group(1))
        return value if isinstance(value, str) else match.group(0)

    return PLACEHOLDER_PATTERN.sub(_substitute, template)


def find_placeholders(template: str) -> List[str]:
    """Return placeholder names in order of first appearance."""
    if not isinstance(template, str):
        return []
    seen: List[str] = []
    for name in PLACEHOLDER_PATTERN.findall(template):
        if name not in seen:
            seen.append(name)
    return seen


def placeholder(name: str) -> str:
    return "{{" + name + "}}"


__all__ = ["find_placeholders", "placeholder", "resolve_template"]
