"""Helper utilities for constructing temporary SPA projects in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Mapping

BASIC_HTML = """\
<!DOCTYPE html>
<html>
<head>
  <title>App</title>
</head>
<body></body>
</html>
"""


class ProjectBuilder:
    """Utility for writing files into a throwaway project directory."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "app"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_json(self, relative: str, data: Any) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    def html(self, relative: str, content: str = BASIC_HTML) -> Path:
        """Write an HTML entry file and return its path."""
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def angular_env(self, relative_dir: str, values: Mapping[str, str], prod: bool = False) -> Path:
        """Write ``environment[.prod].ts`` exporting ``values`` as string properties."""
        lines = ",\n".join(f"  {key}: '{value}'" for key, value in values.items())
        name = "environment.prod.ts" if prod else "environment.ts"
        path = self.root / relative_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"export const environment = {{\n{lines}\n}};\n", encoding="utf-8")
        return path

    def react_package(self) -> Path:
        return self.write_json(
            "package.json",
            {"name": "app", "dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0"}},
        )

    def angular_workspace(self, *names: str) -> Path:
        """Write angular.json with one application per name under ``projects/``."""
        projects = {
            name: {
                "projectType": "application",
                "root": f"projects/{name}",
                "sourceRoot": f"projects/{name}/src",
                "architect": {"build": {"options": {"outputPath": f"dist/{name}"}}},
            }
            for name in names
        }
        return self.write_json("angular.json", {"version": 1, "projects": projects})

    def read(self, relative: str) -> str:
        return (self.root / relative).read_text(encoding="utf-8")

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


__all__ = ["BASIC_HTML", "ProjectBuilder"]
