"""Tests for spacsp.detectors.html."""

from __future__ import annotations

from pathlib import Path

from spacsp.detectors.html import (
    detect_html,
    detect_workspace_root,
    has_existing_csp,
    html_search_paths,
)
from spacsp.mode import BuildMode
from tests._fixtures.project_builder import ProjectBuilder

CSP_HTML = """\
<html>
<head>
  <META HTTP-EQUIV="Content-Security-Policy" content="default-src 'self'">
</head>
</html>
"""


def test_production_falls_back_to_public_without_build_output(project: ProjectBuilder) -> None:
    project.html("public/index.html")

    result = detect_html(BuildMode.PRODUCTION, project.path())

    assert result is not None
    assert result.build_dir == "public"


def test_production_prefers_build_output(project: ProjectBuilder) -> None:
    project.html("public/index.html")
    project.html("build/index.html")

    result = detect_html(BuildMode.PRODUCTION, project.path())

    assert result is not None
    assert result.path == (project.path() / "build/index.html").resolve()
    assert result.build_dir == "build"
    assert result.has_existing_csp is False


def test_production_expands_dist_glob_in_name_order(project: ProjectBuilder) -> None:
    project.html("dist/zeta/index.html")
    project.html("dist/alpha/index.html")
    project.html("dist/index.html")

    result = detect_html(BuildMode.PRODUCTION, project.path())

    assert result is not None
    assert result.path == (project.path() / "dist/alpha/index.html").resolve()
    assert result.build_dir == "dist/alpha"


def test_production_checks_angular_output_paths_first(project: ProjectBuilder) -> None:
    project.write_json(
        "angular.json",
        {
            "projects": {
                "shop": {
                    "projectType": "application",
                    "root": "",
                    "architect": {
                        "build": {"options": {"outputPath": {"base": "out/shop"}}}
                    },
                }
            }
        },
    )
    project.html("out/shop/browser/index.html")
    project.html("dist/index.html")

    assert html_search_paths(BuildMode.PRODUCTION, project.path())[0] == (
        "out/shop/browser/index.html"
    )
    result = detect_html(BuildMode.PRODUCTION, project.path())

    assert result is not None
    assert result.path == (project.path() / "out/shop/browser/index.html").resolve()


def test_development_prefers_workspace_projects(project: ProjectBuilder) -> None:
    project.html("index.html")
    project.html("src/index.html")
    project.html("projects/app1/src/index.html")

    result = detect_html(BuildMode.DEVELOPMENT, project.path())

    assert result is not None
    assert result.path == (project.path() / "projects/app1/src/index.html").resolve()
    assert result.build_dir == "projects/app1/src"


def test_development_falls_back_to_root_index(project: ProjectBuilder) -> None:
    project.html("index.html", CSP_HTML)

    result = detect_html(BuildMode.DEVELOPMENT, project.path())

    assert result is not None
    assert result.build_dir == "."
    assert result.has_existing_csp is True


def test_detect_html_returns_none_without_candidates(project: ProjectBuilder) -> None:
    project.html("dist/index.html")

    assert detect_html(BuildMode.DEVELOPMENT, project.path()) is None


def test_has_existing_csp_is_case_insensitive() -> None:
    assert has_existing_csp(CSP_HTML)
    assert has_existing_csp('<meta name="x" http-equiv="content-security-policy-report-only">')
    assert not has_existing_csp("<meta charset='utf-8'>")


def test_workspace_root_shifts_to_project_with_environment(project: ProjectBuilder) -> None:
    html = project.html("projects/app1/src/index.html")
    project.angular_env("projects/app1/src/environments", {"apiUrl": "https://app1.com"})

    root = detect_workspace_root(project.path(), html, cwd=project.path())

    assert root == (project.path() / "projects" / "app1").resolve()


def test_workspace_root_requires_project_environment(project: ProjectBuilder) -> None:
    html = project.html("projects/app1/src/index.html")

    assert detect_workspace_root(project.path(), html, cwd=project.path()) == project.path()


def test_workspace_root_ignores_other_layouts(project: ProjectBuilder, tmp_path: Path) -> None:
    html = project.html("src/index.html")
    outside = tmp_path / "elsewhere" / "projects" / "x" / "src" / "index.html"

    assert detect_workspace_root(project.path(), html, cwd=project.path()) == project.path()
    assert detect_workspace_root(project.path(), outside, cwd=project.path()) == project.path()


def test_modes_stay_in_their_own_locations_when_both_exist(project: ProjectBuilder) -> None:
    project.html("build/index.html")
    project.html("dist/index.html")
    project.html("src/index.html")

    dev = detect_html(BuildMode.DEVELOPMENT, project.path())
    prod = detect_html(BuildMode.PRODUCTION, project.path())

    assert dev is not None and prod is not None
    assert dev.path == (project.path() / "src" / "index.html").resolve()
    assert prod.path == (project.path() / "dist" / "index.html").resolve()
