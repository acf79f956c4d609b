"""Tests for spacsp.environment.load_environment_variables."""

from __future__ import annotations

import os

import pytest

from spacsp.environment import load_environment_variables
from spacsp.mode import BuildMode
from spacsp.models import EnvironmentVariables
from tests._fixtures.project_builder import ProjectBuilder


def test_react_local_file_wins(project: ProjectBuilder) -> None:
    project.react_package()
    project.write(
        {
            ".env": "REACT_APP_API_URL=https://api.example.com\n",
            ".env.local": "REACT_APP_API_URL=https://local.api.example.com\n",
        }
    )

    env = load_environment_variables(project.path(), mode=BuildMode.PRODUCTION, environ={})

    assert isinstance(env, EnvironmentVariables)
    assert env["REACT_APP_API_URL"] == "https://local.api.example.com"


def test_angular_workspace_uses_project_of_target_html(project: ProjectBuilder) -> None:
    project.angular_workspace("app1")
    project.angular_env("projects/app1/src/environments", {"apiUrl": "https://app1.com"})
    project.angular_env("src/environments", {"apiUrl": "https://root.com"})
    html = project.html("projects/app1/src/index.html")

    env = load_environment_variables(project.path(), html, mode=BuildMode.DEVELOPMENT)

    assert env["NG_API_URL"] == "https://app1.com"


def test_angular_projects_ignore_dotenv_files(project: ProjectBuilder) -> None:
    project.angular_env("src/environments", {"apiUrl": "https://ng.example.com"})
    project.write({".env": "REACT_APP_API_URL=https://react.example.com\n"})

    env = load_environment_variables(project.path(), mode=BuildMode.DEVELOPMENT, environ={})

    assert dict(env) == {"NG_API_URL": "https://ng.example.com"}


def test_unknown_project_merges_dotenv_values(project: ProjectBuilder) -> None:
    project.write({".env": "VITE_API_URL=https://vite.example.com\nVITE_EMPTY=\n"})

    env = load_environment_variables(
        project.path(), mode=BuildMode.DEVELOPMENT, environ={"REACT_APP_X": "undefined"}
    )

    assert dict(env) == {"VITE_API_URL": "https://vite.example.com"}


def test_mode_defaults_to_node_env(project: ProjectBuilder) -> None:
    project.react_package()
    project.write(
        {
            ".env.development": "REACT_APP_STAGE=dev\n",
            ".env.production": "REACT_APP_STAGE=prod\n",
        }
    )

    unset = load_environment_variables(project.path(), environ={})
    dev = load_environment_variables(project.path(), environ={"NODE_ENV": "development"})
    prod = load_environment_variables(project.path(), environ={"NODE_ENV": "production"})

    assert unset["REACT_APP_STAGE"] == "dev"
    assert dev["REACT_APP_STAGE"] == "dev"
    assert prod["REACT_APP_STAGE"] == "prod"


def test_angular_workspace_without_mode_or_node_env_loads_development_file(
    project: ProjectBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("NODE_ENV", raising=False)
    project.angular_workspace("app1")
    project.angular_env("projects/app1/src/environments", {"apiUrl": "https://app1.com"})
    project.angular_env("src/environments", {"apiUrl": "https://root.com"})
    html = project.html("projects/app1/src/index.html")

    env = load_environment_variables(project.path(), html)

    assert env["NG_API_URL"] == "https://app1.com"


def test_loading_does_not_touch_process_environment(
    project: ProjectBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    project.react_package()
    project.write({".env": "REACT_APP_API_URL=https://api.example.com\n"})
    monkeypatch.setenv("REACT_APP_FROM_SHELL", "shell")
    before = dict(os.environ)

    first = load_environment_variables(project.path(), mode=BuildMode.PRODUCTION)
    second = load_environment_variables(project.path(), mode=BuildMode.PRODUCTION)

    assert first == second
    assert first["REACT_APP_FROM_SHELL"] == "shell"
    assert dict(os.environ) == before
