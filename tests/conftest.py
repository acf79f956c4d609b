from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _clean_framework_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's NODE_ENV and framework variables out of every test."""
    for key in list(os.environ):
        if key == "NODE_ENV" or key.startswith(("REACT_APP_", "VITE_")):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_spacsp_logging() -> Iterator[None]:
    """Drop handlers the CLI installs so they never outlive a captured stream."""
    yield
    logger = logging.getLogger("spacsp")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
