"""Build mode selection and the NODE_ENV guard used during injection."""

from __future__ import annotations

import os
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Mapping, MutableMapping, Optional

NODE_ENV = "NODE_ENV"


class BuildMode(str, Enum):
    """Development or production, threaded explicitly through the core."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @property
    def is_production(self) -> bool:
        return self is BuildMode.PRODUCTION

    @classmethod
    def from_dev_flag(cls, dev_mode: bool) -> "BuildMode":
        return cls.DEVELOPMENT if dev_mode else cls.PRODUCTION

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "BuildMode":
        """PRODUCTION only when NODE_ENV is exactly ``production``."""
        env = os.environ if environ is None else environ
        if env.get(NODE_ENV) == cls.PRODUCTION.value:
            return cls.PRODUCTION
        return cls.DEVELOPMENT

    @classmethod
    def resolve(
        cls,
        dev_mode: Optional[bool] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "BuildMode":
        """Mode for a whole injection run.

        An explicit dev flag wins over whatever NODE_ENV says. Without one, an
        unset or empty NODE_ENV means a production build.
        """
        if dev_mode is not None:
            return cls.from_dev_flag(dev_mode)
        env = os.environ if environ is None else environ
        if not env.get(NODE_ENV):
            return cls.PRODUCTION
        return cls.from_environment(env)


@contextmanager
def forced_node_env(
    mode: BuildMode, environ: Optional[MutableMapping[str, str]] = None
) -> Iterator[BuildMode]:
    """Set NODE_ENV to ``mode`` for the block and restore the previous value afterwards."""
    env = os.environ if environ is None else environ
    missing = NODE_ENV not in env
    previous = env.get(NODE_ENV)
    env[NODE_ENV] = mode.value
    try:
        yield mode
    finally:
        if missing:
            env.pop(NODE_ENV, None)
        else:
            env[NODE_ENV] = previous  # type: ignore[assignment]


__all__ = ["BuildMode", "NODE_ENV", "forced_node_env"]
