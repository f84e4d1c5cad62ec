"""Build mode (``NODE_ENV``) values and their derivation from the build profile."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar

NODE_ENV = "NODE_ENV"
PROFILE_VAR = "PROFILE"

_PROFILE_MODES = {
    "debug": "development",
    "release": "production",
}


@dataclass(frozen=True)
class NodeEnv:
    """A ``NODE_ENV`` value.

    The conventional values are exposed as ``NodeEnv.DEVELOPMENT``,
    ``NodeEnv.PRODUCTION`` and ``NodeEnv.NONE``; anything else is built with
    :meth:`custom`.
    """

    value: str

    DEVELOPMENT: ClassVar[NodeEnv]
    PRODUCTION: ClassVar[NodeEnv]
    NONE: ClassVar[NodeEnv]

    def __str__(self) -> str:
        return self.value

    @classmethod
    def custom(cls, value: str) -> NodeEnv:
        return cls(value)

    @classmethod
    def default(cls) -> NodeEnv:
        return cls.DEVELOPMENT

    @classmethod
    def from_profile(
        cls, environ: Mapping[str, str] | None = None, var: str = PROFILE_VAR
    ) -> NodeEnv | None:
        """Derive the mode from the build profile variable *var*.

        - ``debug`` -> development
        - ``release`` -> production
        - anything else -> a custom value carrying the profile name

        Returns ``None`` when the variable is not set.
        """
        environ = os.environ if environ is None else environ
        profile = environ.get(var)
        if profile is None:
            return None
        return cls(_PROFILE_MODES.get(profile, profile))

    @classmethod
    def detect(cls, environ: Mapping[str, str] | None = None, var: str = PROFILE_VAR) -> NodeEnv:
        """Like :meth:`from_profile` but falls back to :meth:`default`."""
        return cls.from_profile(environ, var) or cls.default()


NodeEnv.DEVELOPMENT = NodeEnv("development")
NodeEnv.PRODUCTION = NodeEnv("production")
NodeEnv.NONE = NodeEnv("none")
