"""Environment builder for npm invocations.

``NpmEnv`` collects everything that must be decided before a process is
spawned: environment variables, ``NODE_ENV`` and the working directory. Call
:meth:`NpmEnv.init_env` to freeze the configuration into an
:class:`~npm_builder.npm.Npm` executor and start queuing commands.

Example::

    status = (
        NpmEnv()
        .with_node_env(NodeEnv.PRODUCTION)
        .with_env("FOO", "bar")
        .init_env()
        .install()
        .run("build")
        .exec()
    )
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

from npm_builder.node_env import NODE_ENV, NodeEnv

if TYPE_CHECKING:
    from npm_builder.npm import Npm, Spawner


@dataclass(frozen=True)
class EnvSnapshot:
    """Immutable configuration handed to the executor by ``init_env``."""

    cwd: Path
    envs: Mapping[str, str]
    removed: frozenset[str] = frozenset()
    inherit: bool = True

    def build_environ(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return the child environment: inherited copy, minus removals, plus overlay."""
        environ: dict[str, str] = {}
        if self.inherit:
            environ.update(os.environ if base is None else base)
        for name in self.removed:
            environ.pop(name, None)
        environ.update(self.envs)
        return environ


@dataclass
class NpmEnv:
    cwd: Path = field(default_factory=Path.cwd)
    _envs: dict[str, str] = field(default_factory=dict, repr=False)
    _removed: set[str] = field(default_factory=set, repr=False)
    inherit: bool = True

    def __post_init__(self) -> None:
        self.cwd = Path(self.cwd)

    @property
    def envs(self) -> Mapping[str, str]:
        return MappingProxyType(self._envs)

    # --- configuration ------------------------------------------------------

    def with_env(self, name: str, value: str) -> NpmEnv:
        """Insert or overwrite a variable; the last write wins."""
        self._envs[name] = value
        self._removed.discard(name)
        return self

    def with_envs(self, variables: Mapping[str, str] | Iterable[tuple[str, str]]) -> NpmEnv:
        items = variables.items() if isinstance(variables, Mapping) else variables
        for name, value in items:
            self.with_env(name, value)
        return self

    def with_node_env(self, node_env: NodeEnv | str) -> NpmEnv:
        return self.with_env(NODE_ENV, str(node_env))

    def remove_env(self, name: str) -> NpmEnv:
        """Drop *name* from the child environment, including an inherited value."""
        self._envs.pop(name, None)
        self._removed.add(name)
        return self

    def clear_envs(self) -> NpmEnv:
        """Start the child from an empty environment instead of inheriting ours."""
        self._envs.clear()
        self._removed.clear()
        self.inherit = False
        return self

    def set_path(self, path: str | os.PathLike[str]) -> NpmEnv:
        self.cwd = Path(path)
        return self

    # --- finalization -------------------------------------------------------

    def copy(self) -> NpmEnv:
        return NpmEnv(
            cwd=self.cwd,
            _envs=dict(self._envs),
            _removed=set(self._removed),
            inherit=self.inherit,
        )

    __copy__ = copy

    def snapshot(self) -> EnvSnapshot:
        return EnvSnapshot(
            cwd=self.cwd,
            envs=MappingProxyType(dict(self._envs)),
            removed=frozenset(self._removed),
            inherit=self.inherit,
        )

    def build_environ(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        return self.snapshot().build_environ(base)

    def init_env(self, *, spawner: Spawner | None = None) -> Npm:
        """Freeze this configuration into an executor."""
        from npm_builder.npm import Npm

        return Npm(self.snapshot(), spawner=spawner)
