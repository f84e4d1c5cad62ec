"""Queue npm subcommands and execute them one process at a time.

Commands run in the order they were queued. Execution stops at the first
command that exits non-zero; a command that cannot be spawned at all raises
:class:`NpmLaunchError` instead.
"""

from __future__ import annotations

import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from npm_builder.env import EnvSnapshot, NpmEnv
from npm_builder.logging import get_logger
from npm_builder.platform import npm_executable

NPM_INIT = "init"
NPM_INSTALL = "install"
NPM_UNINSTALL = "uninstall"
NPM_UPDATE = "update"
NPM_RUN = "run"

log = get_logger(__name__)


class NpmError(RuntimeError):
    """Base class for npm execution errors."""


class NpmLaunchError(NpmError):
    """The npm executable could not be started."""

    def __init__(self, command: list[str], reason: str) -> None:
        super().__init__(f"Could not launch npm {' '.join(command)}: {reason}")
        self.command = command


class NpmCommandError(NpmError):
    """A queued npm command exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int) -> None:
        super().__init__(f"npm {' '.join(command)} exited with code {returncode}")
        self.command = command
        self.returncode = returncode


class Spawner(Protocol):
    def __call__(self, argv: list[str], *, cwd: Path, env: dict[str, str]) -> int: ...


@dataclass(frozen=True)
class ExecResult:
    """Outcome of :meth:`Npm.exec`.

    ``command`` and ``index`` identify the invocation that produced
    ``returncode``; both are ``None`` when the queue was empty.
    """

    returncode: int
    command: list[str] | None = None
    index: int | None = None
    executed: int = 0

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def check(self) -> ExecResult:
        if not self.success:
            raise NpmCommandError(self.command or [], self.returncode)
        return self


def spawn(argv: list[str], *, cwd: Path, env: dict[str, str]) -> int:
    """Run *argv* to completion, inheriting stdio, and return its exit code."""
    return subprocess.run(argv, cwd=cwd, env=env, check=False).returncode


class Npm:
    """Executor for queued npm commands.

    Build one with :meth:`NpmEnv.init_env`, or ``Npm()`` for the default
    environment::

        Npm().install(["tailwindcss"]).exec()
    """

    def __init__(
        self, env: EnvSnapshot | NpmEnv | None = None, *, spawner: Spawner | None = None
    ) -> None:
        if env is None:
            env = NpmEnv()
        self._env = env.snapshot() if isinstance(env, NpmEnv) else env
        self._spawner: Spawner = spawner or spawn
        self._queue: list[list[str]] = []

    def __repr__(self) -> str:
        return f"Npm(cwd={str(self._env.cwd)!r}, commands={self._queue!r})"

    @property
    def env(self) -> EnvSnapshot:
        return self._env

    @property
    def commands(self) -> list[list[str]]:
        return [list(c) for c in self._queue]

    def _append(self, npm_cmd: str, args: Sequence[str] | None = None) -> Npm:
        self._queue.append([npm_cmd, *(args or ())])
        return self

    # --- queue ----------------------------------------------------------------

    def init(self) -> Npm:
        """``npm init -y``: create a default ``package.json``."""
        return self._append(NPM_INIT, ["-y"])

    def install(self, packages: Sequence[str] | None = None) -> Npm:
        """``npm install``: the manifest's dependencies, or each of *packages*."""
        return self._append(NPM_INSTALL, packages)

    def uninstall(self, packages: Sequence[str]) -> Npm:
        return self._append(NPM_UNINSTALL, packages)

    def update(self, packages: Sequence[str] | None = None) -> Npm:
        return self._append(NPM_UPDATE, packages)

    def run(self, script: str, args: Sequence[str] | None = None) -> Npm:
        """``npm run <script> [args...]``."""
        return self._append(NPM_RUN, [script, *(args or ())])

    def custom(self, command: str, args: Sequence[str] | None = None) -> Npm:
        """Any other npm subcommand, e.g. ``custom("audit")``."""
        return self._append(command, args)

    # --- execution ------------------------------------------------------------

    def exec(self, base_environ: Mapping[str, str] | None = None) -> ExecResult:
        """Execute the queue in order and return the result of the last command run.

        An empty queue spawns nothing and succeeds.
        """
        if not self._queue:
            log.info("npm queue is empty; nothing to run")
            return ExecResult(returncode=0)

        exe = npm_executable()
        environ = self._env.build_environ(base_environ)
        cwd = self._env.cwd
        result = ExecResult(returncode=0)

        for index, command in enumerate(self._queue):
            argv = [exe, *command]
            log.info("running %s", " ".join(argv), extra={"command": command, "cwd": str(cwd)})
            try:
                code = self._spawner(argv, cwd=cwd, env=dict(environ))
            except OSError as exc:
                log.error("failed to launch %s", exe, extra={"command": command, "index": index})
                raise NpmLaunchError(list(command), str(exc)) from exc

            result = ExecResult(
                returncode=code, command=list(command), index=index, executed=index + 1
            )
            if code != 0:
                log.warning(
                    "npm %s exited with code %d; skipping %d remaining command(s)",
                    " ".join(command),
                    code,
                    len(self._queue) - index - 1,
                    extra={"command": command, "returncode": code, "index": index},
                )
                break

        return result
