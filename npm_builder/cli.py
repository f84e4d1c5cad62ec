"""npm-builder CLI: run an npm command queue from the shell or a plan file.

Commands:
- exec: queue commands (plan file, --install, --run, trailing custom command) and run them
- plan: print the resolved plan as JSON without running anything
- which: print the npm executable name used on this platform
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from jsonschema import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from npm_builder.env import NpmEnv
from npm_builder.node_env import NodeEnv
from npm_builder.npm import Npm, NpmLaunchError
from npm_builder.plan import dump_plan, env_from_plan, load_plan
from npm_builder.platform import npm_executable

app = typer.Typer(add_completion=False, help="Build and run npm command queues")
console = Console()

LAUNCH_FAILURE_EXIT = 127


def _parse_env(pairs: list[str]) -> dict[str, str]:
    envs: dict[str, str] = {}
    for kv in pairs:
        if "=" not in kv:
            raise typer.BadParameter(f"expected KEY=VAL, got {kv!r}", param_hint="--env")
        k, v = kv.split("=", 1)
        envs[k] = v
    return envs


def _build_npm(
    plan: str | None,
    env: list[str] | None,
    node_env: str | None,
    profile: bool,
    cwd: str | None,
    install: bool,
    run: list[str] | None,
    command: list[str] | None,
) -> Npm:
    if plan:
        plan_path = Path(plan)
        try:
            model = load_plan(plan_path)
        except (FileNotFoundError, ValidationError) as exc:
            rprint(f"[red]Invalid plan:[/red] {exc}")
            raise typer.Exit(code=2) from exc
        npm_env = env_from_plan(model, plan_path.resolve().parent)
        queued = model.commands
    else:
        npm_env = NpmEnv()
        queued = []

    if cwd:
        npm_env.set_path(cwd)
    if profile:
        npm_env.with_node_env(NodeEnv.detect())
    if node_env:
        npm_env.with_node_env(node_env)
    npm_env.with_envs(_parse_env(env or []))

    npm = npm_env.init_env()
    for queued_command in queued:
        npm.custom(queued_command[0], queued_command[1:])
    if install:
        npm.install()
    for script in run or []:
        npm.run(script)
    if command:
        npm.custom(command[0], command[1:])
    return npm


_PLAN_FILE = typer.Option(None, "--plan", help="JSON plan file to load first")
_ENV = typer.Option(None, "--env", help="KEY=VAL env vars", show_default=False)
_NODE_ENV = typer.Option(None, "--node-env", help="NODE_ENV value (overrides --profile)")
_PROFILE = typer.Option(False, "--profile", help="Derive NODE_ENV from $PROFILE")
_CWD = typer.Option(None, "--cwd", help="Working directory for npm")
_INSTALL = typer.Option(False, "--install", help="Queue a bare `npm install`")
_RUN = typer.Option(None, "--run", help="Queue `npm run SCRIPT` (repeatable)")
_COMMAND = typer.Argument(None, help="Custom npm command queued last, e.g. -- audit fix")


@app.command("exec")
def exec_(
    plan: str | None = _PLAN_FILE,
    env: list[str] | None = _ENV,
    node_env: str | None = _NODE_ENV,
    profile: bool = _PROFILE,
    cwd: str | None = _CWD,
    install: bool = _INSTALL,
    run: list[str] | None = _RUN,
    command: list[str] | None = _COMMAND,
) -> None:
    npm = _build_npm(plan, env, node_env, profile, cwd, install, run, command)
    try:
        result = npm.exec()
    except NpmLaunchError as exc:
        rprint(f"[red]{exc}[/red]")
        raise typer.Exit(code=LAUNCH_FAILURE_EXIT) from exc

    if result.command is None:
        rprint("[yellow]Nothing queued.[/yellow]")
    elif result.success:
        rprint(f"[green]Ran {result.executed} npm command(s).[/green]")
    else:
        rprint(
            f"[red]npm {' '.join(result.command)} failed with code {result.returncode}[/red]"
        )
    raise typer.Exit(code=result.returncode)


@app.command()
def plan(
    plan: str | None = _PLAN_FILE,
    env: list[str] | None = _ENV,
    node_env: str | None = _NODE_ENV,
    profile: bool = _PROFILE,
    cwd: str | None = _CWD,
    install: bool = _INSTALL,
    run: list[str] | None = _RUN,
    command: list[str] | None = _COMMAND,
    table: bool = typer.Option(False, "--table", help="Show the queue as a table"),
) -> None:
    npm = _build_npm(plan, env, node_env, profile, cwd, install, run, command)
    if table:
        t = Table(title=f"npm queue ({npm.env.cwd})")
        t.add_column("#", style="dim")
        t.add_column("Command", style="cyan")
        for i, c in enumerate(npm.commands):
            t.add_row(str(i), " ".join([npm_executable(), *c]))
        console.print(t)
    else:
        print(json.dumps(dump_plan(npm), indent=2))


@app.command()
def which() -> None:
    print(npm_executable())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
