"""Plan files: an npm environment and command queue described as JSON.

A plan looks like::

    {
      "env": {"FOO": "bar"},
      "nodeEnv": "production",
      "cwd": "web",
      "commands": [["install"], ["run", "build"]]
    }

Plans are validated against ``npm.plan.schema.json`` before use. A relative
``cwd`` is resolved against the directory holding the plan file.
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path

from jsonschema import Draft202012Validator

from npm_builder.env import NpmEnv
from npm_builder.node_env import NODE_ENV
from npm_builder.npm import Npm, Spawner
from npm_builder.types import PlanModel


def _plan_schema() -> dict:
    with resources.files("npm_builder.schema").joinpath("npm.plan.schema.json").open(
        "r", encoding="utf-8"
    ) as f:
        return json.load(f)


def validate_plan(data: dict) -> None:
    Draft202012Validator(_plan_schema()).validate(data)


def parse_plan(data: dict) -> PlanModel:
    validate_plan(data)
    return PlanModel.model_validate(data)


def load_plan(path: Path) -> PlanModel:
    if not path.exists():
        raise FileNotFoundError(f"Missing plan file: {path}")
    return parse_plan(json.loads(path.read_text(encoding="utf-8")))


def env_from_plan(plan: PlanModel, base_dir: Path | None = None) -> NpmEnv:
    base_dir = Path.cwd() if base_dir is None else base_dir
    env = NpmEnv(cwd=base_dir / plan.cwd if plan.cwd else base_dir)
    if not plan.inherit:
        env.clear_envs()
    for name in plan.remove:
        env.remove_env(name)
    if plan.nodeEnv is not None:
        env.with_node_env(plan.nodeEnv)
    env.with_envs(plan.env)
    return env


def npm_from_plan(
    plan: PlanModel, base_dir: Path | None = None, *, spawner: Spawner | None = None
) -> Npm:
    npm = env_from_plan(plan, base_dir).init_env(spawner=spawner)
    for command in plan.commands:
        npm.custom(command[0], command[1:])
    return npm


def dump_plan(npm: Npm) -> dict:
    """Render an executor's configuration and queue back into plan form."""
    envs = dict(npm.env.envs)
    node_env = envs.pop(NODE_ENV, None)
    plan = PlanModel(
        env=envs,
        remove=sorted(npm.env.removed),
        inherit=npm.env.inherit,
        nodeEnv=node_env,
        cwd=str(npm.env.cwd),
        commands=npm.commands,
    )
    data = plan.model_dump()
    validate_plan(data)
    return data
