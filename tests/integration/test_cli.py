from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from npm_builder import npm as npm_mod
from npm_builder.cli import LAUNCH_FAILURE_EXIT, app

runner = CliRunner()


@pytest.fixture
def recorded(monkeypatch) -> list[tuple[list[str], dict[str, str]]]:
    calls: list[tuple[list[str], dict[str, str]]] = []

    def fake_spawn(argv: list[str], *, cwd: Path, env: dict[str, str]) -> int:
        calls.append((argv[1:], env))
        return 5 if argv[1:] == ["run", "broken"] else 0

    monkeypatch.setattr(npm_mod, "spawn", fake_spawn)
    return calls


def test_exec_runs_install_then_scripts(recorded, tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        [
            "exec",
            "--cwd",
            str(tmp_path),
            "--env",
            "FOO=bar",
            "--node-env",
            "production",
            "--install",
            "--run",
            "build",
            "--run",
            "test",
        ],
    )
    assert result.exit_code == 0, result.output
    assert [argv for argv, _ in recorded] == [["install"], ["run", "build"], ["run", "test"]]
    assert all(env["FOO"] == "bar" and env["NODE_ENV"] == "production" for _, env in recorded)


def test_exec_exit_code_is_failing_command_code(recorded) -> None:
    result = runner.invoke(app, ["exec", "--run", "broken", "--run", "build"])
    assert result.exit_code == 5
    assert [argv for argv, _ in recorded] == [["run", "broken"]]


def test_exec_trailing_custom_command(recorded) -> None:
    result = runner.invoke(app, ["exec", "--install", "--", "audit", "fix"])
    assert result.exit_code == 0, result.output
    assert [argv for argv, _ in recorded] == [["install"], ["audit", "fix"]]


def test_exec_profile_derives_node_env(recorded, monkeypatch) -> None:
    monkeypatch.setenv("PROFILE", "release")
    result = runner.invoke(app, ["exec", "--profile", "--install"])
    assert result.exit_code == 0, result.output
    assert recorded[0][1]["NODE_ENV"] == "production"


def test_exec_empty_queue_is_noop(recorded) -> None:
    result = runner.invoke(app, ["exec"])
    assert result.exit_code == 0
    assert recorded == []
    assert "Nothing queued" in result.output


def test_exec_launch_failure(monkeypatch) -> None:
    def missing(argv, *, cwd, env):
        raise FileNotFoundError(2, "No such file or directory", argv[0])

    monkeypatch.setattr(npm_mod, "spawn", missing)
    result = runner.invoke(app, ["exec", "--install"])
    assert result.exit_code == LAUNCH_FAILURE_EXIT


def test_exec_rejects_malformed_env(recorded) -> None:
    result = runner.invoke(app, ["exec", "--env", "NOEQUALS", "--install"])
    assert result.exit_code != 0
    assert recorded == []


def test_plan_from_file_prints_json(tmp_path: Path) -> None:
    plan_file = tmp_path / "npm.plan.json"
    plan_file.write_text(
        json.dumps({"env": {"FOO": "bar"}, "commands": [["install"]]}), encoding="utf-8"
    )
    result = runner.invoke(app, ["plan", "--plan", str(plan_file), "--run", "build"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["env"] == {"FOO": "bar"}
    assert data["commands"] == [["install"], ["run", "build"]]
    assert data["cwd"] == str(tmp_path.resolve())


def test_plan_invalid_file(tmp_path: Path) -> None:
    plan_file = tmp_path / "bad.json"
    plan_file.write_text(json.dumps({"commands": "install"}), encoding="utf-8")
    result = runner.invoke(app, ["plan", "--plan", str(plan_file)])
    assert result.exit_code == 2


def test_which_prints_executable() -> None:
    result = runner.invoke(app, ["which"])
    assert result.exit_code == 0
    assert result.output.strip() in {"npm", "npm.cmd"}
