from __future__ import annotations

import pytest

from npm_builder.node_env import NodeEnv


def test_default_is_development() -> None:
    assert NodeEnv.default() == NodeEnv.DEVELOPMENT
    assert str(NodeEnv.default()) == "development"


@pytest.mark.parametrize(
    ("profile", "expected"),
    [
        ("release", "production"),
        ("debug", "development"),
        ("bench", "bench"),
    ],
)
def test_from_profile_maps_known_profiles(profile: str, expected: str) -> None:
    assert str(NodeEnv.from_profile({"PROFILE": profile})) == expected


def test_from_profile_returns_none_without_signal() -> None:
    assert NodeEnv.from_profile({}) is None


def test_detect_falls_back_to_default() -> None:
    assert NodeEnv.detect({}) == NodeEnv.DEVELOPMENT
    assert NodeEnv.detect({"PROFILE": "release"}) == NodeEnv.PRODUCTION


def test_detect_reads_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("PROFILE", "release")
    assert NodeEnv.detect() == NodeEnv.PRODUCTION
    monkeypatch.delenv("PROFILE")
    assert NodeEnv.detect() == NodeEnv.DEVELOPMENT


def test_custom_profile_variable_name() -> None:
    assert NodeEnv.detect({"BUILD_PROFILE": "release"}, var="BUILD_PROFILE") == NodeEnv.PRODUCTION


def test_custom_value_equality() -> None:
    assert NodeEnv.custom("production") == NodeEnv.PRODUCTION
    assert str(NodeEnv.NONE) == "none"
