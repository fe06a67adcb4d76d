"""
Tests for environment-driven settings.
"""

import pytest

from config import Settings, load_settings


def test_defaults():
    s = load_settings({})
    assert s.log_level == "INFO"
    assert s.speed == "medium"
    assert s.early_stop is True
    assert s.max_nodes == 200
    assert s.max_sessions == 1000
    assert len(s.secret_key) == 64


def test_overrides():
    s = load_settings({
        "PATHTRACE_LOG_LEVEL": "debug",
        "PATHTRACE_SPEED": "Fast",
        "PATHTRACE_EARLY_STOP": "no",
        "PATHTRACE_MAX_NODES": "50",
        "PATHTRACE_MAX_SESSIONS": "8",
        "PATHTRACE_SECRET_KEY": "abc",
    })
    assert s == Settings(log_level="DEBUG", speed="fast", early_stop=False, max_nodes=50,
                        max_sessions=8, secret_key="abc")


def test_blank_values_fall_back():
    s = load_settings({"PATHTRACE_SPEED": "  ", "PATHTRACE_MAX_NODES": ""})
    assert s.speed == "medium"
    assert s.max_nodes == 200


@pytest.mark.parametrize("env", [
    {"PATHTRACE_SPEED": "ludicrous"},
    {"PATHTRACE_MAX_NODES": "0"},
    {"PATHTRACE_MAX_NODES": "many"},
    {"PATHTRACE_MAX_SESSIONS": "0"},
])
def test_invalid_values(env):
    with pytest.raises(ValueError):
        load_settings(env)
