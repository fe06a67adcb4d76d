"""Runtime settings for the web API, read from PATHTRACE_* environment variables."""

import os
import secrets
from dataclasses import dataclass
from typing import Mapping, Optional

from engine.stepper import SPEED_PRESETS


_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    log_level:    str  = "INFO"
    speed:        str  = "medium"     # key into SPEED_PRESETS
    early_stop:   bool = True         # Bellman-Ford stops on a quiet pass
    max_nodes:    int  = 200          # largest graph the API will run
    max_sessions: int  = 1000         # live sessions kept, least recent evicted first
    secret_key:   str  = ""


def _env_override(env: Mapping[str, str], key: str, default: str) -> str:
    value = env.get(key)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env

    speed = _env_override(env, "PATHTRACE_SPEED", "medium").lower()
    if speed not in SPEED_PRESETS:
        raise ValueError(f"PATHTRACE_SPEED must be one of {sorted(SPEED_PRESETS)}, got {speed!r}")

    max_nodes = int(_env_override(env, "PATHTRACE_MAX_NODES", "200"))
    if max_nodes < 1:
        raise ValueError("PATHTRACE_MAX_NODES must be positive")

    max_sessions = int(_env_override(env, "PATHTRACE_MAX_SESSIONS", "1000"))
    if max_sessions < 1:
        raise ValueError("PATHTRACE_MAX_SESSIONS must be positive")

    return Settings(
        log_level=_env_override(env, "PATHTRACE_LOG_LEVEL", "INFO").upper(),
        speed=speed,
        early_stop=_env_override(env, "PATHTRACE_EARLY_STOP", "true").lower() in _TRUTHY,
        max_nodes=max_nodes,
        max_sessions=max_sessions,
        secret_key=_env_override(env, "PATHTRACE_SECRET_KEY", "") or secrets.token_hex(32),
    )
