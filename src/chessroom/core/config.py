"""
Configuration loaded from the environment.

- Every setting can be overridden with a CHESSROOM_* environment variable.
- A .env file (searched from the working directory upwards) is loaded first; variables already set in the environment win.
- Exposes SETTINGS with the values used across the package (timer lengths, store location, log level).
"""

import os
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from dotenv import find_dotenv, load_dotenv

from chessroom.core.exceptions import InvalidRequestError

ENV_PREFIX = "CHESSROOM_"


def _get(
    env: Mapping[str, str],
    name: str,
    default: Any,
    cast: Callable[[str], Any] | None = None,
) -> Any:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    if cast is None:
        return raw
    try:
        return cast(raw)
    except ValueError as exc:
        raise InvalidRequestError(
            f"Cannot interpret {ENV_PREFIX}{name}={raw!r}: {exc}"
        ) from exc


@dataclass(frozen=True)
class Settings:
    # Timers
    bot_delay_s: float = 0.5
    poll_interval_s: float = 1.0

    # Shared store
    database_url: str = "sqlite:///chessroom.db"
    key_prefix: str = "room:"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        if env is None:
            load_dotenv(find_dotenv(usecwd=True))
            env = os.environ
        return cls(
            bot_delay_s=_get(env, "BOT_DELAY_S", cls.bot_delay_s, cast=float),
            poll_interval_s=_get(env, "POLL_INTERVAL_S", cls.poll_interval_s, cast=float),
            database_url=_get(env, "DATABASE_URL", cls.database_url),
            key_prefix=_get(env, "KEY_PREFIX", cls.key_prefix),
            log_level=_get(env, "LOG_LEVEL", cls.log_level).upper(),
        )


SETTINGS = Settings.from_env()
