from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class ClientSettings:
    api_url: str = "http://localhost:8000"
    # Characters per team requested when creating a game.
    team_size: int = 2
    # How long to wait for a key before polling the backend again.
    poll_interval_ms: int = 500
    http_timeout: float = 10.0
    # curses owns the terminal, so logs go to a file.
    log_file: str = "pewcraft-client.log"
    log_level: str = "INFO"
    offer_join: bool = True


def _int(env: Mapping[str, str], name: str, default: int, *, minimum: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    if raw.strip().casefold() in _TRUTHY:
        return True
    if raw.strip().casefold() in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def settings_from_env(env: Mapping[str, str] | None = None) -> ClientSettings:
    env = os.environ if env is None else env
    defaults = ClientSettings()

    raw_timeout = env.get("PEWCRAFT_HTTP_TIMEOUT")
    try:
        http_timeout = float(raw_timeout) if raw_timeout else defaults.http_timeout
    except ValueError as e:
        raise ValueError(f"PEWCRAFT_HTTP_TIMEOUT must be a number, got {raw_timeout!r}") from e

    log_level = env.get("PEWCRAFT_LOG_LEVEL", defaults.log_level).upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ValueError(f"PEWCRAFT_LOG_LEVEL is not a logging level: {log_level!r}")

    return ClientSettings(
        api_url=env.get("PEWCRAFT_API_URL", defaults.api_url),
        team_size=_int(env, "PEWCRAFT_TEAM_SIZE", defaults.team_size, minimum=1),
        poll_interval_ms=_int(env, "PEWCRAFT_POLL_INTERVAL_MS", defaults.poll_interval_ms, minimum=1),
        http_timeout=http_timeout,
        log_file=env.get("PEWCRAFT_LOG_FILE", defaults.log_file),
        log_level=log_level,
        offer_join=_bool(env, "PEWCRAFT_OFFER_JOIN", defaults.offer_join),
    )


def load_dotenv_for_client(project_root: Path | None = None) -> None:
    """Load a `.env` next to the project without overriding the real environment."""

    root = project_root or Path.cwd()
    env_path = root / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)
