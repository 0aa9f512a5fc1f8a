"""
Process configuration, read once from environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from . import db

STORE_POSTGRES = "postgres"
STORE_STUB = "stub"
ALLOWED_STORES = {STORE_POSTGRES, STORE_STUB}

DEFAULT_POOL_MIN_SIZE = 1
DEFAULT_POOL_MAX_SIZE = 5
DEFAULT_COMMAND_TIMEOUT = 30.0
DEFAULT_PORT = 8080

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    album_store: str = STORE_POSTGRES
    database_url: str = ""
    reset_on_startup: bool = True
    pool_min_size: int = DEFAULT_POOL_MIN_SIZE
    pool_max_size: int = DEFAULT_POOL_MAX_SIZE
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name).lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    return default


def database_url() -> str:
    """
    DATABASE_URL wins; DB_DSN is accepted for older deployments.
    Returns "" when neither is set.
    """
    url = _env("DATABASE_URL") or _env("DB_DSN")
    if not url:
        return ""
    return db.sanitize_database_url(url)


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Raises RuntimeError when the configuration cannot serve traffic, so the
    process stops before the server starts accepting requests.
    """
    store = (_env("ALBUM_STORE") or STORE_POSTGRES).lower()
    if store not in ALLOWED_STORES:
        raise RuntimeError(f"ALBUM_STORE must be one of {sorted(ALLOWED_STORES)}, got '{store}'.")

    url = database_url()
    if store == STORE_POSTGRES and not url:
        raise RuntimeError("DATABASE_URL is not set.")

    min_size = max(1, _env_int("DB_POOL_MIN_SIZE", DEFAULT_POOL_MIN_SIZE))
    max_size = max(min_size, _env_int("DB_POOL_MAX_SIZE", DEFAULT_POOL_MAX_SIZE))

    timeout = _env_float("DB_COMMAND_TIMEOUT", DEFAULT_COMMAND_TIMEOUT)
    if timeout <= 0:
        timeout = DEFAULT_COMMAND_TIMEOUT

    return Settings(
        album_store=store,
        database_url=url,
        reset_on_startup=_env_bool("ALBUMS_RESET_ON_STARTUP", True),
        pool_min_size=min_size,
        pool_max_size=max_size,
        command_timeout=timeout,
        log_level=(_env("LOG_LEVEL") or "INFO").upper(),
        host=_env("HOST") or "0.0.0.0",
        port=_env_int("PORT", DEFAULT_PORT),
    )
