from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from sqlalchemy.engine import URL, make_url


logger = logging.getLogger("uvicorn.error")

_DATABASE_URL_ENV = "DATABASE_URL"
_API_PORT_ENV = "API_PORT"
_API_HOST_ENV = "API_HOST"
_WAIT_TIMEOUT_ENV = "TOP20_DB_WAIT_TIMEOUT"

_HOSTED_PORT_DEFAULT = 8080
_LOCAL_PORT_DEFAULT = 3000
_DB_PORT_DEFAULT = 5432
_WAIT_TIMEOUT_DEFAULT = 60.0


@dataclass(frozen=True)
class Settings:
    database_url: str
    api_host: str = "0.0.0.0"
    api_port: int = _LOCAL_PORT_DEFAULT
    db_wait_timeout: float = _WAIT_TIMEOUT_DEFAULT

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.1f", name, raw, default)
        return default
    return max(0.0, value)


def normalize_database_url(raw: str) -> str:
    """Point bare ``postgres://`` URLs (Heroku, Fly.io) at the psycopg driver."""
    if raw.startswith("postgres://"):
        return raw.replace("postgres://", "postgresql+psycopg://", 1)
    if raw.startswith("postgresql://"):
        return raw.replace("postgresql://", "postgresql+psycopg://", 1)
    return raw


def _discrete_database_url(env: Mapping[str, str]) -> str:
    url = URL.create(
        "postgresql+psycopg",
        username=env.get("DB_USER") or None,
        password=env.get("DB_PASSWORD") or None,
        host=env.get("DB_HOST") or "localhost",
        port=_env_int(env, "DB_PORT", _DB_PORT_DEFAULT),
        database=env.get("DB_NAME") or None,
        query={"sslmode": "disable"},
    )
    return url.render_as_string(hide_password=False)


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Resolve settings from ``DATABASE_URL`` or the discrete ``DB_*`` variables.

    The listening port defaults to 8080 when a connection URL is provided
    (hosted deployments) and 3000 for the local ``DB_*`` mode.
    """
    env = os.environ if env is None else env
    raw_url = env.get(_DATABASE_URL_ENV)
    if raw_url:
        database_url = normalize_database_url(raw_url)
        port_default = _HOSTED_PORT_DEFAULT
    else:
        database_url = _discrete_database_url(env)
        port_default = _LOCAL_PORT_DEFAULT

    # Raises ArgumentError for malformed URLs.
    make_url(database_url)

    return Settings(
        database_url=database_url,
        api_host=env.get(_API_HOST_ENV) or "0.0.0.0",
        api_port=_env_int(env, _API_PORT_ENV, port_default),
        db_wait_timeout=_env_float(env, _WAIT_TIMEOUT_ENV, _WAIT_TIMEOUT_DEFAULT),
    )
