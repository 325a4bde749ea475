"""
db/config.py

Environment-driven database configuration.

URL resolution order:
  1. DATABASE_URL
  2. CLOUD_DATABASE_URL when ENVIRONMENT is prod, production, staging or cloud
  3. LOCAL_DATABASE_URL

Pool tuning comes from SQL_ECHO, DB_POOL_SIZE, DB_MAX_OVERFLOW and
DB_POOL_RECYCLE.  Values in ``.env`` / ``.env.local`` at the project root
are used only for variables the process environment does not already set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_ENV_FILES = (".env", ".env.local")
_CLOUD_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_files(root: Path = _PROJECT_ROOT) -> None:
    """
    Copy KEY=VALUE pairs from the project's env files into ``os.environ``
    without overwriting variables that are already set.
    """
    for filename in _ENV_FILES:
        env_path = root / filename
        if not env_path.exists():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


def normalize_postgres_url(url: str) -> str:
    """Rewrite ``postgres://`` / ``postgresql://`` to the psycopg driver form."""
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def redact_database_url(url: str) -> str:
    """Replace the password in *url* with ``***`` for log output."""
    parts = urlsplit(url)
    if parts.password is None:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return urlunsplit(parts._replace(netloc=netloc))


def resolve_database_url() -> str:
    """
    Return the normalized database URL.

    Raises RuntimeError when no URL variable is configured.
    """
    load_env_files()

    direct_url = os.getenv("DATABASE_URL")
    if direct_url:
        return normalize_postgres_url(direct_url)

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    cloud_url = os.getenv("CLOUD_DATABASE_URL")
    if environment in _CLOUD_ENVIRONMENTS and cloud_url:
        return normalize_postgres_url(cloud_url)

    local_url = os.getenv("LOCAL_DATABASE_URL")
    if local_url:
        return normalize_postgres_url(local_url)

    raise RuntimeError(
        "No database URL configured. Set DATABASE_URL, or configure "
        "LOCAL_DATABASE_URL / CLOUD_DATABASE_URL."
    )


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle: int = 1800


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
    """
    Cached connection settings; only PostgreSQL URLs are accepted.
    """
    url = resolve_database_url()
    if not url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")
    return DatabaseSettings(
        url=url,
        echo=_get_bool_env("SQL_ECHO"),
        pool_size=max(1, _get_int_env("DB_POOL_SIZE", 5)),
        max_overflow=max(0, _get_int_env("DB_MAX_OVERFLOW", 10)),
        pool_recycle=_get_int_env("DB_POOL_RECYCLE", 1800),
    )
