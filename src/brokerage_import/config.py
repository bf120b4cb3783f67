"""Application configuration helpers."""
from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping
from urllib.parse import quote_plus

from .annual import DEFAULT_TOP_PAYERS
from .repository import MAX_WRITES_PER_BATCH

ENV_PREFIX = "BROKERAGE_IMPORT_"

# Largest number of writes committed in a single batch.
BATCH_SIZE_LIMIT = 500


def _resolve_env_file(candidate: str) -> Path | None:
    """Locate ``candidate`` in the working directory or one of its parents."""

    path = Path(candidate)
    if path.is_absolute():
        return path if path.is_file() else None

    cwd = Path.cwd().resolve()
    for directory in (cwd, *cwd.parents):
        potential = directory / path
        if potential.is_file():
            return potential
    return None


def _parse_env_file(path: Path) -> dict[str, str]:
    """Read ``KEY=value`` lines, ignoring comments and ``export`` prefixes."""

    variables: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line.removeprefix("export ").lstrip()
        key, separator, value = line.partition("=")
        if not separator or line.startswith("#"):
            continue
        variables[key.strip()] = value.strip().strip("\"'")
    return variables


def _load_profile_env(env: Mapping[str, str]) -> dict[str, str]:
    """Load environment variables from the selected profile file."""

    explicit_file = env.get(f"{ENV_PREFIX}ENV_FILE")
    profile = env.get(f"{ENV_PREFIX}ENV", "local")
    candidate = explicit_file or f".env.{profile}"

    path = _resolve_env_file(candidate)
    if path is not None:
        return _parse_env_file(path)
    return {}


def _build_database_url(env: Mapping[str, str]) -> str | None:
    """Construct a SQLAlchemy URL from discrete environment variables."""

    host = env.get(f"{ENV_PREFIX}DB_HOST")
    if not host:
        return None

    username = env.get(f"{ENV_PREFIX}DB_USERNAME")
    if not username:
        raise RuntimeError(
            f"{ENV_PREFIX}DB_USERNAME must be set when using discrete database settings"
        )

    if f"{ENV_PREFIX}DB_PASSWORD" not in env:
        raise RuntimeError(
            f"{ENV_PREFIX}DB_PASSWORD must be set when using discrete database settings"
        )

    password = env.get(f"{ENV_PREFIX}DB_PASSWORD", "")
    port = env.get(f"{ENV_PREFIX}DB_PORT", "5432")
    database = env.get(f"{ENV_PREFIX}DB_NAME", "brokerage")
    driver = env.get(f"{ENV_PREFIX}DB_DRIVER", "postgresql+psycopg")

    auth = f"{quote_plus(username)}:{quote_plus(password)}"
    port_part = f":{port}" if port else ""
    return f"{driver}://{auth}@{host}{port_part}/{database}"


def _read_number(env: Mapping[str, str], name: str, default: float, cast: type) -> float:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise RuntimeError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Runtime configuration."""

    database_url: str
    batch_size: int = MAX_WRITES_PER_BATCH
    top_payers: int = DEFAULT_TOP_PAYERS
    http_timeout: float = 30.0

    @staticmethod
    def load(env: Mapping[str, str] | None = None) -> "Settings":
        """Load settings from environment variables."""

        base_env = dict(env if env is not None else os.environ)
        file_env = _load_profile_env(base_env)
        # Environment variables set in the shell take precedence over the file.
        merged_env = {**file_env, **base_env}

        database_url = merged_env.get(f"{ENV_PREFIX}DATABASE_URL")
        if not database_url:
            database_url = _build_database_url(merged_env)
        if not database_url:
            raise RuntimeError(
                f"{ENV_PREFIX}DATABASE_URL must be set or provide discrete database settings via the env file"
            )

        batch_size = _read_number(merged_env, "BATCH_SIZE", MAX_WRITES_PER_BATCH, int)
        if not 1 <= batch_size <= BATCH_SIZE_LIMIT:
            raise RuntimeError(
                f"{ENV_PREFIX}BATCH_SIZE must be between 1 and {BATCH_SIZE_LIMIT}"
            )

        top_payers = _read_number(merged_env, "TOP_PAYERS", DEFAULT_TOP_PAYERS, int)
        if top_payers < 0:
            raise RuntimeError(f"{ENV_PREFIX}TOP_PAYERS must not be negative")

        http_timeout = _read_number(merged_env, "HTTP_TIMEOUT", 30.0, float)

        return Settings(
            database_url=database_url,
            batch_size=batch_size,
            top_payers=top_payers,
            http_timeout=http_timeout,
        )


__all__ = ["BATCH_SIZE_LIMIT", "Settings"]
