from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from astrofolio_catalog.export import DEFAULT_TIMEOUT_SECONDS
from astrofolio_catalog.importer import DEFAULT_MAX_LOGGED_ERRORS
from astrofolio_catalog.search import DEFAULT_SEARCH_LIMIT
from astrofolio_catalog.store import DEFAULT_BATCH_SIZE

ENV_DB_PATH = "ASTROFOLIO_CATALOG_DB"
ENV_BATCH_SIZE = "ASTROFOLIO_BATCH_SIZE"
ENV_SEARCH_LIMIT = "ASTROFOLIO_SEARCH_LIMIT"
ENV_MAX_LOGGED_ERRORS = "ASTROFOLIO_MAX_LOGGED_ERRORS"
ENV_HTTP_TIMEOUT = "ASTROFOLIO_HTTP_TIMEOUT"


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass
class CatalogConfig:
    db_path: Path = Path("data/astrofolio_catalog.db")
    batch_size: int = DEFAULT_BATCH_SIZE
    search_limit: int = DEFAULT_SEARCH_LIMIT
    max_logged_errors: int = DEFAULT_MAX_LOGGED_ERRORS
    http_timeout_s: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        self.db_path = Path(self.db_path)
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.search_limit < 1:
            raise ValueError("search_limit must be at least 1")
        if self.max_logged_errors < 0:
            raise ValueError("max_logged_errors cannot be negative")
        if self.http_timeout_s <= 0:
            raise ValueError("http_timeout_s must be positive")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "CatalogConfig":
        source = os.environ if env is None else env
        defaults = cls()
        db_path = source.get(ENV_DB_PATH, "").strip()
        return cls(
            db_path=Path(db_path) if db_path else defaults.db_path,
            batch_size=_env_int(source, ENV_BATCH_SIZE, defaults.batch_size),
            search_limit=_env_int(source, ENV_SEARCH_LIMIT, defaults.search_limit),
            max_logged_errors=_env_int(source, ENV_MAX_LOGGED_ERRORS, defaults.max_logged_errors),
            http_timeout_s=_env_float(source, ENV_HTTP_TIMEOUT, defaults.http_timeout_s),
        )

    def with_overrides(self, **overrides: Any) -> "CatalogConfig":
        """Apply CLI overrides, ignoring options that were not given."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})
