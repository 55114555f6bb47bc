"""
Configuration from the environment.

    BOOKIFY_STORE          memory | sql                  (memory)
    BOOKIFY_DATABASE_URL   SQLAlchemy async URL           (sqlite+aiosqlite:///:memory:)
    BOOKIFY_SEED_CATALOG   seed an empty catalog          (true)
    BOOKIFY_LOG_LEVEL      debug | info | warning | ...   (info)
    BOOKIFY_LOG_JSON       JSON lines vs console output   (true)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from bookify._log import configure_logging, parse_level

STORES = ("memory", "sql")
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _flag(environ: Mapping[str, str], key: str, default: bool) -> bool:
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{key} must be a boolean, got {raw!r}")


@dataclass(frozen=True, slots=True)
class Settings:
    store: str = "memory"
    database_url: str = DEFAULT_DATABASE_URL
    seed_catalog: bool = True
    log_level: str = "info"
    log_json: bool = True

    def __post_init__(self) -> None:
        if self.store not in STORES:
            raise ValueError(f"store must be one of {STORES}, got {self.store!r}")
        parse_level(self.log_level)

    def apply_logging(self) -> None:
        configure_logging(self.log_level, json=self.log_json)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> Settings:
        return cls(
            store=environ.get("BOOKIFY_STORE", "memory").strip().lower(),
            database_url=environ.get("BOOKIFY_DATABASE_URL", DEFAULT_DATABASE_URL),
            seed_catalog=_flag(environ, "BOOKIFY_SEED_CATALOG", True),
            log_level=environ.get("BOOKIFY_LOG_LEVEL", "info").strip().lower(),
            log_json=_flag(environ, "BOOKIFY_LOG_JSON", True),
        )


__all__ = ("Settings", "STORES", "DEFAULT_DATABASE_URL")
