from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import mysql.connector

from ..core.constants import DEFAULT_STORE_TIMEOUT_SECONDS


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    timeout_seconds: int = DEFAULT_STORE_TIMEOUT_SECONDS

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], *, timeout_seconds: int = DEFAULT_STORE_TIMEOUT_SECONDS) -> "DBConfig":
        """Build from a settings `DB_CONFIG` dict; host, user, password and database are required."""
        missing = [k for k in ("host", "user", "password", "database") if k not in raw]
        if missing:
            raise ValueError(f"DB_CONFIG is missing: {', '.join(missing)}")
        return cls(
            host=str(raw["host"]),
            port=int(raw.get("port", 3306)),
            user=str(raw["user"]),
            password=str(raw["password"]),
            database=str(raw["database"]),
            timeout_seconds=int(timeout_seconds),
        )


class DatabaseConnection:
    """Connection factory for the tree store.

    Each store call opens a short-lived connection with a bounded connect
    timeout and lock wait, so a stuck batch surfaces as a store timeout.
    One shared factory per config.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None or cls._instance.config != config:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        timeout = int(self._config.timeout_seconds)
        conn = mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=timeout,
            autocommit=False,
        )
        cur = conn.cursor()
        try:
            cur.execute("SET SESSION innodb_lock_wait_timeout = %s", (timeout,))
        finally:
            cur.close()
        return conn
