from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import mysql.connector

from ..core.constants import (
    DEFAULT_DB_CONNECT_TIMEOUT,
    DEFAULT_DB_LOCK_WAIT_TIMEOUT,
    DEFAULT_DB_STATEMENT_TIMEOUT_MS,
)

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = DEFAULT_DB_CONNECT_TIMEOUT
    lock_wait_timeout: int = DEFAULT_DB_LOCK_WAIT_TIMEOUT
    statement_timeout_ms: int = DEFAULT_DB_STATEMENT_TIMEOUT_MS

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
            connect_timeout=int(db_config.get("connect_timeout", DEFAULT_DB_CONNECT_TIMEOUT)),
            lock_wait_timeout=int(db_config.get("lock_wait_timeout", DEFAULT_DB_LOCK_WAIT_TIMEOUT)),
            statement_timeout_ms=int(db_config.get("statement_timeout_ms", DEFAULT_DB_STATEMENT_TIMEOUT_MS)),
        )


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: We create short-lived connections per operation. Every connection is
    bounded: socket timeout on connect/read, InnoDB lock wait and a per-statement
    execution cap, so no store call can hang.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        conn = mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=int(self._config.connect_timeout),
            autocommit=False,
        )
        cur = conn.cursor()
        try:
            cur.execute("SET SESSION innodb_lock_wait_timeout = %s", (int(self._config.lock_wait_timeout),))
            cur.execute("SET SESSION max_execution_time = %s", (int(self._config.statement_timeout_ms),))
        finally:
            cur.close()
        return conn
