from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping

import mysql.connector
from mysql.connector import pooling
from mysql.connector.errors import PoolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 5

    @classmethod
    def from_mapping(cls, db_config: Mapping[str, Any]) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "office_attendance")),
            pool_size=int(db_config.get("pool_size", 5)),
        )

    def connect_args(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "database": self.database,
        }


class DatabaseConnection:
    """Connection source shared by the MySQL stores, one per DB config.

    With ``pool_size > 0`` connections are borrowed from a mysql-connector
    pool and ``close()`` returns them. An exhausted pool or ``pool_size=0``
    means a direct connection for that call.
    """

    _instances: ClassVar[Dict[DBConfig, "DatabaseConnection"]] = {}
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool = None
        if config.pool_size > 0:
            self._pool = pooling.MySQLConnectionPool(
                pool_name=f"office_attendance_{config.database}",
                pool_size=config.pool_size,
                pool_reset_session=True,
                **config.connect_args(),
            )

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        with cls._lock:
            instance = cls._instances.get(config)
            if instance is None:
                instance = cls._instances[config] = cls(config)
            return instance

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self):
        if self._pool is not None:
            try:
                return self._pool.get_connection()
            except PoolError:
                logger.warning(
                    "Connection pool %s exhausted (size %d), opening a direct connection",
                    self._pool.pool_name, self._config.pool_size,
                )
        return mysql.connector.connect(**self._config.connect_args())
