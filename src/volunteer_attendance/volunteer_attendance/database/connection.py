from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar, Dict

import mysql.connector

logger = logging.getLogger(__name__)

# Instants are written as naive UTC; keep the session zone aligned with that.
SESSION_TIME_ZONE = "+00:00"


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = 10

    @classmethod
    def from_settings(cls, settings: dict) -> "DBConfig":
        return cls(
            host=str(settings["host"]),
            port=int(settings.get("port", 3306)),
            user=str(settings["user"]),
            password=str(settings["password"]),
            database=str(settings["database"]),
            connection_timeout=int(settings.get("connection_timeout", 10)),
        )


class DatabaseConnection:
    """Opens one short-lived connection per repository operation.

    Instances are shared per DBConfig; the connect timeout bounds how long a
    read can hang before it surfaces as a store failure.
    """

    _instances: ClassVar[Dict[DBConfig, "DatabaseConnection"]] = {}

    def __init__(self, config: DBConfig):
        self.config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if config not in cls._instances:
            logger.debug("New connection factory for %s@%s/%s", config.user, config.host, config.database)
            cls._instances[config] = cls(config)
        return cls._instances[config]

    def connect(self):
        conn = mysql.connector.connect(
            host=self.config.host,
            port=self.config.port,
            user=self.config.user,
            password=self.config.password,
            database=self.config.database,
            connection_timeout=self.config.connection_timeout,
        )
        conn.time_zone = SESSION_TIME_ZONE
        return conn
