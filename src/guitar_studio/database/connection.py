from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from pymongo import MongoClient
from pymongo.database import Database

from ..core.constants import DEFAULT_DB_NAME

logger = logging.getLogger(__name__)

_DB_NAME_IN_URI = re.compile(r"mongodb(\+srv)?://[^/]+/([^?]+)")


def database_name_from_uri(uri: str, explicit: Optional[str] = None) -> str:
    """Resolve the database name.

    Order: explicit name (MONGODB_DB_NAME), the path segment of the URI,
    then the fixed default.
    """

    if explicit:
        return explicit
    match = _DB_NAME_IN_URI.match(uri or "")
    if match and match.group(2):
        return match.group(2)
    return DEFAULT_DB_NAME


@dataclass
class MongoConfig:
    uri: str
    db_name: Optional[str] = None

    @property
    def database(self) -> str:
        return database_name_from_uri(self.uri, self.db_name)


class DatabaseConnection:
    """Singleton-like MongoClient holder.

    One instance per (uri, database); MongoClient keeps its own connection pool.
    """

    _instances: Dict[Tuple[str, str], "DatabaseConnection"] = {}

    def __init__(self, config: MongoConfig, client: Optional[MongoClient] = None):
        self._config = config
        self._client = client

    @classmethod
    def get_instance(cls, config: MongoConfig) -> "DatabaseConnection":
        key = (config.uri, config.database)
        if key not in cls._instances:
            cls._instances[key] = DatabaseConnection(config)
        return cls._instances[key]

    @property
    def client(self) -> MongoClient:
        if self._client is None:
            logger.info("Connecting to MongoDB database %s", self._config.database)
            self._client = MongoClient(self._config.uri)
        return self._client

    def db(self) -> Database:
        return self.client[self._config.database]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
