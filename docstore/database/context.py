"""
MongoDB connection context.

This module provides:
- MongoContext: owns one Motor client bound to a named database
- Collection handles by name
- Health check utilities
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo.errors import ConfigurationError, ConnectionFailure

from .exceptions import DocstoreConnectionError

if TYPE_CHECKING:
    from docstore.config import Settings

logger = logging.getLogger(__name__)


class MongoContext:
    """
    Connection to one database instance.

    Built once at startup from a connection string and passed explicitly
    to every repository. Motor connects lazily, so an unreachable server
    only surfaces on the first operation.
    """

    def __init__(
        self,
        connection_string: str,
        *,
        database: str | None = None,
        client: AsyncIOMotorClient | None = None,
        **client_options: Any,
    ):
        self.connection_string = connection_string
        database_name = database or database_name_from_url(connection_string)
        if not database_name:
            raise DocstoreConnectionError(
                "No database name given and none found in connection string "
                f"{sanitize_mongodb_url(connection_string)}"
            )

        if client is None:
            try:
                client = AsyncIOMotorClient(connection_string, **client_options)
            except (ConfigurationError, ValueError) as e:
                raise DocstoreConnectionError(
                    f"Invalid connection string "
                    f"{sanitize_mongodb_url(connection_string)}: {e}"
                ) from e

        self._client = client
        self._database_name = database_name
        self._database = client[database_name]

        logger.info(
            f"Initialized MongoContext (database={database_name}, "
            f"url={sanitize_mongodb_url(connection_string)})"
        )

    @classmethod
    def from_settings(cls, settings: Settings, **client_options: Any) -> MongoContext:
        mongo = settings.mongo
        options: dict[str, Any] = {
            "serverSelectionTimeoutMS": mongo.server_selection_timeout_ms,
        }
        if mongo.app_name:
            options["appname"] = mongo.app_name
        options.update(client_options)
        return cls(mongo.url, database=mongo.database or None, **options)

    async def __aenter__(self) -> MongoContext:
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    @property
    def client(self) -> AsyncIOMotorClient:
        return self._client

    @property
    def database(self) -> AsyncIOMotorDatabase:
        return self._database

    @property
    def database_name(self) -> str:
        return self._database_name

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        """Return a handle to the named collection. Creates nothing on the server."""
        return self._database[name]

    async def ping(self) -> None:
        try:
            await self._client.admin.command("ping")
        except ConnectionFailure as e:
            raise DocstoreConnectionError(f"MongoDB unreachable: {e}") from e

    async def check_connection(self) -> bool:
        """
        Check if MongoDB connection is healthy.
        """
        try:
            await self.ping()
            return True
        except DocstoreConnectionError as e:
            logger.warning(f"MongoDB health check failed: {e}")
            return False

    def get_info(self) -> dict[str, Any]:
        """
        Get database connection information, with credentials hidden.
        """
        return {
            "url": sanitize_mongodb_url(self.connection_string),
            "database": self.database_name,
        }

    def close(self) -> None:
        self._client.close()
        logger.info("Closed MongoContext")


def database_name_from_url(url: str) -> str | None:
    """
    Extract the database name from ``scheme://[user:pass@]hosts/database?options``.
    """
    if "://" not in url:
        return None
    rest = url.split("://", 1)[1]
    rest = rest.split("?", 1)[0]
    # credentials may contain '/', the host list never does
    if "@" in rest:
        rest = rest.rsplit("@", 1)[1]
    if "/" not in rest:
        return None
    name = unquote(rest.split("/", 1)[1])
    return name or None


def sanitize_mongodb_url(url: str) -> str:
    """
    Hide password in MongoDB URL for safe logging.
    """
    if "@" not in url or "://" not in url:
        return url

    protocol, rest = url.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    if ":" in credentials:
        username = credentials.split(":", 1)[0]
        return f"{protocol}://{username}:***@{host}"
    return url
