"""
MongoDB metadata extractor using pymongo.

Lists databases and collections and fetches bounded document samples.
Read-only: nothing here writes to the inspected database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from mongo_erd.exceptions import ConnectivityError, SamplingError

logger = logging.getLogger(__name__)

# Databases that hold server internals rather than user data
SYSTEM_DATABASES = {"admin", "local", "config"}

# Reserved collection namespace
SYSTEM_COLLECTION_PREFIX = "system."


@dataclass
class DatabaseInfo:
    """A logical database and its on-disk size."""
    name: str
    size_on_disk: int = 0

    @property
    def label(self) -> str:
        return f"{self.name} ({format_bytes(self.size_on_disk)})"


def format_bytes(size: int) -> str:
    """Format a byte count as a human-readable size."""
    if not size:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    i = 0
    while size >= 1024 ** (i + 1) and i < len(units) - 1:
        i += 1
    value = round(size / 1024 ** i, 2)
    return f"{value:g} {units[i]}"


class MongoMetadataExtractor:
    """
    Reads collection metadata and document samples from MongoDB.

    Usage:
        with MongoMetadataExtractor("mongodb://localhost:27017") as extractor:
            names = extractor.list_collections("shop")
            docs = extractor.sample_collection("shop", names[0], limit=100)
    """

    def __init__(
        self,
        url: str,
        server_selection_timeout_ms: Optional[int] = None,
        client: Optional[Any] = None,
    ):
        """
        Initialize extractor.

        Args:
            url: MongoDB connection string
            server_selection_timeout_ms: Optional driver server selection timeout
            client: Pre-built client (mainly for tests)
        """
        self.url = url
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self._client = client

    def connect(self) -> None:
        """Establish the connection and verify the server answers."""
        try:
            if self._client is None:
                kwargs: Dict[str, Any] = {}
                if self.server_selection_timeout_ms is not None:
                    kwargs["serverSelectionTimeoutMS"] = self.server_selection_timeout_ms
                # Malformed URLs raise InvalidURI/ConfigurationError here
                self._client = MongoClient(self.url, **kwargs)
            self._client.admin.command("ping")
        except PyMongoError as e:
            self.disconnect()
            raise ConnectivityError(f"Cannot connect to MongoDB: {e}") from e

        logger.info("Connected to MongoDB")

    def disconnect(self) -> None:
        """Close the connection."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    @property
    def client(self):
        if self._client is None:
            self.connect()
        return self._client

    def list_databases(self) -> List[DatabaseInfo]:
        """List user databases with their on-disk size."""
        try:
            databases = list(self.client.list_databases())
        except PyMongoError as e:
            raise ConnectivityError(f"Cannot list databases: {e}") from e

        return [
            DatabaseInfo(name=db["name"], size_on_disk=int(db.get("sizeOnDisk", 0) or 0))
            for db in databases
            if db["name"] not in SYSTEM_DATABASES
        ]

    def list_collections(self, db_name: str) -> List[str]:
        """List collection names of a database, sorted, without system collections."""
        try:
            names = self.client[db_name].list_collection_names()
        except PyMongoError as e:
            raise ConnectivityError(f"Cannot list collections of '{db_name}': {e}") from e

        return sorted(n for n in names if not n.startswith(SYSTEM_COLLECTION_PREFIX))

    def sample_collection(self, db_name: str, collection: str, limit: int = 100) -> List[Dict[str, Any]]:
        """
        Fetch up to ``limit`` documents from a collection.

        Args:
            db_name: Database name
            collection: Collection name
            limit: Maximum number of documents

        Returns:
            List of raw documents in natural order
        """
        try:
            docs = list(self.client[db_name][collection].find({}).limit(limit))
        except PyMongoError as e:
            raise SamplingError(collection, str(e)) from e

        logger.debug(f"Sampled {len(docs)} documents from {db_name}.{collection}")
        return docs
