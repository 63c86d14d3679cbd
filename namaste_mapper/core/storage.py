"""
Durable blob storage for the session store.

Each blob is a named JSON document (the record store keeps one array of
patients and one array of mapping records). Two backends are provided:
- FileBlobStorage: one ``<name>.json`` file per blob in a directory (default)
- MongoBlobStorage: one document per blob in a MongoDB collection

Backends raise StorageReadError / StorageWriteError; callers decide what to do.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .config import Settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for durable storage failures."""


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass


class BlobStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def close(self) -> None:
        ...


class FileBlobStorage:
    """Stores each blob as a UTF-8 text file named after its key."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageReadError(f"Failed to read blob {key}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        # Write to a sibling temp file and rename so a crash never leaves half a blob
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, self._path(key))
        except OSError as e:
            raise StorageWriteError(f"Failed to write blob {key}: {e}") from e

    def close(self) -> None:
        pass


class MongoBlobStorage:
    """Stores each blob as ``{_id: key, value: <json text>}`` in one collection."""

    def __init__(self, collection: Collection, client: Optional[MongoClient] = None):
        self.collection = collection
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoBlobStorage":
        if not settings.storage.mongo_uri:
            raise ValueError("STORAGE_MONGO_URI must be set when STORAGE_BACKEND=mongo")
        logger.info("mongo_connect", extra={"database": settings.storage.mongo_database})
        client = MongoClient(settings.storage.mongo_uri, appname=settings.APP_NAME)
        collection = client[settings.storage.mongo_database][settings.storage.mongo_collection]
        return cls(collection, client)

    def get_item(self, key: str) -> Optional[str]:
        try:
            doc = self.collection.find_one({"_id": key})
        except PyMongoError as e:
            raise StorageReadError(f"Failed to read blob {key}: {e}") from e
        return doc["value"] if doc else None

    def set_item(self, key: str, value: str) -> None:
        try:
            self.collection.update_one({"_id": key}, {"$set": {"value": value}}, upsert=True)
        except PyMongoError as e:
            raise StorageWriteError(f"Failed to write blob {key}: {e}") from e

    def close(self) -> None:
        if self._client is not None:
            try:
                self._client.close()
            finally:
                self._client = None


def create_storage(settings: Settings) -> BlobStorage:
    if settings.storage.backend == "mongo":
        return MongoBlobStorage.from_settings(settings)
    return FileBlobStorage(settings.storage.directory)
