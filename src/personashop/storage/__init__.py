"""Key-value storage for behavior persistence and session markers."""

from personashop.storage.base import KeyValueStore
from personashop.storage.file_store import FileKeyValueStore
from personashop.storage.memory_store import InMemoryKeyValueStore

__all__ = ["KeyValueStore", "FileKeyValueStore", "InMemoryKeyValueStore"]
