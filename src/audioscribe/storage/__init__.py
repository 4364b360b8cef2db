"""Job storage backends."""

from audioscribe.storage.memory import InMemoryJobStorage
from audioscribe.storage.sqlite import SQLiteJobStorage

__all__ = ["InMemoryJobStorage", "SQLiteJobStorage"]
