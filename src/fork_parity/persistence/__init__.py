"""SQLite persistence for tracked repositories, commits and review decisions."""

from .database import ParityDB
from .patterns import InMemoryPatternStore, PatternStore, SQLitePatternStore
from .store import ParityStore

__all__ = [
    "ParityDB",
    "ParityStore",
    "PatternStore",
    "InMemoryPatternStore",
    "SQLitePatternStore",
]
