"""
Database package for cloneeval.
Provides the clone store interface and its SQLite and in-memory implementations.
"""

from .base import CloneStore
from .clone_repository import SQLiteCloneStore
from .connection_manager import DatabaseConnectionManager
from .decorators import with_retry
from .memory_store import MemoryCloneStore
from .schema_manager import SchemaManager

__all__ = [
    'CloneStore',
    'SQLiteCloneStore',
    'MemoryCloneStore',
    'DatabaseConnectionManager',
    'SchemaManager',
    'with_retry'
]
