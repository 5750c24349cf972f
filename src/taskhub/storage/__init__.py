"""
Persistence adapter: versioned envelopes over a pluggable key/value backend.
"""
from .backends import InMemoryBackend, SqliteBackend
from .manager import METADATA_ENTITY, StorageManager

__all__ = [
    "InMemoryBackend",
    "METADATA_ENTITY",
    "SqliteBackend",
    "StorageManager",
]
