"""Storage backends for the Twitter video API."""

from .base_store import VideoStore
from .factory import build_store
from .hosted_store import HostedStore
from .memory_store import MemoryStore
from .sql_store import SQLStore

__all__ = ["VideoStore", "build_store", "HostedStore", "MemoryStore", "SQLStore"]
