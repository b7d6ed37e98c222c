"""Repository classes responsible for data persistence."""

from .in_memory import build_memory_stores
from .mongo import build_mongo_stores, ensure_indexes
from .protocols import Stores

__all__ = [
    "Stores",
    "build_memory_stores",
    "build_mongo_stores",
    "ensure_indexes",
]
