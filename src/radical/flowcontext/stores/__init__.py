"""Context stores with a plugin-style construction path.

The in-memory store is always available and backs the reserved fallback name.
Other stores are located by the factory from their declaration and registered
by name in a StoreRegistry.
"""

from __future__ import annotations

from .base import BaseContextStore, ContextStoreProtocol
from .factory import StoreFactory, factory
from .memory import MemoryContextStore
from .registry import StoreRegistry

__all__ = [
    "BaseContextStore",
    "ContextStoreProtocol",
    "MemoryContextStore",
    "StoreFactory",
    "StoreRegistry",
    "factory",
]
