from enum import Enum
from typing import Union


class ReservedStore(str, Enum):
    """Store names with a fixed meaning inside the registry.

    FALLBACK is the always-present in-memory store that serves every call made
    without a store name. DEFAULT is the store addressed when a caller supplies a
    completion callback but no store name; it may be a concrete store or an alias
    for another declared store.
    """

    FALLBACK = "_"
    DEFAULT = "default"

    @classmethod
    def is_reserved(cls, name: Union[str, "ReservedStore"]) -> bool:
        return cls.of(name) is not None

    @classmethod
    def of(cls, name: Union[str, "ReservedStore"]):
        """Return the matching member for ``name`` or None."""
        try:
            return cls(name)
        except ValueError:
            return None


class ContextState(Enum):
    UNINITIALIZED = "UNINITIALIZED"
    INITIALIZED = "INITIALIZED"
    LOADED = "LOADED"
    RUNNING = "RUNNING"
    CLOSED = "CLOSED"


GLOBAL_SCOPE = "global"

# Separates the node id from the flow id in a scope identifier
SCOPE_SEPARATOR = ":"

# Top-level settings copied into every store's config under "settings"
APPROVED_SETTINGS = ("user_dir",)

# Built-in store specifications: name -> module_path:attribute
BUILTIN_STORES = {
    "memory": "radical.flowcontext.stores.memory:MemoryContextStore",
}
