from __future__ import annotations

import importlib.metadata as importlib_metadata

from .constants import ContextState, ReservedStore
from .errors import (
    CallbackTypeError,
    ConfigError,
    ContextError,
    ContextStoreError,
    LifecycleError,
    ModuleLoadError,
)
from .manager import ContextManager
from .scope import ContextScope
from .settings import ContextSettings, StoreDeclaration
from .stores import (
    BaseContextStore,
    ContextStoreProtocol,
    MemoryContextStore,
    StoreFactory,
    StoreRegistry,
    factory,
)

__version__ = importlib_metadata.version("radical.flowcontext")

__all__ = [
    "BaseContextStore",
    "CallbackTypeError",
    "ConfigError",
    "ContextError",
    "ContextManager",
    "ContextScope",
    "ContextSettings",
    "ContextState",
    "ContextStoreError",
    "ContextStoreProtocol",
    "LifecycleError",
    "MemoryContextStore",
    "ModuleLoadError",
    "ReservedStore",
    "StoreDeclaration",
    "StoreFactory",
    "StoreRegistry",
    "factory",
]
