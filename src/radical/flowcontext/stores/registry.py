"""Registry of named context store instances.

The registry maps store names to constructed store instances and resolves the
store that serves a read or write. Two names are reserved: ``"_"`` is the
in-memory fallback registered at construction time, and ``"default"`` is the
store used when a caller does not name one explicitly.
"""

from __future__ import annotations

import logging
from typing import Iterator, Union

from ..constants import ReservedStore
from ..errors import ConfigError, ContextError
from .base import ContextStoreProtocol

logger = logging.getLogger(__name__)


class StoreRegistry:
    """Name to instance mapping for context stores.

    The registry is owned by a ContextManager; only the manager registers stores
    and binds the default alias. Resolution is synchronous and performs no I/O.
    """

    def __init__(self, fallback: ContextStoreProtocol):
        """Initialize the registry with its fallback store.

        Args:
            fallback: The in-memory store served under the reserved name ``"_"``.
        """
        self._stores: dict[str, ContextStoreProtocol] = {
            ReservedStore.FALLBACK.value: fallback
        }
        self._default_alias: Union[str, None] = None

    @property
    def fallback(self) -> ContextStoreProtocol:
        return self._stores[ReservedStore.FALLBACK.value]

    @property
    def default_alias(self) -> Union[str, None]:
        """Name of the store that ``"default"`` aliases, if it is an alias."""
        return self._default_alias

    def register(self, name: str, store: ContextStoreProtocol) -> None:
        """Register a constructed store under ``name``.

        Args:
            name: Store identifier. A concrete store may be named ``"default"``.
            store: Store instance.

        Raises:
            ConfigError: If ``name`` is the reserved fallback name or is taken.
        """
        if ReservedStore.of(name) is ReservedStore.FALLBACK:
            raise ConfigError(
                f"Context storage name '{ReservedStore.FALLBACK.value}' is reserved"
            )
        if name in self._stores:
            raise ConfigError(f"Context storage '{name}' is already registered")

        self._stores[name] = store
        logger.debug(f"Registered context store '{name}': {type(store).__name__}")

    def alias_default(self, target: str) -> None:
        """Bind ``"default"`` to the store registered as ``target``.

        Raises:
            ConfigError: If ``target`` is not registered or is itself reserved,
                or if ``"default"`` is already bound.
        """
        if ReservedStore.is_reserved(target):
            raise ConfigError(
                f"Invalid default context storage '{target}': "
                "reserved names cannot be aliased"
            )
        if target not in self._stores:
            raise ConfigError(
                f"Invalid default context storage '{target}': "
                "no such storage is configured"
            )
        if ReservedStore.DEFAULT.value in self._stores:
            raise ConfigError("Default context storage is already configured")

        self._stores[ReservedStore.DEFAULT.value] = self._stores[target]
        self._default_alias = target
        logger.debug(f"Default context store aliased to '{target}'")

    def resolve(self, name: Union[str, ReservedStore]) -> ContextStoreProtocol:
        """Return the store that serves ``name``.

        Unknown names are served by the ``"default"`` store when one exists.

        Raises:
            ContextError: If ``name`` is unknown and no default is configured.
        """
        if isinstance(name, ReservedStore):
            name = name.value
        if name in self._stores:
            return self._stores[name]
        if ReservedStore.DEFAULT.value in self._stores:
            logger.debug(f"Unknown context store '{name}', using default")
            return self._stores[ReservedStore.DEFAULT.value]
        raise ContextError(
            f"Attempt to use context store '{name}' that has not been configured "
            "(undefined storage)",
            storage=name,
        )

    def names(self) -> list[str]:
        return list(self._stores)

    def stores(self) -> list[ContextStoreProtocol]:
        """Distinct store instances, fallback first.

        An aliased ``"default"`` refers to an instance already listed, so each
        store appears exactly once.
        """
        seen: list[ContextStoreProtocol] = []
        for store in self._stores.values():
            if not any(store is s for s in seen):
                seen.append(store)
        return seen

    def external_stores(self) -> list[ContextStoreProtocol]:
        """Distinct store instances other than the fallback."""
        return [s for s in self.stores() if s is not self.fallback]

    def __contains__(self, name: object) -> bool:
        if isinstance(name, ReservedStore):
            name = name.value
        return name in self._stores

    def __len__(self) -> int:
        return len(self._stores)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._stores))
