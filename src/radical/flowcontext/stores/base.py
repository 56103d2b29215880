"""Context store capability contract.

Every storage medium plugged into the context runtime implements this
interface. The lifecycle calls are coroutines, while reads and writes follow a
Node-style completion callback ``callback(error, value)`` so that a store can
answer synchronously or from its own I/O machinery.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional, Protocol, runtime_checkable


@runtime_checkable
class ContextStoreProtocol(Protocol):
    """Protocol defining the interface that context stores must implement.

    This protocol allows both the bundled stores and third-party stores that do
    not inherit from BaseContextStore to be registered with the runtime.
    """

    async def open(self) -> None:
        """Prepare the store for use."""
        ...

    async def close(self) -> None:
        """Release the store's resources."""
        ...

    async def clean(self, active_ids: Iterable[str]) -> None:
        """Purge storage for identifiers that are no longer active."""
        ...

    def get(self, scope: str, key: Any, callback: Optional[Callable] = None) -> Any:
        """Read a value."""
        ...

    def set(
        self, scope: str, key: Any, value: Any, callback: Optional[Callable] = None
    ) -> None:
        """Write a value."""
        ...

    def keys(self, scope: str, callback: Optional[Callable] = None) -> Any:
        """List the keys of a scope."""
        ...


class BaseContextStore(ABC):
    """Abstract base class for context stores.

    Args passed to ``__init__`` by the runtime are a single config dictionary
    holding the store's own settings plus the approved global settings under
    ``config["settings"]``.
    """

    @abstractmethod
    async def open(self) -> None:
        """Prepare the store for use.

        Called once, after every configured store has been constructed. May
        perform I/O such as opening files or connecting to a server.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the store's resources.

        Called once when the runtime shuts down.
        """

    @abstractmethod
    async def clean(self, active_ids: Iterable[str]) -> None:
        """Purge storage belonging to node ids that are not in ``active_ids``.

        Args:
            active_ids: Node identifiers still present in the deployed flows.
                Scopes named ``"<node>:<flow>"`` are matched on their node part.
        """

    @abstractmethod
    def get(self, scope: str, key: Any, callback: Optional[Callable] = None) -> Any:
        """Read the value stored under ``key`` in ``scope``.

        Args:
            scope: Scope identifier.
            key: Key, or a list of keys to read several values at once.
            callback: Invoked as ``callback(error, value)`` on completion.
        """

    @abstractmethod
    def set(
        self, scope: str, key: Any, value: Any, callback: Optional[Callable] = None
    ) -> None:
        """Store ``value`` under ``key`` in ``scope``.

        Args:
            scope: Scope identifier.
            key: Key, or a list of keys matched with a list of values.
            value: Value to store.
            callback: Optional, invoked as ``callback(error)`` on completion.
        """

    @abstractmethod
    def keys(self, scope: str, callback: Optional[Callable] = None) -> Any:
        """List the keys stored in ``scope``.

        Args:
            scope: Scope identifier.
            callback: Invoked as ``callback(error, keys)`` on completion.
        """


__all__ = ["BaseContextStore", "ContextStoreProtocol"]
