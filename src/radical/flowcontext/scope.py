from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

import typeguard

from .constants import ReservedStore
from .errors import CallbackTypeError
from .stores.base import ContextStoreProtocol
from .stores.registry import StoreRegistry
from .utils import future_callback, get_event_loop_or_raise

logger = logging.getLogger(__name__)

StoreName = Union[str, ReservedStore]


class ContextScope:
    """
    A scope-bound accessor for context values.

    Every call is forwarded to a store resolved through the registry, using the
    scope's identifier as the storage namespace. The store is selected from the
    keyword arguments of each call:

    - neither ``store`` nor ``callback``: the in-memory fallback, answering
      synchronously;
    - ``callback`` only: the ``"default"`` store;
    - ``store`` (with or without ``callback``): the named store, or the default
      store if that name is unknown.

    Attributes:
        scope_id (str): Identifier of the scope, e.g. ``"global"``, ``"n1"`` or
            ``"n1:f1"``.
        flow (ContextScope): Parent flow scope, for node scopes inside a flow.
        global_ (ContextScope): The global scope (``global`` is a keyword).
    """

    @typeguard.typechecked
    def __init__(
        self,
        scope_id: str,
        registry: StoreRegistry,
        seed: Optional[dict] = None,
    ) -> None:
        self.scope_id = scope_id
        self._registry = registry
        self._values = seed if seed is not None else {}
        self.flow: Optional[ContextScope] = None
        self.global_: Optional[ContextScope] = None

    @property
    def values(self) -> Mapping[str, Any]:
        """Read-only view of the seed values (global scope only)."""
        return MappingProxyType(self._values)

    def _select(
        self,
        store: Optional[StoreName],
        callback: Optional[Callable],
        callback_required: bool,
    ) -> ContextStoreProtocol:
        # An empty store name counts as no store name
        if not store and callback is None:
            return self._registry.fallback

        if callback is not None and not callable(callback):
            raise CallbackTypeError("Callback must be a function")
        if callback is None and callback_required:
            raise CallbackTypeError("Callback must be a function")

        if not store:
            store = ReservedStore.DEFAULT
        return self._registry.resolve(store)

    def get(
        self,
        key: Any,
        *,
        store: Optional[StoreName] = None,
        callback: Optional[Callable] = None,
    ) -> Any:
        """Read ``key`` from this scope.

        Args:
            key: Key, or list of keys.
            store: Name of the store to read from.
            callback: Called as ``callback(error, value)``. Required when a
                store is named.

        Returns:
            The value for fallback reads; otherwise whatever the store returns.

        Raises:
            CallbackTypeError: If a required callback is missing or not callable.
            ContextError: If ``store`` is unknown and no default is configured.
        """
        context = self._select(store, callback, callback_required=True)
        return context.get(self.scope_id, key, callback)

    def set(
        self,
        key: Any,
        value: Any,
        *,
        store: Optional[StoreName] = None,
        callback: Optional[Callable] = None,
    ) -> None:
        """Write ``value`` under ``key`` in this scope.

        A callback is optional even when a store is named.
        """
        context = self._select(store, callback, callback_required=False)
        context.set(self.scope_id, key, value, callback)

    def keys(
        self,
        *,
        store: Optional[StoreName] = None,
        callback: Optional[Callable] = None,
    ) -> Any:
        """List the keys of this scope. Same store selection as ``get``."""
        context = self._select(store, callback, callback_required=True)
        return context.keys(self.scope_id, callback)

    async def aget(self, key: Any, store: Optional[StoreName] = None) -> Any:
        """Awaitable ``get``; ``store=None`` reads from the default store."""
        future = get_event_loop_or_raise("ContextScope").create_future()
        self.get(key, store=store, callback=future_callback(future))
        return await future

    async def aset(
        self, key: Any, value: Any, store: Optional[StoreName] = None
    ) -> None:
        """Awaitable ``set``; completes once the store acknowledged the write."""
        future = get_event_loop_or_raise("ContextScope").create_future()
        self.set(key, value, store=store, callback=future_callback(future))
        await future

    async def akeys(self, store: Optional[StoreName] = None) -> Any:
        """Awaitable ``keys``; ``store=None`` lists the default store."""
        future = get_event_loop_or_raise("ContextScope").create_future()
        self.keys(store=store, callback=future_callback(future))
        return await future

    def __repr__(self) -> str:
        return f"ContextScope({self.scope_id!r})"
