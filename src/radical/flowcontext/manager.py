from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping, Optional, Union

import typeguard

from .cache import ScopeCache
from .constants import ContextState, ReservedStore
from .errors import ConfigError, LifecycleError
from .scope import ContextScope
from .settings import ContextSettings, StoreDeclaration
from .stores.base import ContextStoreProtocol
from .stores.factory import StoreFactory
from .stores.factory import factory as default_factory
from .stores.memory import MemoryContextStore
from .stores.registry import StoreRegistry

logger = logging.getLogger(__name__)


class ContextManager:
    """
    Owner of the context runtime state for one flow runtime.

    The manager holds the store registry, the scope cache and the flag telling
    whether any store other than the in-memory fallback is configured. It drives
    the store lifecycle::

        init(settings) -> load() -> [get_context / delete_context / clean] -> close()

    Several managers can live side by side; nothing is kept at module level.

    Attributes:
        settings (ContextSettings): Settings passed to ``init``.
        state (ContextState): Current lifecycle state.
    """

    @typeguard.typechecked
    def __init__(self, factory: Optional[StoreFactory] = None) -> None:
        self.factory = factory or default_factory
        self.settings: Optional[ContextSettings] = None
        self.state = ContextState.UNINITIALIZED

        self._registry: Optional[StoreRegistry] = None
        self._cache: Optional[ScopeCache] = None
        self._has_external_store = False

    @classmethod
    async def create(
        cls,
        settings: Union[ContextSettings, Mapping[str, Any], None] = None,
        factory: Optional[StoreFactory] = None,
    ) -> ContextManager:
        """Create a manager, initialize it and load the configured stores.

        Args:
            settings: Context settings or a mapping with the same keys
            factory: Store factory, defaults to the shared factory

        Returns:
            ContextManager: A manager in the RUNNING state
        """
        manager = cls(factory=factory)
        manager.init(settings)
        await manager.load()
        return manager

    def _require(self, *states: ContextState) -> None:
        if self.state not in states:
            expected = ", ".join(s.value for s in states)
            raise LifecycleError(
                f"Context manager is {self.state.value}, expected one of: {expected}"
            )

    @property
    def registry(self) -> StoreRegistry:
        self._require(
            ContextState.INITIALIZED,
            ContextState.LOADED,
            ContextState.RUNNING,
            ContextState.CLOSED,
        )
        return self._registry

    @property
    def cache(self) -> ScopeCache:
        self._require(
            ContextState.INITIALIZED,
            ContextState.LOADED,
            ContextState.RUNNING,
            ContextState.CLOSED,
        )
        return self._cache

    @property
    def global_context(self) -> ContextScope:
        return self.cache.global_scope

    @property
    def has_external_store(self) -> bool:
        return self._has_external_store

    def init(
        self, settings: Union[ContextSettings, Mapping[str, Any], None] = None
    ) -> None:
        """Set up the fallback store and the pre-seeded global scope.

        Calling ``init`` again discards every store and scope.
        """
        self.settings = ContextSettings.from_mapping(settings)

        seed = dict(self.settings.function_global_context)
        fallback = MemoryContextStore()
        fallback.set_global_context(seed)

        self._registry = StoreRegistry(fallback)
        self._cache = ScopeCache(self._registry, seed)
        self._has_external_store = False
        self.state = ContextState.INITIALIZED
        logger.debug(f"Context initialized with global keys: {list(seed)}")

    def _check_default_alias(self, declarations: Mapping[str, Any]) -> Optional[str]:
        """Return the store ``"default"`` aliases, validating it before any
        store is constructed."""
        target = declarations.get(ReservedStore.DEFAULT.value)
        if not isinstance(target, str):
            return None
        if target not in declarations or ReservedStore.is_reserved(target):
            logger.error(f"Invalid default context storage '{target}'")
            raise ConfigError(
                f"Invalid default context storage '{target}': "
                "no such storage is configured"
            )
        return target

    def _build_stores(
        self, declarations: Mapping[str, Any]
    ) -> dict[str, ContextStoreProtocol]:
        built: dict[str, ContextStoreProtocol] = {}
        for name, raw in declarations.items():
            if ReservedStore.of(name) is ReservedStore.FALLBACK:
                logger.warning(
                    f"Ignoring context storage '{name}': the name is reserved"
                )
                continue
            if ReservedStore.of(name) is ReservedStore.DEFAULT and isinstance(
                raw, str
            ):
                continue

            declaration = StoreDeclaration.from_raw(name, raw)
            config = dict(declaration.config)
            config["settings"] = self.settings.approved_settings()

            built[name] = self.factory.create_store(name, declaration.module, config)
        return built

    async def load(self) -> None:
        """Construct and open the configured context stores.

        All declarations are validated and constructed before any store is
        opened, so a configuration problem never leaves a store half open. The
        opens then run concurrently.

        Raises:
            ConfigError: If the configuration is malformed
            ModuleLoadError: If a store cannot be located or constructed
            LifecycleError: If the manager is not freshly initialized
            Exception: The first failure raised by a store's ``open``
        """
        self._require(ContextState.INITIALIZED)
        declarations = self.settings.context_storage

        alias = self._check_default_alias(declarations)
        built = self._build_stores(declarations)

        for name, store in built.items():
            self._registry.register(name, store)
        if alias is not None:
            self._registry.alias_default(alias)
        self.state = ContextState.LOADED

        if built:
            self._has_external_store = True
            stores = self._registry.stores()
        else:
            self._has_external_store = False
            stores = [self._registry.fallback]

        logger.info(
            f"Opening {len(stores)} context store(s): "
            f"{', '.join(self._registry.names())}"
        )
        await asyncio.gather(*(store.open() for store in stores))

        self.state = ContextState.RUNNING
        logger.info("Context stores opened successfully")

    @typeguard.typechecked
    def get_context(self, local_id: str, flow_id: Optional[str] = None) -> ContextScope:
        """Return the context scope of a node or flow.

        Args:
            local_id: Node or flow identifier
            flow_id: Identifier of the flow the node belongs to

        Returns:
            ContextScope: The cached scope, created on first access
        """
        return self.cache.get_scope(local_id, flow_id)

    async def delete_context(self, local_id: str, flow_id: Optional[str] = None) -> None:
        """Delete a scope and its fallback storage.

        This does nothing while an external store is configured; those stores
        only shed data through ``clean``.
        """
        await self.cache.delete_scope(
            local_id, flow_id, external_active=self._has_external_store
        )

    async def clean(self, flow_config: Mapping[str, Any]) -> None:
        """Purge stores and cached scopes of nodes missing from ``flow_config``.

        Args:
            flow_config: Flow configuration whose ``all_nodes`` (or ``allNodes``)
                mapping is keyed by the ids of every deployed node
        """
        if "all_nodes" in flow_config:
            all_nodes = flow_config["all_nodes"]
        elif "allNodes" in flow_config:
            all_nodes = flow_config["allNodes"]
        else:
            raise ConfigError("Flow configuration has no 'all_nodes' entry")

        await self.sweep(all_nodes)

    async def sweep(self, active_ids: Iterable[str]) -> None:
        await self.cache.sweep(list(active_ids))

    async def close(self) -> None:
        """Close every store concurrently; the first failure is raised."""
        if self.state is ContextState.UNINITIALIZED:
            return

        stores = self._registry.stores()
        try:
            await asyncio.gather(*(store.close() for store in stores))
        finally:
            self.state = ContextState.CLOSED
        logger.info("Context stores closed")

    async def __aenter__(self) -> ContextManager:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
