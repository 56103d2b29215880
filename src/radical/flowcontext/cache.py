from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from .constants import GLOBAL_SCOPE
from .scope import ContextScope
from .stores.registry import StoreRegistry
from .utils import make_scope_id, node_of

logger = logging.getLogger(__name__)


class ScopeCache:
    """Scope identifier to ContextScope mapping with parent links.

    Scopes are created lazily on first access and then returned unchanged on
    every later access, so callers may hold on to them. Creation is synchronous,
    which makes the check-and-insert atomic under the event loop.
    """

    def __init__(self, registry: StoreRegistry, seed: Optional[dict] = None):
        self._registry = registry
        self._scopes: dict[str, ContextScope] = {}
        self.global_scope = ContextScope(GLOBAL_SCOPE, registry, seed)
        self._scopes[GLOBAL_SCOPE] = self.global_scope

    def get_scope(self, local_id: str, flow_id: Optional[str] = None) -> ContextScope:
        """Return the scope for ``local_id`` (inside ``flow_id``), creating it.

        A new node scope inside a flow gets the flow's own scope as ``flow``;
        every new scope gets the global scope as ``global_``.
        """
        scope_id = make_scope_id(local_id, flow_id)
        if scope_id in self._scopes:
            return self._scopes[scope_id]

        scope = ContextScope(scope_id, self._registry)
        if flow_id:
            scope.flow = self.get_scope(flow_id)
        scope.global_ = self.global_scope

        self._scopes[scope_id] = scope
        logger.debug(f"Created context scope '{scope_id}'")
        return scope

    async def delete_scope(
        self,
        local_id: str,
        flow_id: Optional[str] = None,
        *,
        external_active: bool,
    ) -> None:
        """Forget a scope and drop its fallback storage.

        While any external store is active this is a no-op: external stores
        manage their own retention through ``sweep``. The global scope is
        never deleted.
        """
        if external_active:
            return

        scope_id = make_scope_id(local_id, flow_id)
        if scope_id == GLOBAL_SCOPE:
            return
        self._scopes.pop(scope_id, None)
        await self._registry.fallback.delete(scope_id)
        logger.debug(f"Deleted context scope '{scope_id}'")

    async def sweep(self, active_ids: Iterable[str]) -> None:
        """Drop scopes of nodes that are no longer active.

        Every store is asked to clean its storage concurrently. Cached scopes
        whose node is not in ``active_ids`` are evicted; the global scope is
        never evicted. Raises the first store failure.
        """
        active = list(active_ids)

        live = set(active)
        for scope_id in list(self._scopes):
            if scope_id != GLOBAL_SCOPE and node_of(scope_id) not in live:
                del self._scopes[scope_id]
                logger.debug(f"Swept context scope '{scope_id}'")

        stores = self._registry.stores()
        await asyncio.gather(*(store.clean(active) for store in stores))

    def scope_ids(self) -> list[str]:
        return list(self._scopes)

    def __contains__(self, scope_id: object) -> bool:
        return scope_id in self._scopes

    def __len__(self) -> int:
        return len(self._scopes)
