"""In-memory context store.

This store backs the reserved fallback name and can also be declared explicitly
with ``{"module": "memory"}``. Data lives in a plain dictionary keyed by scope
and is lost when the process exits.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional

from ..constants import GLOBAL_SCOPE
from ..utils import node_of
from .base import BaseContextStore

logger = logging.getLogger(__name__)


class MemoryContextStore(BaseContextStore):
    """Dictionary-based context store.

    Reads and writes complete synchronously. When no callback is given, ``get``
    and ``keys`` return their result directly, which is what lets the fallback
    serve calls that name neither a store nor a callback.
    """

    def __init__(self, config: Optional[dict] = None):
        self.config = config or {}
        # Structure: {scope_id: {key: value}}
        self.data: dict[str, dict[str, Any]] = {}

    async def open(self) -> None:
        logger.debug("Memory context store opened")

    async def close(self) -> None:
        logger.debug("Memory context store closed")

    def _get_one(self, scope: str, key: str) -> Any:
        return self.data.get(scope, {}).get(key)

    def get(self, scope: str, key: Any, callback: Optional[Callable] = None) -> Any:
        try:
            if isinstance(key, (list, tuple)):
                value = [self._get_one(scope, k) for k in key]
            else:
                value = self._get_one(scope, key)
        except Exception as e:
            if callback is None:
                raise
            callback(e)
            return None

        if callback is not None:
            callback(None, value)
        return value

    def _set_one(self, scope: str, key: str, value: Any) -> None:
        values = self.data.setdefault(scope, {})
        if value is None:
            values.pop(key, None)
        else:
            values[key] = value

    def set(
        self, scope: str, key: Any, value: Any, callback: Optional[Callable] = None
    ) -> None:
        try:
            if isinstance(key, (list, tuple)):
                if not isinstance(value, (list, tuple)):
                    value = [value]
                for i, k in enumerate(key):
                    self._set_one(scope, k, value[i] if i < len(value) else None)
            else:
                self._set_one(scope, key, value)
        except Exception as e:
            if callback is None:
                raise
            callback(e)
            return

        if callback is not None:
            callback(None)

    def keys(self, scope: str, callback: Optional[Callable] = None) -> list[str]:
        values = list(self.data.get(scope, {}))
        if callback is not None:
            callback(None, values)
        return values

    async def delete(self, scope: str) -> None:
        """Drop all data stored for ``scope``."""
        self.data.pop(scope, None)

    async def clean(self, active_ids: Iterable[str]) -> None:
        active = set(active_ids)
        for scope in list(self.data):
            if scope != GLOBAL_SCOPE and node_of(scope) not in active:
                del self.data[scope]
                logger.debug(f"Cleaned memory context for scope '{scope}'")

    def set_global_context(self, seed: Mapping[str, Any]) -> None:
        """Use ``seed`` as the data of the global scope."""
        self.data[GLOBAL_SCOPE] = seed
