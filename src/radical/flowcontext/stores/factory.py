"""Factory for locating and constructing context stores.

A store declaration names its implementation either by a built-in name such as
``"memory"``, by a ``"package.module:Attribute"`` specification, or by passing an
already-imported class or factory function. The factory resolves the reference
and calls it with the store's config to obtain an instance.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable, Optional, Union

from ..constants import BUILTIN_STORES
from ..errors import ModuleLoadError
from .base import ContextStoreProtocol

logger = logging.getLogger(__name__)


class StoreFactory:
    """Locates store implementations and builds store instances.

    Construction is synchronous; opening the store is the manager's job and
    happens only after every declared store was constructed successfully.
    """

    def __init__(self):
        # Store specifications: name -> module_path:attribute
        self._store_specs: dict[str, str] = dict(BUILTIN_STORES)

    def add_store_spec(self, name: str, module_attr_spec: str) -> None:
        """Add a built-in name for a store implementation.

        Args:
            name: Name usable as ``module`` in a store declaration
            module_attr_spec: Module and attribute in format "module.path:Attribute"
        """
        self._store_specs[name] = module_attr_spec
        logger.debug(f"Added context store spec '{name}': {module_attr_spec}")

    def list_specs(self) -> dict[str, str]:
        return self._store_specs.copy()

    def locate(self, module: Union[str, Callable[..., Any]]) -> Callable[..., Any]:
        """Resolve a declaration's ``module`` value to a callable.

        Raises:
            ModuleLoadError: If the reference cannot be imported or is not callable.
        """
        if not isinstance(module, str):
            if not callable(module):
                raise ModuleLoadError(
                    f"Context store module {module!r} is not callable", module=module
                )
            return module

        spec = self._store_specs.get(module, module)
        if ":" not in spec:
            raise ModuleLoadError(
                f"Context store module '{module}' not loaded: unknown store. "
                f"Built-in stores: {', '.join(sorted(self._store_specs))}",
                module=module,
            )

        module_path, attr_name = spec.split(":", 1)
        try:
            loaded = importlib.import_module(module_path)
        except Exception as e:
            raise ModuleLoadError(
                f"Context store module '{module}' not loaded: {e}",
                module=module,
                root_cause=e,
            ) from e

        try:
            plugin = getattr(loaded, attr_name)
        except AttributeError as e:
            raise ModuleLoadError(
                f"Context store module '{module}' not loaded: "
                f"'{module_path}' has no attribute '{attr_name}'",
                module=module,
                root_cause=e,
            ) from e

        if not callable(plugin):
            raise ModuleLoadError(
                f"Context store module '{module}' is not callable", module=module
            )
        logger.debug(f"Located context store module '{module}' at {spec}")
        return plugin

    def create_store(
        self,
        name: str,
        module: Union[str, Callable[..., Any]],
        config: Optional[dict[str, Any]] = None,
    ) -> ContextStoreProtocol:
        """Create a store instance from a declaration.

        Args:
            name: Name the store is declared under, used in error messages
            module: Built-in name, "module.path:Attribute" spec or callable
            config: Store configuration passed to the implementation

        Returns:
            Constructed, not yet opened, store instance

        Raises:
            ModuleLoadError: If the module cannot be located, construction
                raises, or the result does not implement the store interface
        """
        plugin = self.locate(module)

        try:
            store = plugin(config if config is not None else {})
        except Exception as e:
            logger.error(f"Failed to construct context store '{name}': {e}")
            raise ModuleLoadError(
                f"Error loading context store '{name}': {e}",
                module=module,
                root_cause=e,
            ) from e

        if not isinstance(store, ContextStoreProtocol):
            raise ModuleLoadError(
                f"Context store '{name}' does not implement the context store "
                f"interface: {type(store).__name__}",
                module=module,
            )

        logger.debug(f"Created context store '{name}' ({type(store).__name__})")
        return store


# Convenience factory instance
factory = StoreFactory()
