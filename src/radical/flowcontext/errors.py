class ContextStoreError(Exception):
    """Base class for every error raised by the context store runtime."""


class ConfigError(ContextStoreError, ValueError):
    """
    Raised when the context storage configuration is malformed or contradictory.

    Covers reserved-name collisions, declarations without a ``module`` and a
    ``default`` alias that points at a store which was never declared. Always
    raised before any store is opened.
    """


class ModuleLoadError(ContextStoreError):
    """
    Raised when a store implementation cannot be located or constructed.

    Args:
        message (str): Human-readable error message
        module (str, optional): The module reference that failed to load
        root_cause (Exception, optional): The original exception, if any
    """

    def __init__(self, message, module=None, root_cause=None):
        super().__init__(message)
        self.module = module
        self.root_cause = root_cause

        if root_cause:
            self.__cause__ = root_cause


class ContextError(ContextStoreError):
    """Raised when a caller addresses a store that is neither registered nor
    covered by a ``default`` store."""

    def __init__(self, message, storage=None):
        super().__init__(message)
        self.storage = storage


class CallbackTypeError(ContextStoreError, TypeError):
    """Raised at the call site when a completion callback is not callable."""


class LifecycleError(ContextStoreError, RuntimeError):
    """Raised when a manager operation is invoked in the wrong lifecycle state."""
