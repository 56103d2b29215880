import asyncio
from typing import Callable, Optional

from .constants import SCOPE_SEPARATOR


def make_scope_id(local_id: str, flow_id: Optional[str] = None) -> str:
    """Return ``local_id`` or ``"<local_id>:<flow_id>"`` when a flow is given."""
    if flow_id:
        return f"{local_id}{SCOPE_SEPARATOR}{flow_id}"
    return local_id


def node_of(scope_id: str) -> str:
    """Return the leading node-id component of a scope identifier."""
    return scope_id.split(SCOPE_SEPARATOR)[0]


def get_event_loop_or_raise(
    context_name: str = "ContextScope",
) -> asyncio.AbstractEventLoop:
    """Get the current running event loop or raise a helpful error.

    Args:
        context_name: Name of the class/context for error messages

    Returns:
        asyncio.AbstractEventLoop: The current running event loop

    Raises:
        RuntimeError: If no event loop is running with helpful guidance
    """
    try:
        return asyncio.get_running_loop()
    except RuntimeError as e:
        raise RuntimeError(
            f"{context_name} awaitable calls must be made within an async context. "
            "Use the callback form of the call, or run within asyncio.run()."
        ) from e


def future_callback(future: asyncio.Future) -> Callable:
    """Build a Node-style ``callback(error, *values)`` that settles ``future``.

    A single value resolves the future with that value, no value resolves it
    with None and several values resolve it with a tuple.
    """

    def _done(error=None, *values):
        if future.done():
            return
        if error is not None:
            future.set_exception(
                error if isinstance(error, BaseException) else RuntimeError(error)
            )
        elif not values:
            future.set_result(None)
        elif len(values) == 1:
            future.set_result(values[0])
        else:
            future.set_result(values)

    return _done
