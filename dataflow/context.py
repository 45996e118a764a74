"""Context management for the current DataFlow.

Actions find the flow they run in through a context variable, so code can
construct an action without passing the flow around. Asyncio tasks inherit
the flow that was current when they were created.
"""

import contextvars
import contextlib
import logging
from collections.abc import Generator, Iterable
from typing import TypeVar

from .config import DataFlowConfig
from .events import EventSubscription
from .flow import DataFlow
from .kind import ActionKind
from .middleware import DataMiddleware
from .store import DataStore

__all__ = [
    "get_data_flow",
    "data_flow_context",
    "init",
    "get_store",
    "events",
    "events_of",
    "add_middleware",
    "dispose",
]

_LOGGER = logging.getLogger(__name__)

S = TypeVar("S", bound=DataStore)

# Context variable for the current flow instance
_data_flow_ctx: contextvars.ContextVar[DataFlow | None] = contextvars.ContextVar(
    "_data_flow_ctx", default=None
)


def get_data_flow() -> DataFlow:
    """Get the current flow.

    If no flow is set in the context variable, creates an uninitialized one.
    """
    flow = _data_flow_ctx.get()
    if flow is None:
        _LOGGER.debug("Creating a new flow for the current context")
        flow = DataFlow()
        _data_flow_ctx.set(flow)
    return flow


@contextlib.contextmanager
def data_flow_context(
    flow: DataFlow | None = None,
) -> Generator[DataFlow, None, None]:
    """Make a flow current for the duration of the block.

    Args:
        flow: Optional existing flow to use. If None, a new uninitialized
              flow is created.

    Yields:
        The flow actions constructed within the block run in
    """
    flow = flow or DataFlow()
    token = _data_flow_ctx.set(flow)
    try:
        yield flow
    finally:
        _data_flow_ctx.reset(token)


def init(
    store: DataStore,
    middlewares: Iterable[DataMiddleware] | None = None,
    config: DataFlowConfig | None = None,
) -> DataFlow:
    """Initialize the current flow with a store and middleware."""
    flow = get_data_flow()
    if config is not None:
        flow.config = config
    flow.init(store, middlewares)
    return flow


def get_store(cls: type[S] = DataStore) -> S:  # type: ignore[assignment]
    """Return the store of the current flow."""
    return get_data_flow().get_store(cls)


def events() -> EventSubscription:
    """Subscribe to every action published on the current flow."""
    return get_data_flow().events


def events_of(kind: ActionKind) -> EventSubscription:
    """Subscribe to the actions of one kind published on the current flow."""
    return get_data_flow().events_of(kind)


def add_middleware(middleware: DataMiddleware) -> None:
    """Append a middleware to the current flow."""
    get_data_flow().add_middleware(middleware)


def dispose() -> None:
    """Shut down the event bus of the current flow."""
    get_data_flow().dispose()
