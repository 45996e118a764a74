"""
A small reactive state and action coordination layer.

- A single application store, see `dataflow.store`.
- Actions that mutate it, run as soon as they are constructed, see `dataflow.action`.
- A broadcast event bus publishing actions as their status changes, see `dataflow.events`.
- Middleware that can reject actions and observe their outcome, see `dataflow.middleware`.
"""

from .action import ActionBuilder, DataAction, DataChain
from .config import DataFlowConfig
from .context import (
    add_middleware,
    data_flow_context,
    dispose,
    events,
    events_of,
    get_data_flow,
    get_store,
    init,
)
from .events import ActionEvent, EventBus, EventSubscription
from .exceptions import (
    ChannelClosedError,
    DataException,
    DataFlowException,
    NoEventLoopError,
    NotInitializedError,
)
from .flow import DataFlow
from .kind import action_kind
from .middleware import DataMiddleware, MiddlewareChain
from .store import ActionStatus, DataStore, StatusInfo
from .sync import DataSync

__all__ = [
    "ActionBuilder",
    "ActionEvent",
    "ActionStatus",
    "ChannelClosedError",
    "DataAction",
    "DataChain",
    "DataException",
    "DataFlow",
    "DataFlowConfig",
    "DataFlowException",
    "DataMiddleware",
    "DataStore",
    "DataSync",
    "EventBus",
    "EventSubscription",
    "MiddlewareChain",
    "NoEventLoopError",
    "NotInitializedError",
    "StatusInfo",
    "action_kind",
    "add_middleware",
    "data_flow_context",
    "dispose",
    "events",
    "events_of",
    "get_data_flow",
    "get_store",
    "init",
]
