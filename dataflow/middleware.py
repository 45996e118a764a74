"""Middleware intercepting actions before and after they execute.

A middleware can veto an action before its body runs and observes every
admitted action once it reaches a terminal status. Middleware are consulted
in registration order.

Faults raised by a middleware hook are not contained. They propagate to
whoever runs the admission or observation step: the action constructor for
lifecycles that complete synchronously, or the lifecycle task for actions
that suspended, where the task service logs the failure.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
import logging
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from dataflow.action import DataAction

__all__ = [
    "DataMiddleware",
    "MiddlewareChain",
]

_LOGGER = logging.getLogger(__name__)


class DataMiddleware(ABC):
    """Interceptor with veto power before, and an observation hook after, each action."""

    @abstractmethod
    def pre_action(self, action: "DataAction[Any]") -> bool:
        """Called before the action executes, return False to reject it."""

    @abstractmethod
    def post_action(self, action: "DataAction[Any]") -> None:
        """Called after the action reached success or error."""


class MiddlewareChain:
    """Ordered list of middleware consulted for every action."""

    def __init__(self, middlewares: Iterable[DataMiddleware] | None = None) -> None:
        """Initialize the MiddlewareChain."""
        self._middlewares: list[DataMiddleware] = list(middlewares or ())

    def add(self, middleware: DataMiddleware) -> None:
        """Append a middleware, effective for actions admitted from now on."""
        self._middlewares.append(middleware)

    def extend(self, middlewares: Iterable[DataMiddleware]) -> None:
        """Append several middleware, keeping their order."""
        self._middlewares.extend(middlewares)

    def admit(self, action: "DataAction[Any]") -> bool:
        """Run every pre hook in order, stopping at the first rejection."""
        for middleware in list(self._middlewares):
            if not middleware.pre_action(action):
                _LOGGER.debug(
                    "Action %s rejected by %s",
                    action.kind,
                    middleware.__class__.__name__,
                )
                return False
        return True

    def observe(self, action: "DataAction[Any]") -> None:
        """Run every post hook in order."""
        for middleware in list(self._middlewares):
            middleware.post_action(action)

    def __len__(self) -> int:
        return len(self._middlewares)

    def __iter__(self) -> Iterator[DataMiddleware]:
        return iter(list(self._middlewares))
