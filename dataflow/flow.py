"""The DataFlow context object.

A DataFlow owns everything an action needs while it runs: the application
store, the middleware chain, the event bus and the task service tracking
suspended lifecycles. Tests and applications can build independent flows
instead of sharing process wide state.
"""

from collections.abc import Callable, Iterable
import logging
from typing import Any, TypeVar, TYPE_CHECKING

from .config import DataFlowConfig
from .events import EventBus, EventCallback, EventSubscription
from .exceptions import NotInitializedError
from .kind import ActionKind
from .middleware import DataMiddleware, MiddlewareChain
from .store import DataStore
from .task import TaskService, TaskServiceImpl

if TYPE_CHECKING:
    from .action import DataAction

__all__ = ["DataFlow"]

_LOGGER = logging.getLogger(__name__)

S = TypeVar("S", bound=DataStore)


class DataFlow:
    """Store, event bus and middleware chain shared by a set of actions."""

    def __init__(
        self,
        store: DataStore | None = None,
        middlewares: Iterable[DataMiddleware] | None = None,
        config: DataFlowConfig | None = None,
    ) -> None:
        """Initialize the DataFlow.

        Args:
            store: The application store. Actions cannot run until one is set.
            middlewares: Middleware consulted for every action, in order.
            config: Engine settings, defaults are used when omitted.
        """
        self.config = config or DataFlowConfig()
        self._store = store
        self._middleware = MiddlewareChain(middlewares)
        self._bus = EventBus()
        self._tasks: TaskService = TaskServiceImpl()

    def init(
        self,
        store: DataStore,
        middlewares: Iterable[DataMiddleware] | None = None,
    ) -> None:
        """Set the store and the middleware chain, replacing any previous ones.

        Subscriptions to the event bus survive a re-initialization. A bus
        that was disposed is replaced by a fresh one.
        """
        _LOGGER.debug("Initializing flow with %s", store.__class__.__name__)
        self._store = store
        self._middleware = MiddlewareChain(middlewares)
        if self._bus.closed:
            self._bus = EventBus()

    @property
    def initialized(self) -> bool:
        """Return True once a store has been set."""
        return self._store is not None

    def get_store(self, cls: type[S] = DataStore) -> S:  # type: ignore[assignment]
        """Return the store, checking it is an instance of `cls`."""
        if self._store is None:
            raise NotInitializedError()
        if not isinstance(self._store, cls):
            raise ValueError(
                f"Store is not of type {cls.__name__} (was {self._store.__class__.__name__})"
            )
        return self._store

    @property
    def store(self) -> DataStore:
        """The application store."""
        return self.get_store()

    @property
    def middleware(self) -> MiddlewareChain:
        """The middleware chain consulted for every action."""
        return self._middleware

    @property
    def bus(self) -> EventBus:
        """The event bus actions are published on."""
        return self._bus

    @property
    def tasks(self) -> TaskService:
        """The service tracking suspended action lifecycles."""
        return self._tasks

    @property
    def events(self) -> EventSubscription:
        """A new live sequence of every action published from now on."""
        return self._bus.subscribe_all()

    def events_of(self, kind: ActionKind) -> EventSubscription:
        """A new live sequence of the actions of one kind published from now on."""
        return self._bus.subscribe_filtered(kind)

    def listen(
        self, callback: EventCallback, kind: ActionKind | None = None
    ) -> Callable[[], None]:
        """Register a synchronous callback for published actions.

        Returns a callable that removes the listener.
        """
        return self._bus.listen(callback, kind=kind)

    def add_middleware(self, middleware: DataMiddleware) -> None:
        """Append a middleware to the chain."""
        self._middleware.add(middleware)

    def notify(self, action: "DataAction[Any]") -> None:
        """Publish an action on the event bus."""
        self._bus.publish(action)

    async def block_till_done(self) -> None:
        """Wait until every in-flight action has reached a terminal status."""
        await self._tasks.block_till_done()

    def dispose(self) -> None:
        """Shut down the event bus, further publishes fail."""
        _LOGGER.debug("Disposing flow")
        self._bus.shutdown()
