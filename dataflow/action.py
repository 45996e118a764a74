"""Actions and the lifecycle engine that runs them.

An action is a unit of work that mutates the store. Constructing an action
runs it, there is no separate dispatch step:

```python
class Increment(DataAction[CounterStore]):
    def execute(self) -> None:
        self.store.count += 1

Increment()
```

Each instance moves through `idle -> (loading) -> success | error`:

1. The middleware chain is asked to admit the action. A rejected action stays
   idle, its body never runs and nothing is published. On a disposed flow
   construction raises `ChannelClosedError` before admission.
2. `execute()` is called. When it returns an awaitable the action becomes
   `loading` and the rest of the lifecycle continues in an asyncio task. That
   task yields once before publishing the loading event, so a listener
   attached right after construction still observes it.
3. A `DataChain` action feeds a non-None result to `fork()`.
4. On success the status is committed and published, then follow-up actions
   queued with `next()` are started in order. On failure the error message is
   captured, `on_exception()` runs and the error status is committed and
   published. Failures never escape the constructor.
5. The middleware chain observes the action.
"""

from abc import ABC, ABCMeta, abstractmethod
import asyncio
from collections.abc import Awaitable, Callable
import inspect
import logging
from typing import Any, ClassVar, Generic, TypeVar

from .context import data_flow_context, get_data_flow
from .exceptions import ChannelClosedError, NoEventLoopError
from .flow import DataFlow
from .store import ActionStatus, DataStore

__all__ = [
    "ActionBuilder",
    "DataAction",
    "DataChain",
]

_LOGGER = logging.getLogger(__name__)

S = TypeVar("S", bound=DataStore)
R = TypeVar("R")

ActionBuilder = Callable[[], Any]
"""A zero-argument callable that constructs, and therefore starts, an action."""


def _close(pending: Awaitable[Any]) -> None:
    """Close a coroutine that will not be awaited."""
    if inspect.iscoroutine(pending):
        pending.close()


class _ActionMeta(ABCMeta):
    """Starts the lifecycle of an action once its constructor returned."""

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        action = super().__call__(*args, **kwargs)
        action._run()
        return action


class DataAction(Generic[S], metaclass=_ActionMeta):
    """Base class for actions mutating a store of type `S`.

    Subclasses implement `execute()`, either as a plain method or as a
    coroutine function. The action kind defaults to the class qualified name
    and can be set explicitly with a `kind` class attribute.
    """

    kind: ClassVar[str]

    _flow: DataFlow
    _status: ActionStatus
    _post_actions: list[ActionBuilder]
    _task: "asyncio.Task[None] | None"

    error: str
    """Description of the last failure, defaulted until the action fails."""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "kind" not in cls.__dict__:
            cls.kind = cls.__qualname__

    def __new__(cls, *args: Any, **kwargs: Any) -> "DataAction[S]":
        action = super().__new__(cls)
        action._flow = get_data_flow()
        action._status = ActionStatus.IDLE
        action._post_actions = []
        action._task = None
        action.error = action._flow.config.default_error_message
        return action

    @property
    def status(self) -> ActionStatus:
        """The current status of this action."""
        return self._status

    @property
    def flow(self) -> DataFlow:
        """The flow this action runs in."""
        return self._flow

    @property
    def store(self) -> S:
        """The store shared by every action of the flow."""
        return self._flow.get_store()  # type: ignore[return-value]

    @abstractmethod
    def execute(self) -> Any:
        """Run the body of the action.

        May return a value directly or an awaitable for work that suspends.
        """

    def next(self, builder: ActionBuilder) -> None:
        """Queue a follow-up action started once this action succeeded.

        Follow-ups run in the order they were queued, each as an independent
        action. None of them run if this action fails.
        """
        self._post_actions.append(builder)

    def on_exception(self, err: Exception) -> None:
        """Handle a failure of the action body or its fork continuation.

        Called after `error` was set and before the error status is
        published. The default implementation only logs the failure.
        """
        if self._flow.config.log_exceptions:
            _LOGGER.warning("Action %s failed: %s", self.kind, err, exc_info=err)

    async def wait(self) -> ActionStatus:
        """Wait until the lifecycle of this action finished and return its status."""
        if self._task is not None:
            await asyncio.wait([self._task])
        return self._status

    def _run(self) -> None:
        # Fails construction with NotInitializedError before anything runs
        self._flow.get_store()
        if self._flow.bus.closed:
            raise ChannelClosedError(self.kind)
        if not self._flow.middleware.admit(self):
            return

        _LOGGER.debug("Running action %s", self.kind)
        try:
            result = self.execute()
            if inspect.isawaitable(result):
                self._suspend(result, loading=True)
                return
            out = self._fork(result)
            if inspect.isawaitable(out):
                self._suspend(out, loading=False)
                return
        except Exception as err:
            self._fail(err)
        else:
            self._succeed()
        self._flow.middleware.observe(self)

    def _suspend(self, pending: Awaitable[Any], loading: bool) -> None:
        """Continue the lifecycle in a task once the body returned an awaitable."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            _close(pending)
            raise NoEventLoopError(self.kind) from None
        if loading:
            self._status = ActionStatus.LOADING
        self._task = self._flow.tasks.create_task(
            self._finish(pending, loading), name=f"dataflow:{self.kind}"
        )

    async def _finish(self, pending: Awaitable[Any], loading: bool) -> None:
        if loading:
            # Give the caller a chance to subscribe before the loading event
            await asyncio.sleep(0)
            try:
                self._flow.notify(self)
            except ChannelClosedError:
                _close(pending)
                raise
        try:
            result = await pending
            if loading:
                out = self._fork(result)
                if inspect.isawaitable(out):
                    await out
        except Exception as err:
            _close(pending)
            self._fail(err)
        else:
            self._succeed()
        self._flow.middleware.observe(self)

    def _fork(self, result: Any) -> Any:
        if result is not None and isinstance(self, DataChain):
            return self.fork(result)
        return None

    def _succeed(self) -> None:
        self._set_status(ActionStatus.SUCCESS)
        builders, self._post_actions = self._post_actions, []
        with data_flow_context(self._flow):
            for builder in builders:
                try:
                    builder()
                except Exception:
                    _LOGGER.exception("Follow-up of action %s failed to start", self.kind)

    def _fail(self, err: Exception) -> None:
        self.error = str(err) or err.__class__.__name__
        self.on_exception(err)
        self._set_status(ActionStatus.ERROR)

    def _set_status(self, status: ActionStatus) -> None:
        self._status = status
        self._flow.get_store().set_status(
            self.kind, status, self.error if status == ActionStatus.ERROR else None
        )
        self._flow.notify(self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} kind={self.kind} status={self._status}>"


class DataChain(ABC, Generic[R]):
    """Mixin for actions whose result feeds a continuation.

    When `execute()` produces a non-None result, `fork()` is called with it
    before the action is marked successful. A failing continuation fails the
    action.
    """

    @abstractmethod
    def fork(self, result: R) -> Any:
        """Continue with the result of `execute()`, may return an awaitable."""
