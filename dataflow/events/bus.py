"""Broadcast event bus for action lifecycle notifications.

Every subscriber receives every event published after it attached. Delivery
is synchronous: when `publish` returns, callback subscribers have already
run and queue backed subscriptions hold the event. Callbacks receive the
action itself, while subscriptions buffer an `ActionEvent` snapshot of the
status it was published with, since the action may have moved on by the time
the event is read.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import Any, TYPE_CHECKING

from dataflow.exceptions import ChannelClosedError
from dataflow.kind import ActionKind, action_kind
from dataflow.store import ActionStatus

if TYPE_CHECKING:
    from dataflow.action import DataAction

__all__ = [
    "ActionEvent",
    "EventBus",
    "EventCallback",
    "EventSubscription",
]

_LOGGER = logging.getLogger(__name__)

EventCallback = Callable[["DataAction[Any]"], None]

# Marks the end of a subscription's stream
_CLOSED = object()


@dataclass(frozen=True)
class ActionEvent:
    """An action as it was when published."""

    action: "DataAction[Any]"
    """The published action, its status may have changed since."""

    kind: str
    status: ActionStatus

    error: str | None = None
    """Error message, only set for an error status."""

    @classmethod
    def of(cls, action: "DataAction[Any]") -> "ActionEvent":
        """Capture the current status of an action."""
        status = action.status
        return cls(
            action=action,
            kind=action.kind,
            status=status,
            error=action.error if status == ActionStatus.ERROR else None,
        )


@dataclass(eq=False)
class _Listener:
    callback: EventCallback
    kind: str | None = None
    on_close: Callable[[], None] | None = None

    def matches(self, action: "DataAction[Any]") -> bool:
        return self.kind is None or self.kind == action.kind


class EventSubscription:
    """A live sequence of the events published after the subscription was created.

    The subscription is attached to the bus as soon as it is constructed, so
    an action constructed right after subscribing is never missed. Iterate
    with `async for`; the iteration ends when the bus is shut down or the
    subscription is closed.
    """

    def __init__(self, bus: "EventBus", kind: ActionKind | None = None) -> None:
        """Initialize the subscription and attach it to the bus."""
        self._kind = action_kind(kind) if kind is not None else None
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._done = False
        self._closed = False
        self._remove = bus.listen(
            self._on_event, kind=self._kind, on_close=self._on_close
        )

    @property
    def kind(self) -> str | None:
        """The action kind this subscription is filtered to, if any."""
        return self._kind

    @property
    def closed(self) -> bool:
        """Return True once no further events will arrive."""
        return self._closed

    def _on_event(self, action: "DataAction[Any]") -> None:
        self._queue.put_nowait(ActionEvent.of(action))

    def _on_close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    def close(self) -> None:
        """Detach from the bus and end the stream."""
        self._remove()
        self._on_close()

    def _unwrap(self, item: Any) -> ActionEvent | None:
        if item is _CLOSED:
            self._done = True
            return None
        return item  # type: ignore[no-any-return]

    async def get(self) -> ActionEvent | None:
        """Wait for the next event, returning None once the stream has ended."""
        if self._done:
            return None
        return self._unwrap(await self._queue.get())

    def get_nowait(self) -> ActionEvent | None:
        """Return the next buffered event without waiting, or None if there is none."""
        if self._done:
            return None
        try:
            item = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
        return self._unwrap(item)

    def drain(self) -> list[ActionEvent]:
        """Return every event buffered so far without waiting."""
        events = []
        while (event := self.get_nowait()) is not None:
            events.append(event)
        return events

    def __aiter__(self) -> "EventSubscription":
        return self

    async def __anext__(self) -> ActionEvent:
        if (event := await self.get()) is None:
            raise StopAsyncIteration
        return event

    async def __aenter__(self) -> "EventSubscription":
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.close()


class EventBus:
    """Process wide broadcast channel of action instances."""

    def __init__(self) -> None:
        """Initialize the EventBus."""
        self._listeners: list[_Listener] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        """Return True after the bus has been shut down."""
        return self._closed

    def num_subscribers(self) -> int:
        """Return the number of attached subscribers."""
        return len(self._listeners)

    def listen(
        self,
        callback: EventCallback,
        kind: ActionKind | None = None,
        on_close: Callable[[], None] | None = None,
    ) -> Callable[[], None]:
        """Register a callback invoked synchronously for every published action.

        When `kind` is set, only actions of that kind are delivered. The
        optional `on_close` is called when the bus shuts down. Returns a
        callable that removes the listener.
        """
        listener = _Listener(
            callback=callback,
            kind=action_kind(kind) if kind is not None else None,
            on_close=on_close,
        )

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        if self._closed:
            _LOGGER.debug("Subscribed to a closed event bus")
            if on_close is not None:
                on_close()
            return remove

        self._listeners.append(listener)
        return remove

    def subscribe_all(self) -> EventSubscription:
        """Return a live sequence of every action published from now on."""
        return EventSubscription(self)

    def subscribe_filtered(self, kind: ActionKind) -> EventSubscription:
        """Return a live sequence of the actions of one kind published from now on."""
        return EventSubscription(self, kind)

    def publish(self, action: "DataAction[Any]") -> None:
        """Deliver an action to every attached subscriber."""
        if self._closed:
            raise ChannelClosedError(action.kind)
        _LOGGER.debug("Publishing %s (%s)", action.kind, action.status)
        for listener in list(self._listeners):  # Iterate over a copy for safe removal
            if not listener.matches(action):
                continue
            try:
                listener.callback(action)
            except Exception:
                _LOGGER.exception("Event listener failed for %s", action.kind)

    def shutdown(self) -> None:
        """Close the channel and signal completion to every subscriber."""
        if self._closed:
            return
        _LOGGER.debug("Shutting down event bus with %d subscribers", len(self._listeners))
        self._closed = True
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            if listener.on_close is None:
                continue
            try:
                listener.on_close()
            except Exception:
                _LOGGER.exception("Event listener failed to close")
