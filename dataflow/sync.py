"""Headless status tracking for a group of action kinds.

A view that depends on several actions usually needs a combined answer: is
any of them still loading, did one of them fail. `DataSync` listens to the
event bus and keeps the latest status of each tracked kind, and can call a
notifier whenever an action of a given kind changes status.
"""

from collections.abc import Callable, Iterable, Mapping
import logging
from typing import Any, TYPE_CHECKING

from .context import get_data_flow
from .flow import DataFlow
from .kind import ActionKind, action_kind
from .store import ActionStatus

if TYPE_CHECKING:
    from .action import DataAction

__all__ = [
    "DataSync",
    "StatusCallback",
]

_LOGGER = logging.getLogger(__name__)

StatusCallback = Callable[["DataAction[Any]", ActionStatus], None]


class DataSync:
    """Tracks the statuses of a set of action kinds as they are published."""

    def __init__(
        self,
        kinds: Iterable[ActionKind] = (),
        notifiers: Mapping[ActionKind, StatusCallback] | None = None,
        on_change: Callable[["DataAction[Any]"], None] | None = None,
        flow: DataFlow | None = None,
    ) -> None:
        """Initialize the DataSync and start listening.

        Args:
            kinds: Action kinds whose statuses are tracked.
            notifiers: Callbacks invoked with the action and its status when
                an action of the given kind is published.
            on_change: Called after a tracked status changed.
            flow: The flow to listen to, the current one by default.
        """
        self._flow = flow or get_data_flow()
        self._kinds = {action_kind(kind) for kind in kinds}
        self._notifiers = {
            action_kind(kind): callback for kind, callback in (notifiers or {}).items()
        }
        self._on_change = on_change
        self._statuses: dict[str, ActionStatus] = {}
        self._last_error: str | None = None
        self._remove = self._flow.listen(self._on_event)

    def _on_event(self, action: "DataAction[Any]") -> None:
        if action.kind in self._kinds:
            self._statuses[action.kind] = action.status
            if action.status == ActionStatus.ERROR:
                self._last_error = action.error
            if self._on_change is not None:
                self._on_change(action)
        if (notifier := self._notifiers.get(action.kind)) is not None:
            notifier(action, action.status)

    def get_status(self, kind: ActionKind) -> ActionStatus:
        """Return the latest observed status of a kind, idle if none was seen."""
        return self._statuses.get(action_kind(kind), ActionStatus.IDLE)

    @property
    def has_executed(self) -> bool:
        """Return True once any tracked action was published."""
        return bool(self._statuses)

    def _which(self, status: ActionStatus) -> str | None:
        for kind, value in self._statuses.items():
            if value == status:
                return kind
        return None

    @property
    def is_any_loading(self) -> bool:
        return self._which(ActionStatus.LOADING) is not None

    @property
    def which_loading(self) -> str | None:
        """The first tracked kind currently loading."""
        return self._which(ActionStatus.LOADING)

    @property
    def has_any_error(self) -> bool:
        return self._which(ActionStatus.ERROR) is not None

    @property
    def which_error(self) -> str | None:
        """The first tracked kind whose latest run failed."""
        return self._which(ActionStatus.ERROR)

    @property
    def last_error(self) -> str | None:
        """Error message of the most recent tracked failure."""
        return self._last_error

    @property
    def is_any_success(self) -> bool:
        return self._which(ActionStatus.SUCCESS) is not None

    @property
    def are_all_successful(self) -> bool:
        """Return True if every observed kind last succeeded."""
        return all(value == ActionStatus.SUCCESS for value in self._statuses.values())

    @property
    def which_success(self) -> str | None:
        return self._which(ActionStatus.SUCCESS)

    def close(self) -> None:
        """Stop listening to the event bus."""
        _LOGGER.debug("Closing sync for %s", sorted(self._kinds))
        self._remove()
        self._statuses.clear()

    def __enter__(self) -> "DataSync":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
