"""Store module holding application state and the status of each action kind."""

import logging

from dataflow.kind import ActionKind, action_kind

from .status import ActionStatus, StatusInfo

__all__ = ["DataStore"]

_LOGGER = logging.getLogger(__name__)


class DataStore:
    """Base class for the application store.

    Subclasses add their own state attributes. The engine only reads and
    writes the status map, which records the last committed status of every
    action kind that has run.
    """

    def __init__(self) -> None:
        """Initialize the DataStore."""
        self._statuses: dict[str, StatusInfo] = {}

    def get_status(self, kind: ActionKind) -> ActionStatus:
        """Return the last committed status for an action kind, idle if it never ran."""
        if (info := self._statuses.get(action_kind(kind))) is not None:
            return info.status
        return ActionStatus.IDLE

    def get_status_info(self, kind: ActionKind) -> StatusInfo | None:
        """Return the last committed status and error message for an action kind."""
        return self._statuses.get(action_kind(kind))

    def set_status(
        self, kind: ActionKind, status: ActionStatus, error: str | None = None
    ) -> None:
        """Overwrite the committed status for an action kind."""
        name = action_kind(kind)
        _LOGGER.debug("Committing status %s for %s", status, name)
        self._statuses[name] = StatusInfo(status=status, error=error)

    def has_failed_actions(self) -> bool:
        """Check if the last run of any action kind ended in an error.

        Returns:
            bool: True if any action kind has an error status, False otherwise.
        """
        for info in self._statuses.values():
            if info.status == ActionStatus.ERROR:
                return True
        return False

    @property
    def statuses(self) -> dict[str, ActionStatus]:
        """Return a copy of the committed status of every action kind."""
        return {name: info.status for name, info in self._statuses.items()}
