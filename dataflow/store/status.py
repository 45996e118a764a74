"""Status information for an action."""

from enum import StrEnum
from dataclasses import dataclass


class ActionStatus(StrEnum):
    """Lifecycle status of an action."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        """Return True if no further transition can follow this status."""
        return self in (ActionStatus.SUCCESS, ActionStatus.ERROR)


@dataclass
class StatusInfo:
    """Committed status and optional error message for an action kind."""

    status: ActionStatus
    error: str | None = None

    def __str__(self) -> str:
        """Return a string representation of the status."""
        if self.error:
            return f"{self.status}: {self.error}"
        return str(self.status)
