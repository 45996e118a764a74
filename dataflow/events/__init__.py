"""Event bus publishing action instances as they change status."""

from .bus import ActionEvent, EventBus, EventCallback, EventSubscription

__all__ = [
    "ActionEvent",
    "EventBus",
    "EventCallback",
    "EventSubscription",
]
