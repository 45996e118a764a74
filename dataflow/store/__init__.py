"""
The store module holds the single application store shared by every action
run through a flow.

- Applications subclass DataStore and add their own state attributes.
- The store records the last committed status of each action kind.
- Notification of changes is not a store concern, the event bus publishes them.
"""

from .store import DataStore
from .status import ActionStatus, StatusInfo

__all__ = [
    "DataStore",
    "ActionStatus",
    "StatusInfo",
]
