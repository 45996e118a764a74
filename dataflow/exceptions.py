"""Exceptions related to dataflow."""

__all__ = [
    "DataFlowException",
    "NotInitializedError",
    "ChannelClosedError",
    "NoEventLoopError",
    "DataException",
]


class DataFlowException(Exception):
    """Generic base exception used for this library."""


class NotInitializedError(DataFlowException):
    """Raised when the store is accessed before the flow was initialized."""

    def __init__(self) -> None:
        super().__init__(
            "DataFlow store not initialized. Call init() before using."
        )


class ChannelClosedError(DataFlowException):
    """Raised when an event is published after the bus was shut down."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Event bus is closed, cannot publish {kind}")
        self.kind = kind


class NoEventLoopError(DataFlowException):
    """Raised when a suspending action is started outside of a running event loop."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Action {kind} suspended but no event loop is running")
        self.kind = kind


class DataException(DataFlowException):
    """Failure raised from an action body with a user-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message
