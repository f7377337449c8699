class TaskCacheError(Exception):
    """Base class for errors raised by the task service."""


class InvalidTaskId(TaskCacheError, ValueError):
    """Raised when a task identifier is not an integer in the signed 64-bit range."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Invalid task id: {raw!r}")


class TaskSerializationError(TaskCacheError):
    """Raised when a stored task cannot be encoded as JSON."""
