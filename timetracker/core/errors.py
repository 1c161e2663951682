from __future__ import annotations


class SessionOwnerError(Exception):
    """Base for failures reported by or about the session owner."""


class OwnerUnavailable(SessionOwnerError):
    """The owner could not be reached; retry on the next poll."""


class ActionRejected(SessionOwnerError):
    """The owner refused a request, e.g. start while already running."""


class PersistenceError(SessionOwnerError):
    """A completed session could not be stored."""


class SyncFailed(SessionOwnerError):
    def __init__(self, cause: Exception) -> None:
        super().__init__(str(cause) or cause.__class__.__name__)
        self.cause = cause
