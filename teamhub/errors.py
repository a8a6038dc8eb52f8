"""Error types shared by the client, the session and the data store."""

from typing import Optional


class TeamHubError(Exception):
    """Base class for errors raised or reported by teamhub."""


class NetworkFailure(TeamHubError):
    """A remote call did not complete or came back with a non-success status.

    ``status_code`` is None when no HTTP response was received at all.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"


class ValidationFailure(TeamHubError, ValueError):
    """Caller-supplied input is missing required fields or is out of range."""
