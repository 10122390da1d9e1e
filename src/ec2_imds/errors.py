"""Exceptions raised by the metadata client."""

from __future__ import annotations

from typing import Optional


class IMDSError(RuntimeError):
    """Base class for every error raised while talking to the metadata service."""


class HttpRequestError(IMDSError):
    """The request could not be sent or came back with an unexpected status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnauthorizedError(HttpRequestError):
    """The service kept rejecting the token after a refresh."""


class IMDSIOError(IMDSError):
    """The response body could not be read as text."""


class NotFoundError(IMDSError):
    """The metadata category does not exist on this instance."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Metadata path not found: '{path}'")
        self.path = path


class UnknownAvailabilityZoneError(IMDSError):
    pass


class JsonError(IMDSError):
    pass
