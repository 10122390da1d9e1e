"""EC2 instance metadata (IMDSv2) client with reactive token refresh."""

from .client import IMDSClient
from .commands import IMDSCommand, IPVersion, resolve
from .config_loader import ClientConfig, load_config
from .errors import (
    HttpRequestError,
    IMDSError,
    IMDSIOError,
    JsonError,
    NotFoundError,
    UnauthorizedError,
    UnknownAvailabilityZoneError,
)

__all__ = [
    "IMDSClient",
    "IMDSCommand",
    "IPVersion",
    "resolve",
    "ClientConfig",
    "load_config",
    "IMDSError",
    "HttpRequestError",
    "UnauthorizedError",
    "IMDSIOError",
    "NotFoundError",
    "UnknownAvailabilityZoneError",
    "JsonError",
]
