from __future__ import annotations

import logging
import threading
from typing import Dict, Optional, Union

import requests

from .commands import IMDSCommand, IPVersion, resolve
from .config_loader import (
    DEFAULT_API_VERSION,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TOKEN_TTL,
    ClientConfig,
)
from .errors import (
    HttpRequestError,
    IMDSError,
    IMDSIOError,
    NotFoundError,
    UnauthorizedError,
)

logger = logging.getLogger("ec2-imds-client")

TOKEN_TTL_HEADER = "X-aws-ec2-metadata-token-ttl-seconds"
TOKEN_HEADER = "X-aws-ec2-metadata-token"
MAX_TOKEN_TTL = 21600
# First request plus one retry after a token refresh.
MAX_ATTEMPTS = 2


class IMDSClient:
    """Fetches instance metadata, keeping a session token for the service.

    The token is refreshed only when the service answers 401, and the
    rejected request is retried once. Every call runs under the client's
    lock, so refresh-then-retry is atomic with respect to other threads.
    """

    def __init__(
        self,
        ip_version: Union[IPVersion, str],
        token_ttl: Optional[int] = None,
        api_version: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.ip_version = IPVersion.parse(ip_version)
        self.token_ttl = DEFAULT_TOKEN_TTL if token_ttl is None else int(token_ttl)
        if not 1 <= self.token_ttl <= MAX_TOKEN_TTL:
            raise ValueError(f"token_ttl must be between 1 and {MAX_TOKEN_TTL} seconds")
        self.api_version = DEFAULT_API_VERSION if api_version is None else api_version
        self.timeout = DEFAULT_TIMEOUT_SECONDS if timeout is None else float(timeout)
        if self.timeout <= 0:
            raise ValueError("timeout must be greater than 0 seconds")
        self.base_url = f"http://{self.ip_version.host}"

        self._session = session or requests.Session()
        self._lock = threading.Lock()
        self._token: Optional[str] = None

        # The service may be unreachable right now; the first request retries.
        try:
            self.acquire_token()
        except IMDSError as exc:
            logger.warning("Initial token fetch from %s failed: %s", self.base_url, exc)

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs) -> "IMDSClient":
        return cls(
            config.ip_version,
            token_ttl=config.token_ttl,
            api_version=config.api_version,
            timeout=config.timeout,
            **kwargs,
        )

    @property
    def token(self) -> Optional[str]:
        return self._token

    def build_url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def acquire_token(self) -> str:
        """Request a new session token and cache it."""

        with self._lock:
            return self._acquire_token()

    def _acquire_token(self) -> str:
        url = self.build_url(IMDSCommand.API_TOKEN.path)
        try:
            response = self._session.put(
                url,
                headers={TOKEN_TTL_HEADER: str(self.token_ttl)},
                timeout=self.timeout,
                stream=True,
            )
        except requests.RequestException as exc:
            raise HttpRequestError(f"Error while retrieving token: {exc}") from exc

        with response:
            if not response.ok:
                raise HttpRequestError(
                    f"Token request failed with status {response.status_code}",
                    status_code=response.status_code,
                )
            token = self._read_text(response)

        self._token = token
        logger.info("Acquired metadata token (ttl=%ss)", self.token_ttl)
        return token

    def send_command(self, command: IMDSCommand) -> str:
        """Return the payload for ``command`` as text."""

        url = self.build_url(resolve(command))
        with self._lock:
            for attempt in range(1, MAX_ATTEMPTS + 1):
                response = self._get(url)
                with response:
                    if response.status_code != requests.codes.unauthorized:
                        return self._payload(command, response)
                if attempt < MAX_ATTEMPTS:
                    logger.info("Token rejected for %s; refreshing", command.path or "/")
                    self._acquire_token()

        raise UnauthorizedError(
            f"Token rejected for '{command.path}' after refresh",
            status_code=requests.codes.unauthorized,
        )

    def _get(self, url: str) -> requests.Response:
        headers: Dict[str, str] = {}
        if self._token is not None:
            headers[TOKEN_HEADER] = self._token
        logger.debug("GET %s", url)
        try:
            return self._session.get(url, headers=headers, timeout=self.timeout, stream=True)
        except requests.RequestException as exc:
            raise HttpRequestError(f"Error while requesting {url}: {exc}") from exc

    def _payload(self, command: IMDSCommand, response: requests.Response) -> str:
        if response.status_code == requests.codes.not_found:
            raise NotFoundError(command.path)
        if not response.ok:
            raise HttpRequestError(
                f"Unexpected status {response.status_code} for '{command.path}'",
                status_code=response.status_code,
            )
        return self._read_text(response)

    @staticmethod
    def _read_text(response: requests.Response) -> str:
        try:
            return response.text
        except requests.RequestException as exc:
            raise IMDSIOError(f"Error unwrapping response text: {exc}") from exc

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "IMDSClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
