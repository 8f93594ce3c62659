"""OAuth2 client-credentials token handling for the SDS connector."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, TYPE_CHECKING

import httpx

from .errors import DecodeError, HttpStatusError, TransportError

if TYPE_CHECKING:
    from .config import ConnectorConfig

logger = logging.getLogger(__name__)

# A cached token is reused only while it has more than this many seconds left
TOKEN_REFRESH_MARGIN_SECONDS = 5 * 60

BEARER_SCHEME = "Bearer"


def token_endpoint(resource: str, account_id: str) -> str:
    """
    Build the identity token endpoint for a resource and account.

    Args:
        resource: Platform resource URL, e.g. https://example.datahub.com/
        account_id: Account (or tenant) id

    Returns:
        https://identity.<host>/account/<id>/authentication/connect/token
    """
    host = resource.removeprefix("https://").removesuffix("/")
    return f"https://identity.{host}/account/{account_id}/authentication/connect/token"


@dataclass
class CredentialState:
    """Client credentials plus the currently cached bearer token."""
    client_id: str
    client_secret: str = field(repr=False)
    account_id: str
    resource: str
    api_version: str = "v1"
    token: str = field(default="", repr=False)
    token_expiration: float = 0.0

    @classmethod
    def from_config(cls, config: ConnectorConfig) -> CredentialState:
        return cls(
            client_id=config.client_id,
            client_secret=config.client_secret,
            account_id=config.account_id,
            resource=config.resource,
            api_version=config.api_version,
        )


@dataclass
class TokenManager:
    """
    Produces bearer tokens, refreshing them only when near expiry.

    The check-and-refresh sequence runs under a lock, so concurrent callers
    sharing one manager never issue duplicate token requests.
    """
    state: CredentialState
    timeout: float = 30.0
    clock: Callable[[], float] = time.time

    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def get_token(self) -> str:
        """
        Get an Authorization header value for the platform API.

        Returns:
            "Bearer <access token>"

        Raises:
            TransportError: Token endpoint could not be reached
            HttpStatusError: Token endpoint returned a non-2xx status
            DecodeError: Token response was not the expected JSON
        """
        with self._lock:
            if self.state.token_expiration - self.clock() > TOKEN_REFRESH_MARGIN_SECONDS:
                return f"{BEARER_SCHEME} {self.state.token}"
            self._refresh()
            return f"{BEARER_SCHEME} {self.state.token}"

    def _refresh(self) -> None:
        """Request a new token and store it with its expiry."""
        endpoint = token_endpoint(self.state.resource, self.state.account_id)
        logger.debug(f"Requesting token from {endpoint}")

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    endpoint,
                    data={
                        "client_id": self.state.client_id,
                        "client_secret": self.state.client_secret,
                        "grant_type": "client_credentials",
                        "scope": "api",
                    },
                )
        except httpx.RequestError as e:
            logger.warning(f"Error requesting token: {e}")
            raise TransportError(f"Token request to {endpoint} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            error = HttpStatusError(response.status_code, response.reason_phrase, response.text)
            logger.warning(f"Error requesting token: {error}")
            raise error

        try:
            token_information = json.loads(response.content)
        except ValueError as e:
            logger.warning(f"Error parsing token response: {e}")
            raise DecodeError(f"Token response is not valid JSON: {e}") from e

        if not isinstance(token_information, dict):
            raise DecodeError("Token response is not a JSON object")

        access_token = token_information.get("access_token")
        expires_in = token_information.get("expires_in")
        if not isinstance(access_token, str):
            raise DecodeError("Token response has no access_token string")
        if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
            raise DecodeError("Token response has no numeric expires_in")

        self.state.token = access_token
        self.state.token_expiration = self.clock() + expires_in
        logger.info(f"Obtained token for client {self.state.client_id}, expires in {expires_in}s")
