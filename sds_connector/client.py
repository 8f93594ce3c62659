"""SDS REST client: resource fetching, schema resolution and the two query operations."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from .addressing import BaseAddressing, get_addressing
from .addressing.base import escape
from .auth import CredentialState, TokenManager
from .config import ConnectorConfig
from .errors import DecodeError, HttpStatusError, TransportError
from .frame import Column, Frame, build_frame
from .models import SdsType, Stream

logger = logging.getLogger(__name__)

# Name of frames that are not tied to a single stream
RESPONSE_FRAME_NAME = "response"


@dataclass
class SdsClient:
    """
    Client for querying streams on the sequential data store.

    Usage:
        client = SdsClient(config=ConnectorConfig(
            resource="https://example.datahub.com",
            account_id="my-account",
            sds_id="my-namespace",
            client_id="...",
            client_secret="...",
        ))
        token = client.get_token()
        streams = client.list_streams(token, "Tank*")
        frame = client.fetch_stream_data(
            token, "Tank1", "2024-01-01T00:00:00Z", "2024-01-02T00:00:00Z",
        )
        df = frame.to_dataframe()

    Every query is a live round-trip; nothing but the bearer token is cached.
    """
    config: ConnectorConfig = field(default_factory=ConnectorConfig)

    _addressing: BaseAddressing = field(init=False, repr=False)
    _token_manager: TokenManager = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._addressing = get_addressing(self.config.addressing)
        self._token_manager = TokenManager(
            CredentialState.from_config(self.config),
            timeout=self.config.timeout,
        )

    @property
    def addressing(self) -> BaseAddressing:
        return self._addressing

    @property
    def token_manager(self) -> TokenManager:
        return self._token_manager

    @property
    def base_path(self) -> str:
        """Base URL that streams/ and types/ hang off."""
        return self._addressing.base_path(self.config)

    def get_token(self) -> str:
        """Get a bearer token via client credentials, cached until near expiry."""
        return self._token_manager.get_token()

    def request(
        self,
        token: str,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> bytes:
        """
        Make one authenticated GET request.

        Args:
            token: Authorization header value, e.g. "Bearer abc"
            url: Absolute request URL
            headers: Extra headers merged over the defaults
            params: Query parameters (URL-escaped by httpx)

        Returns:
            The raw response body

        Raises:
            TransportError: Request could not be sent or body could not be read
            HttpStatusError: Response status outside [200, 300)
        """
        request_headers = {"Authorization": token}
        if headers:
            request_headers.update(headers)

        logger.debug(f"Making query to {url}")
        try:
            with httpx.Client(timeout=self.config.timeout, follow_redirects=True) as client:
                response = client.get(url, headers=request_headers, params=params)
                body = response.content
        except httpx.RequestError as e:
            logger.warning(f"Error making request to {url}: {e}")
            raise TransportError(f"Request to {url} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            error = HttpStatusError(response.status_code, response.reason_phrase, response.text)
            logger.warning(f"Error making request to {url}: {error}")
            raise error

        return body

    def _get_json(
        self,
        token: str,
        url: str,
        params: dict[str, str] | None = None,
    ) -> Any:
        body = self.request(token, url, params=params)
        try:
            return json.loads(body)
        except ValueError as e:
            logger.warning(f"Error parsing json from {url}: {e}")
            raise DecodeError(f"Response from {url} is not valid JSON: {e}") from e

    def resolve_schema(self, token: str, stream_id: str) -> tuple[Stream, SdsType]:
        """
        Fetch a stream and the type definition it is bound to.

        Raises:
            SdsError: Either fetch or decode failed; nothing partial is returned
        """
        stream = Stream.from_dict(
            self._get_json(token, f"{self.base_path}/streams/{escape(stream_id)}")
        )
        sds_type = SdsType.from_dict(
            self._get_json(token, f"{self.base_path}/types/{escape(stream.type_id)}")
        )
        logger.debug(
            f"Stream {stream.id!r} uses type {sds_type.id!r} "
            f"with {len(sds_type.properties)} properties"
        )
        return stream, sds_type

    def list_streams(self, token: str, query: str = "") -> Frame:
        """
        List streams matching a server-side filter.

        Args:
            token: Authorization header value
            query: Filter expression, passed verbatim

        Returns:
            Frame "response" with string columns Id and Name, in listing order
        """
        data = self._get_json(token, f"{self.base_path}/streams", params={"query": query})
        if not isinstance(data, list):
            raise DecodeError("Stream listing is not a JSON array")
        streams = [Stream.from_dict(item) for item in data]

        return Frame(
            name=RESPONSE_FRAME_NAME,
            fields=[
                Column("Id", "string", nullable=False, values=[s.id for s in streams]),
                Column("Name", "string", nullable=False, values=[s.name for s in streams]),
            ],
        )

    def fetch_stream_data(
        self,
        token: str,
        stream_id: str,
        start_index: str,
        end_index: str,
    ) -> Frame:
        """
        Fetch a stream's data between two indexes (inclusive).

        Args:
            token: Authorization header value
            stream_id: Stream id
            start_index: Opaque start index, typically an RFC3339 timestamp
            end_index: Opaque end index

        Returns:
            Frame named after the stream, one column per type property

        Raises:
            SdsError: Schema resolution, data fetch or decoding failed
        """
        stream, sds_type = self.resolve_schema(token, stream_id)

        records = self._get_json(
            token,
            f"{self.base_path}/streams/{escape(stream_id)}/Data",
            params={"startIndex": start_index, "endIndex": end_index},
        )
        if not isinstance(records, list):
            raise DecodeError(f"Data for stream {stream_id!r} is not a JSON array")
        for record in records:
            if not isinstance(record, dict):
                raise DecodeError(f"Data for stream {stream_id!r} contains a non-object row")

        return build_frame(stream.name, sds_type, records, strict=self.config.strict_decoding)

    def check_connection(self, token: str) -> None:
        """
        Probe the configured scope with one lightweight GET.

        Raises:
            SdsError: The request failed or returned an unexpected body
        """
        url = self._addressing.health_check_path(self.config)
        if not self._addressing.validates_health_body:
            self.request(token, url)
            return

        data = self._get_json(token, url)
        if not isinstance(data, dict) or not isinstance(data.get("Id"), str):
            raise DecodeError(f"Health check response from {url} has no Id")
