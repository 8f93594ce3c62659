"""Host-facing data source: batch query handling and health checks."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from .client import RESPONSE_FRAME_NAME, SdsClient
from .config import ConnectorConfig
from .errors import AuthError, SdsError
from .frame import Frame

logger = logging.getLogger(__name__)

STREAMS_COLLECTION = "streams"

HEALTH_OK = "ok"
HEALTH_ERROR = "error"


def format_rfc3339(value: datetime) -> str:
    """Format a time-range bound as RFC3339 with whole seconds. Naive values are UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.replace(microsecond=0).isoformat()
    return text[:-6] + "Z" if text.endswith("+00:00") else text


@dataclass
class QueryModel:
    """The query editor's model for one query."""
    collection: str = ""
    query_text: str = ""
    id: str = ""

    @classmethod
    def from_json(cls, data: Any) -> QueryModel:
        """
        Parse a query model from a dict or JSON text.

        Raises:
            ValueError: Not a JSON object, or a field has the wrong type
        """
        if isinstance(data, (str, bytes, bytearray)):
            data = json.loads(data)
        if not isinstance(data, dict):
            raise ValueError("Query model must be a JSON object")

        values = {}
        for attr, key in (("collection", "collection"), ("query_text", "queryText"), ("id", "id")):
            value = data.get(key) or ""
            if not isinstance(value, str):
                raise ValueError(f"Query field {key!r} must be a string")
            values[attr] = value
        return cls(**values)


@dataclass
class DataQuery:
    """One query of a batch, as sent by the host."""
    ref_id: str
    model: Any
    time_from: datetime
    time_to: datetime


@dataclass
class DataResponse:
    """Result of one query: its frames, or the error that replaced them."""
    frames: list[Frame] = field(default_factory=list)
    error: Exception | None = None


@dataclass
class HealthResult:
    """Health check outcome. details carries the underlying failure, if any."""
    status: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def healthy(self) -> bool:
        return self.status == HEALTH_OK


@dataclass
class SdsDataSource:
    """
    One configured data source instance.

    Usage:
        ds = SdsDataSource(ConnectorConfig.from_settings(json_data, secure_json_data))
        responses = ds.query_data([
            DataQuery("A", {"collection": "streams", "id": "Tank1"}, start, end),
        ])
        frame = responses["A"].frames[0]
    """
    config: ConnectorConfig = field(default_factory=ConnectorConfig)
    client: SdsClient | None = None

    def __post_init__(self) -> None:
        if self.client is None:
            self.client = SdsClient(config=self.config)

    def _token(self, headers: Mapping[str, str] | None) -> str:
        if self.config.oauth_pass_thru:
            token = (headers or {}).get("Authorization", "")
            if not token:
                raise AuthError("Unable to retrieve token")
            return token
        return self.client.get_token()

    def query_data(
        self,
        queries: Iterable[DataQuery],
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, DataResponse]:
        """
        Run a batch of queries in order.

        Args:
            queries: Queries to run
            headers: Inbound request headers; Authorization is used in
                pass-through mode

        Returns:
            Dict mapping ref_id to DataResponse

        Raises:
            SdsError: Token retrieval or any query failed. The batch stops at
                the first failure and no responses are returned.
        """
        token = self._token(headers)

        responses: dict[str, DataResponse] = {}
        for query in queries:
            responses[query.ref_id] = self.query(query, token)
        return responses

    def query(self, query: DataQuery, token: str) -> DataResponse:
        """Run a single query with an already obtained token."""
        logger.info(f"Running query {query.ref_id}")

        try:
            model = QueryModel.from_json(query.model)
        except ValueError as e:
            logger.warning(f"Invalid query model for {query.ref_id}: {e}")
            return DataResponse(error=e)

        if model.collection.lower() != STREAMS_COLLECTION:
            return DataResponse(frames=[Frame(name=RESPONSE_FRAME_NAME)])

        if model.id:
            logger.debug(f"Stream data query for {model.id!r}")
            frame = self.client.fetch_stream_data(
                token,
                model.id,
                format_rfc3339(query.time_from),
                format_rfc3339(query.time_to),
            )
        else:
            logger.debug(f"Stream query {model.query_text!r}")
            frame = self.client.list_streams(token, model.query_text)

        return DataResponse(frames=[frame])

    def check_health(self) -> HealthResult:
        """
        Check that credentials and ids are valid.

        Pass-through mode has no credentials of its own and always reports ok.
        """
        if self.config.oauth_pass_thru:
            return HealthResult(HEALTH_OK, "Data source is working")

        try:
            token = self.client.get_token()
        except SdsError as e:
            logger.warning(f"Unable to get token for health check: {e}")
            return HealthResult(
                HEALTH_ERROR,
                "Unable to retrieve token",
                details={"error": type(e).__name__, "detail": str(e)},
            )

        try:
            self.client.check_connection(token)
        except SdsError as e:
            logger.warning(f"Health check request failed: {e}")
            return HealthResult(
                HEALTH_ERROR,
                "Invalid Configuration",
                details={"error": type(e).__name__, "detail": str(e)},
            )

        return HealthResult(HEALTH_OK, "Data source is working")
