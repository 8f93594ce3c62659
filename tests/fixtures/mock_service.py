"""
Mock SDS platform for testing without a real tenant.

Provides an httpx MockTransport that serves the identity token endpoint
and the streams/types/data endpoints under any base path.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable
from unittest.mock import patch

import httpx


@dataclass
class MockSdsService:
    """
    Mock the SDS HTTP layer.

    Usage in tests:
        svc = MockSdsService()
        svc.add_stream({"Id": "Tank1", "Name": "Tank 1", "TypeId": "TankType"})
        svc.add_type({"Id": "TankType", "Properties": [...]})
        svc.add_data("Tank1", [{"Time": "...", "Level": 1.5}])

        with svc.patch_httpx():
            client = SdsClient(config=...)
            # Now all httpx calls go through MockSdsService
    """

    streams: dict[str, dict] = field(default_factory=dict)
    types: dict[str, dict] = field(default_factory=dict)
    data: dict[str, list[dict]] = field(default_factory=dict)
    scopes: dict[str, dict] = field(default_factory=dict)

    access_token: str = "mock-token"
    expires_in: float = 3600

    # For tracking calls
    call_log: list[tuple[str, str, dict | None]] = field(default_factory=list)
    token_requests: list[dict[str, str]] = field(default_factory=list)

    # Custom handlers for advanced testing
    custom_handlers: dict[str, Callable[[httpx.Request], httpx.Response]] = field(
        default_factory=dict
    )

    def add_stream(self, stream: dict) -> None:
        """Register a stream for /streams and /streams/{id}."""
        self.streams[stream["Id"]] = stream

    def add_type(self, sds_type: dict) -> None:
        """Register a type for /types/{id}."""
        self.types[sds_type["Id"]] = sds_type

    def add_data(self, stream_id: str, records: list[dict]) -> None:
        """Register data records for /streams/{id}/Data."""
        self.data[stream_id] = records

    def add_scope(self, scope_id: str, body: dict) -> None:
        """Register a namespace or community body for tenant health checks."""
        self.scopes[scope_id] = body

    def add_custom_handler(
        self, pattern: str, handler: Callable[[httpx.Request], httpx.Response]
    ) -> None:
        """Add a custom handler for a URL path pattern (regex)."""
        self.custom_handlers[pattern] = handler

    def fail(self, pattern: str, status_code: int, body: str) -> None:
        """Answer requests whose path matches pattern with a plain-text error."""
        self.add_custom_handler(
            pattern, lambda request: httpx.Response(status_code, text=body)
        )

    def _handle_token(self, request: httpx.Request) -> httpx.Response:
        form = dict(httpx.QueryParams(request.content.decode()))
        self.token_requests.append(form)
        return httpx.Response(
            200,
            json={"access_token": self.access_token, "expires_in": self.expires_in},
        )

    def _handle_request(self, request: httpx.Request) -> httpx.Response:
        """Route request to appropriate handler."""
        path = str(request.url.path)
        method = request.method
        params = dict(request.url.params) if request.url.params else None

        self.call_log.append((method, str(request.url), params))

        # Check custom handlers first
        for pattern, handler in self.custom_handlers.items():
            if re.search(pattern, path):
                return handler(request)

        if method == "POST" and path.endswith("/authentication/connect/token"):
            return self._handle_token(request)

        # .../streams/{id}/Data
        if match := re.search(r"/streams/([^/]+)/Data$", path):
            stream_id = match.group(1)
            if stream_id in self.data:
                return httpx.Response(200, json=self.data[stream_id])
            return httpx.Response(404, text="not found")

        # .../streams/{id}
        if match := re.search(r"/streams/([^/]+)$", path):
            stream_id = match.group(1)
            if stream_id in self.streams:
                return httpx.Response(200, json=self.streams[stream_id])
            return httpx.Response(404, text="not found")

        # .../streams
        if path.endswith("/streams"):
            return httpx.Response(200, json=list(self.streams.values()))

        # .../types/{id}
        if match := re.search(r"/types/([^/]+)$", path):
            type_id = match.group(1)
            if type_id in self.types:
                return httpx.Response(200, json=self.types[type_id])
            return httpx.Response(404, text="not found")

        # .../namespaces/{id} or .../communities/{id}
        if match := re.search(r"/(?:namespaces|communities)/([^/]+)$", path):
            scope_id = match.group(1)
            if scope_id in self.scopes:
                return httpx.Response(200, json=self.scopes[scope_id])
            return httpx.Response(404, text="not found")

        # Default 404
        return httpx.Response(404, text=f"Unknown endpoint: {path}")

    def get_transport(self) -> httpx.MockTransport:
        """Get httpx MockTransport for use with httpx.Client."""
        return httpx.MockTransport(self._handle_request)

    def patch_httpx(self):
        """
        Context manager to patch httpx.Client to use mock transport.

        Usage:
            with mock_service.patch_httpx():
                client = SdsClient(...)
                frame = client.list_streams(token)
        """
        transport = self.get_transport()

        original_init = httpx.Client.__init__

        def patched_init(self_client, *args, **kwargs):
            kwargs["transport"] = transport
            original_init(self_client, *args, **kwargs)

        return patch.object(httpx.Client, "__init__", patched_init)

    def get_calls(self, endpoint: str | None = None) -> list[tuple[str, str, dict | None]]:
        """
        Get logged calls, optionally filtered by endpoint.

        Args:
            endpoint: Optional substring to filter URLs (e.g., "/types/")

        Returns:
            List of (method, url, params) tuples
        """
        if endpoint is None:
            return self.call_log
        return [(m, u, p) for m, u, p in self.call_log if endpoint in u]

    def clear_calls(self) -> None:
        """Clear the call log."""
        self.call_log.clear()
        self.token_requests.clear()


# =============================================================================
# Convenience factory functions for common test scenarios
# =============================================================================


def create_mock_service_for_tank() -> MockSdsService:
    """
    Create a mock platform with one stream and a mixed-type schema.

    Tank1 uses TankType: Timestamp (DateTime), Level (NullableDouble),
    Count (Int32), Open (Boolean), Label (unrecognized code).
    """
    svc = MockSdsService()
    svc.add_stream({"Id": "Tank1", "Name": "Tank 1", "TypeId": "TankType"})
    svc.add_stream({"Id": "Tank2", "Name": "Tank 2", "TypeId": "TankType"})
    svc.add_type(
        {
            "Id": "TankType",
            "Properties": [
                {"Id": "Timestamp", "IsKey": True, "SdsType": {"SdsTypeCode": "DateTime"}},
                {"Id": "Level", "SdsType": {"SdsTypeCode": "NullableDouble"}},
                {"Id": "Count", "SdsType": {"SdsTypeCode": "Int32"}},
                {"Id": "Open", "SdsType": {"SdsTypeCode": "Boolean"}},
                {"Id": "Label", "SdsType": {"SdsTypeCode": "Object"}},
            ],
        }
    )
    svc.add_data(
        "Tank1",
        [
            {"Timestamp": "2020-01-01T00:00:00Z", "Level": 1.5, "Count": 3, "Open": True, "Label": "a"},
            {"Timestamp": "2020-01-02T00:00:00Z", "Level": None, "Count": None, "Open": None, "Label": None},
            {"Timestamp": "2020-01-03T00:00:00Z", "Level": 2.25, "Count": 7.9, "Open": False, "Label": "c"},
        ],
    )
    return svc
