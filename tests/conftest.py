"""Shared pytest fixtures for sds_connector tests."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock

import pytest

from sds_connector.config import ConnectorConfig

from tests.fixtures.mock_service import create_mock_service_for_tank

RESOURCE = "https://sds.example.com"
BASE_PATH = f"{RESOURCE}/api/account/acct-1/sds/ns-1/v1"
TOKEN_ENDPOINT = "https://identity.sds.example.com/account/acct-1/authentication/connect/token"


def make_config(**kwargs: Any) -> ConnectorConfig:
    """ConnectorConfig for tests, independent of SDS_* environment variables."""
    values: dict[str, Any] = {
        "resource": RESOURCE,
        "api_version": "v1",
        "account_id": "acct-1",
        "addressing": "account",
        "sds_id": "ns-1",
        "namespace_id": "",
        "community_id": "",
        "client_id": "client-1",
        "client_secret": "secret-1",
        "oauth_pass_thru": False,
        "timeout": 30.0,
        "strict_decoding": False,
    }
    values.update(kwargs)
    return ConnectorConfig(**values)


@pytest.fixture
def config():
    """Factory fixture for creating ConnectorConfig instances."""
    return make_config


@pytest.fixture
def tank_service():
    """Mock platform with the Tank1/Tank2 streams."""
    return create_mock_service_for_tank()


@pytest.fixture
def mock_httpx_response():
    """Factory fixture for creating mock httpx responses."""
    def _factory(
        status_code: int = 200,
        json_data: Any = None,
        text: str | None = None,
        reason_phrase: str = "OK",
    ):
        if text is None:
            text = json.dumps(json_data if json_data is not None else {})
        response = MagicMock()
        response.status_code = status_code
        response.reason_phrase = reason_phrase
        response.text = text
        response.content = text.encode()
        response.headers = {}
        return response
    return _factory


@pytest.fixture
def mock_httpx_client():
    """Patchable stand-in for httpx.Client used as a context manager."""
    def _factory(mock_client: MagicMock, response: Any) -> MagicMock:
        instance = MagicMock()
        instance.get.return_value = response
        instance.post.return_value = response
        mock_client.return_value.__enter__.return_value = instance
        return instance
    return _factory
