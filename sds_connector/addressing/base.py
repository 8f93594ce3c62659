"""Base addressing interface for building SDS request paths."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from urllib.parse import quote

if TYPE_CHECKING:
    from ..config import ConnectorConfig


def escape(segment: str) -> str:
    """Escape a value for use as a single URL path segment."""
    return quote(segment, safe="")


class BaseAddressing(ABC):
    """
    Base class for SDS addressing conventions.

    Each convention decides where streams and types live under the
    platform resource and which path a health check probes.
    """

    name: str = ""

    # Health check response must decode as a JSON object with an Id
    validates_health_body: bool = False

    @abstractmethod
    def base_path(self, config: ConnectorConfig) -> str:
        """
        Build the base path that streams/ and types/ hang off.

        Args:
            config: Connector configuration (resource, ids, API version)

        Returns:
            Absolute URL without a trailing slash
        """
        ...

    def health_check_path(self, config: ConnectorConfig) -> str:
        """Path probed by a health check. Defaults to the base path."""
        return self.base_path(config)

    @staticmethod
    def resource(config: ConnectorConfig) -> str:
        return config.resource.rstrip("/")
