"""Tenant addressing: /api/<version>/tenants/<tenant>/namespaces|communities/<id>."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import BaseAddressing, escape

if TYPE_CHECKING:
    from ..config import ConnectorConfig


class NamespaceAddressing(BaseAddressing):
    """Streams and types scoped by tenant and namespace."""

    name = "namespace"
    collection = "namespaces"
    validates_health_body = True

    def base_path(self, config: ConnectorConfig) -> str:
        return (
            f"{self.resource(config)}/api/{config.api_version}"
            f"/tenants/{escape(config.account_id)}"
            f"/{self.collection}/{escape(config.scope_id)}"
        )


class CommunityAddressing(NamespaceAddressing):
    """Streams shared into a community, addressed by community id."""

    name = "community"
    collection = "communities"
