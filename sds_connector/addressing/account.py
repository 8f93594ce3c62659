"""Legacy account addressing: /api/account/<account>/sds/<sds>/<version>."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import BaseAddressing, escape

if TYPE_CHECKING:
    from ..config import ConnectorConfig


class AccountAddressing(BaseAddressing):
    """Streams and types scoped by account id and SDS namespace id."""

    name = "account"

    def base_path(self, config: ConnectorConfig) -> str:
        return (
            f"{self.resource(config)}/api/account/{escape(config.account_id)}"
            f"/sds/{escape(config.scope_id)}/{config.api_version}"
        )

    def health_check_path(self, config: ConnectorConfig) -> str:
        # A 2xx listing is enough to prove the token and ids are valid
        return f"{self.base_path(config)}/streams"
