"""Connector configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Config file search paths (in order of precedence, last wins)
CONFIG_SEARCH_PATHS = [
    Path.home() / ".sds" / "connector.yaml",  # User-level defaults
    Path(".sds.yaml"),  # Project-level overrides
]


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() == "true"


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


@dataclass
class ConnectorConfig:
    """
    Configuration for the SDS connector.

    Precedence (lowest to highest):
    1. Defaults
    2. Environment variables (SDS_*)
    3. ~/.sds/connector.yaml
    4. .sds.yaml (project root)
    5. Constructor arguments
    """
    # Platform resource URL, e.g. https://example.datahub.com
    resource: str = field(
        default_factory=lambda: os.environ.get("SDS_RESOURCE", "")
    )
    api_version: str = field(
        default_factory=lambda: os.environ.get("SDS_API_VERSION", "v1")
    )

    # Account id for legacy addressing, tenant id otherwise
    account_id: str = field(
        default_factory=lambda: os.environ.get("SDS_ACCOUNT_ID", "")
    )

    # Addressing mode: "account", "namespace" or "community"
    addressing: str = field(
        default_factory=lambda: os.environ.get("SDS_ADDRESSING", "account")
    )
    sds_id: str = field(
        default_factory=lambda: os.environ.get("SDS_SDS_ID", "")
    )
    namespace_id: str = field(
        default_factory=lambda: os.environ.get("SDS_NAMESPACE_ID", "")
    )
    community_id: str = field(
        default_factory=lambda: os.environ.get("SDS_COMMUNITY_ID", "")
    )

    # Client credentials
    client_id: str = field(
        default_factory=lambda: os.environ.get("SDS_CLIENT_ID", "")
    )
    client_secret: str = field(
        default_factory=lambda: os.environ.get("SDS_CLIENT_SECRET", ""),
        repr=False,
    )

    # Use the caller's Authorization header instead of client credentials
    oauth_pass_thru: bool = field(
        default_factory=lambda: _env_bool("SDS_OAUTH_PASS_THRU")
    )

    # Request timeout (seconds)
    timeout: float = field(
        default_factory=lambda: float(os.environ.get("SDS_TIMEOUT", "30"))
    )

    # Fail on malformed dates/booleans instead of defaulting them
    strict_decoding: bool = field(
        default_factory=lambda: _env_bool("SDS_STRICT_DECODING")
    )

    def __post_init__(self) -> None:
        self.addressing = self.addressing.lower()

    @property
    def scope_id(self) -> str:
        """Namespace or community id for the configured addressing mode."""
        if self.addressing == "community":
            return self.community_id
        if self.addressing == "namespace":
            return self.namespace_id or self.sds_id
        return self.sds_id or self.namespace_id

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConnectorConfig:
        """Create config from dictionary. Environment variables fill missing keys."""
        env = os.environ
        return cls(
            resource=data.get("resource", env.get("SDS_RESOURCE", "")),
            api_version=data.get("api_version", env.get("SDS_API_VERSION", "v1")),
            account_id=data.get("account_id", env.get("SDS_ACCOUNT_ID", "")),
            addressing=data.get("addressing", env.get("SDS_ADDRESSING", "account")),
            sds_id=data.get("sds_id", env.get("SDS_SDS_ID", "")),
            namespace_id=data.get("namespace_id", env.get("SDS_NAMESPACE_ID", "")),
            community_id=data.get("community_id", env.get("SDS_COMMUNITY_ID", "")),
            client_id=data.get("client_id", env.get("SDS_CLIENT_ID", "")),
            client_secret=data.get("client_secret", env.get("SDS_CLIENT_SECRET", "")),
            oauth_pass_thru=_as_bool(data.get("oauth_pass_thru", env.get("SDS_OAUTH_PASS_THRU", "false"))),
            timeout=float(data.get("timeout", env.get("SDS_TIMEOUT", "30"))),
            strict_decoding=_as_bool(data.get("strict_decoding", env.get("SDS_STRICT_DECODING", "false"))),
        )

    @classmethod
    def from_settings(
        cls,
        json_data: dict[str, Any],
        secure_json_data: dict[str, str] | None = None,
    ) -> ConnectorConfig:
        """
        Create config from the host's data source settings.

        Args:
            json_data: Plain settings (camelCase keys as stored by the host)
            secure_json_data: Decrypted secure settings (holds clientSecret)

        Returns:
            ConnectorConfig for the data source instance
        """
        secure = secure_json_data or {}
        if json_data.get("useCommunity"):
            addressing = "community"
        elif json_data.get("tenantId") or json_data.get("namespaceId"):
            addressing = "namespace"
        else:
            addressing = "account"

        return cls(
            resource=json_data.get("resource", ""),
            api_version=json_data.get("apiVersion") or "v1",
            account_id=json_data.get("accountId") or json_data.get("tenantId", ""),
            addressing=addressing,
            sds_id=json_data.get("sdsId", ""),
            namespace_id=json_data.get("namespaceId", ""),
            community_id=json_data.get("communityId", ""),
            client_id=json_data.get("clientId", ""),
            client_secret=secure.get("clientSecret", ""),
            oauth_pass_thru=_as_bool(json_data.get("oauthPassThru", False)),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> ConnectorConfig:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def load(cls, config_file: str | Path | None = None) -> ConnectorConfig:
        """
        Load config with auto-discovery.

        Search order (last wins):
        1. ~/.sds/connector.yaml
        2. .sds.yaml
        3. Explicit config_file argument
        4. Environment variables fill keys no file sets
        """
        merged: dict[str, Any] = {}

        # Load from default paths
        for path in CONFIG_SEARCH_PATHS:
            if path.exists():
                import yaml
                with open(path, "r") as f:
                    data = yaml.safe_load(f) or {}
                merged.update(data)

        # Load explicit config file
        if config_file:
            import yaml
            with open(config_file, "r") as f:
                data = yaml.safe_load(f) or {}
            merged.update(data)

        return cls.from_dict(merged)
