"""Stream and type metadata returned by the SDS REST API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import DecodeError


def _require_dict(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {what}, got {type(data).__name__}")
    return data


def _optional_str(data: dict[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"{what}.{key} must be a string, got {type(value).__name__}")
    return value


@dataclass
class Stream:
    """A stream's metadata. Fetched per query, never cached."""
    id: str
    name: str = ""
    type_id: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Stream:
        data = _require_dict(data, "stream")
        return cls(
            id=_optional_str(data, "Id", "Stream"),
            name=_optional_str(data, "Name", "Stream"),
            type_id=_optional_str(data, "TypeId", "Stream"),
        )


@dataclass
class SdsProperty:
    """One typed property of an SdsType; its id is both column name and record key."""
    id: str
    type_code: str

    @classmethod
    def from_dict(cls, data: Any) -> SdsProperty:
        data = _require_dict(data, "type property")
        prop_type = data.get("SdsType") or {}
        prop_type = _require_dict(prop_type, "property SdsType")
        code = prop_type.get("SdsTypeCode", "")
        return cls(
            id=_optional_str(data, "Id", "Property"),
            type_code=str(code),
        )


@dataclass
class SdsType:
    """Ordered schema of a stream's data points."""
    id: str
    properties: list[SdsProperty] = field(default_factory=list)
    name: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> SdsType:
        data = _require_dict(data, "type")
        properties = data.get("Properties") or []
        if not isinstance(properties, list):
            raise DecodeError("Type.Properties must be a JSON array")
        return cls(
            id=_optional_str(data, "Id", "Type"),
            properties=[SdsProperty.from_dict(p) for p in properties],
            name=_optional_str(data, "Name", "Type"),
        )
