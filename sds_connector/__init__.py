"""Query streams on a sequential data store and read them as typed frames."""

from .auth import CredentialState, TokenManager, token_endpoint
from .client import SdsClient
from .config import ConnectorConfig
from .datasource import DataQuery, DataResponse, HealthResult, QueryModel, SdsDataSource
from .errors import AuthError, DecodeError, HttpStatusError, SdsError, TransportError
from .frame import Column, Frame, build_frame
from .models import SdsProperty, SdsType, Stream
from .type_codes import SdsTypeCode, decode_value, empty_column

__version__ = "0.1.0"

__all__ = [
    "SdsClient",
    "SdsDataSource",
    "ConnectorConfig",
    "CredentialState",
    "TokenManager",
    "token_endpoint",
    "DataQuery",
    "DataResponse",
    "HealthResult",
    "QueryModel",
    "Stream",
    "SdsType",
    "SdsProperty",
    "SdsTypeCode",
    "Column",
    "Frame",
    "build_frame",
    "decode_value",
    "empty_column",
    "SdsError",
    "TransportError",
    "HttpStatusError",
    "DecodeError",
    "AuthError",
]
