"""
TalkBank BaaS client library

A Python client for the TalkBank banking-as-a-service API that signs
every request with the partner's HMAC-SHA256 key.

Example usage:
    from talkbank import Client

    client = Client("partner-id", "signing-key")
    response = client.account_balance()
"""

from .client import Client
from .exceptions import (
    TalkBankError,
    ConfigurationError,
    HTTPError,
    APIError
)
from .request import (
    DispatchTarget,
    RequestHeaders,
    SignedRequest,
    build_request,
    encode_query,
    filter_data,
    parse_location
)
from .signing import canonical_string, content_sha256, sign
from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_CONFIG,
    EMPTY_CONTENT_SHA256
)

__version__ = "1.0.0"
__all__ = [
    "Client",
    "TalkBankError",
    "ConfigurationError",
    "HTTPError",
    "APIError",
    "DispatchTarget",
    "RequestHeaders",
    "SignedRequest",
    "build_request",
    "encode_query",
    "filter_data",
    "parse_location",
    "canonical_string",
    "content_sha256",
    "sign",
    "DEFAULT_BASE_URL",
    "DEFAULT_CONFIG",
    "EMPTY_CONTENT_SHA256"
]
