"""
Construction of signed TalkBank requests.

A SignedRequest is built fresh for every call and never mutated, so the
body, date and content hash that are signed are exactly the ones sent.
"""

import enum
import json
from dataclasses import dataclass
from email.utils import formatdate
from typing import Any, Dict, Mapping, NamedTuple, Optional
from urllib.parse import quote, urlencode, urlsplit

from .constants import (
    BODY_METHODS,
    CONTENT_TYPE_JSON,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_SHA256,
    HEADER_CONTENT_TYPE,
    HEADER_DATE,
    HEADER_HOST,
)
from .signing import content_sha256, sign


class DispatchTarget(enum.Enum):
    """Where a request is sent; the signature is the same for both."""

    STANDARD = "standard"               # base URL + path
    HOST_REWRITTEN = "host_rewritten"   # scheme://host + path, no API prefix


class BaseLocation(NamedTuple):
    href: str
    scheme: str
    host: str
    hostname: str
    port: Optional[int]
    path: str


@dataclass(frozen=True)
class RequestHeaders:
    """The complete header set of a signed request."""

    date: str
    content_sha256: str
    authorization: str
    host: str
    content_type: str = CONTENT_TYPE_JSON

    def as_dict(self) -> Dict[str, str]:
        return {
            HEADER_AUTHORIZATION: self.authorization,
            HEADER_DATE: self.date,
            HEADER_HOST: self.host,
            HEADER_CONTENT_TYPE: self.content_type,
            HEADER_CONTENT_SHA256: self.content_sha256,
        }


@dataclass(frozen=True)
class SignedRequest:
    method: str
    url: str
    path: str
    query: str
    body: Optional[str]
    headers: RequestHeaders


def parse_location(href: str) -> Optional[BaseLocation]:
    """
    Split an absolute http(s) URL into the parts the client needs.

    Returns:
        BaseLocation, or None if the URL is not an absolute http(s) URL
        or carries a query string or fragment
    """
    try:
        parts = urlsplit(href)
        port = parts.port
    except ValueError:
        return None

    if parts.scheme not in ('http', 'https') or not parts.hostname:
        return None

    # paths are appended to href, so it cannot end in a query or fragment
    if parts.query or parts.fragment:
        return None

    host = parts.netloc.rpartition('@')[2]
    return BaseLocation(
        href=href.rstrip('/'),
        scheme=parts.scheme,
        host=host,
        hostname=parts.hostname,
        port=port,
        path=parts.path.rstrip('/'),
    )


def filter_data(data: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop None-valued entries; 0, False and "" are kept."""
    if not data:
        return {}
    return {key: value for key, value in data.items() if value is not None}


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def encode_query(query: Optional[Mapping[str, Any]]) -> str:
    """
    Encode query parameters in a stable order.

    Keys are sorted, None values are dropped, list values repeat the key
    and spaces are encoded as %20. The result is used both in the URL and
    in the signature.
    """
    items = []
    for key in sorted(filter_data(query)):
        value = query[key]
        if isinstance(value, (list, tuple)):
            items.extend((key, _query_value(v)) for v in value if v is not None)
        else:
            items.append((key, _query_value(value)))
    return urlencode(items, quote_via=quote)


def serialize_body(method: str, body: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Serialize the JSON payload, or return None if the request has none."""
    if method.upper() not in BODY_METHODS or not body:
        return None
    return json.dumps(body, separators=(',', ':'), ensure_ascii=False)


def build_request(location: BaseLocation, partner_id: str, signing_key: str,
                  path: str, method: str = 'GET',
                  body: Optional[Mapping[str, Any]] = None,
                  query: Optional[Mapping[str, Any]] = None,
                  target: DispatchTarget = DispatchTarget.STANDARD,
                  date: Optional[str] = None) -> SignedRequest:
    """
    Build a fully signed request.

    Args:
        location: Parsed base URL
        partner_id: Public partner identifier
        signing_key: Partner signing key
        path: Logical API path, path parameters already substituted
        method: HTTP method
        body: JSON payload, only sent for POST/PUT when non-empty
        query: Query parameters
        target: Dispatch target; does not affect the signature
        date: HTTP-date to use instead of the current time

    Returns:
        SignedRequest ready for the transport
    """
    method = method.upper()

    if target is DispatchTarget.HOST_REWRITTEN:
        url = f"{location.scheme}://{location.host}{path}"
    else:
        url = f"{location.href}{path}"

    query_string = encode_query(query)
    if query_string:
        url = f"{url}?{query_string}"

    payload = serialize_body(method, body)
    if date is None:
        date = formatdate(usegmt=True)
    content_hash = content_sha256(payload)
    authorization = sign(signing_key, partner_id, method, path,
                         query_string, date, content_hash)

    return SignedRequest(
        method=method,
        url=url,
        path=path,
        query=query_string,
        body=payload,
        headers=RequestHeaders(
            date=date,
            content_sha256=content_hash,
            authorization=authorization,
            host=location.host,
        ),
    )
