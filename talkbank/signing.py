"""
HMAC-SHA256 request signing for the TalkBank API.

The server rebuilds the canonical string from the received request and
compares signatures, so every byte here matters:

    METHOD
    /api/v1{path}
    {query}
    date:{date}
    tb-content-sha256:{hash}
    {hash}
"""

import hashlib
import hmac
from typing import Optional

from .constants import (
    API_PREFIX,
    AUTH_SCHEME,
    HEADER_CONTENT_SHA256,
    HEADER_DATE,
)


def content_sha256(body: Optional[str] = None) -> str:
    """
    Hash a serialized request body.

    Args:
        body: Serialized JSON body, or None when nothing is sent

    Returns:
        Lowercase hex SHA-256 of the UTF-8 body (of "" when empty)
    """
    return hashlib.sha256((body or "").encode('utf-8')).hexdigest()


def canonical_string(method: str, path: str, query: str, date: str, content_hash: str) -> str:
    """Build the exact string the server signs for a request."""
    headers = "\n".join([
        f"{HEADER_DATE}:{date.strip()}",
        f"{HEADER_CONTENT_SHA256}:{content_hash.strip()}",
    ])
    return (
        f"{method.upper()}\n"
        f"{API_PREFIX}{path.strip()}\n"
        f"{query.strip()}\n"
        f"{headers}\n"
        f"{content_hash.strip()}"
    )


def sign(secret_key: str, partner_id: str, method: str, path: str,
         query: str, date: str, content_hash: str) -> str:
    """
    Compute the Authorization header value for a request.

    The path is the logical API path without the /api/v1 prefix, even for
    requests dispatched to a rewritten host path.

    Args:
        secret_key: Partner signing key (never transmitted)
        partner_id: Public partner identifier
        method: HTTP method
        path: Logical request path, e.g. "/balance"
        query: Encoded query string, "" when there is none
        date: HTTP-date sent in the date header
        content_hash: Value sent in the tb-content-sha256 header

    Returns:
        "TB1-HMAC-SHA256 {partner_id}:{hex signature}"
    """
    message = canonical_string(method, path, query, date, content_hash)
    mac = hmac.new(
        secret_key.encode('utf-8'),
        message.encode('utf-8'),
        hashlib.sha256
    )
    return f"{AUTH_SCHEME} {partner_id}:{mac.hexdigest()}"
