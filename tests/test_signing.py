"""
Unit tests for request signing.
"""

import hashlib
import hmac

import pytest

from talkbank import canonical_string, content_sha256, sign
from talkbank.constants import EMPTY_CONTENT_SHA256


DATE = "Mon, 01 Jan 2024 00:00:00 GMT"


class TestContentSha256:
    """Test body hashing."""

    def test_empty_body(self):
        """Test that a missing body hashes as the empty string."""
        assert content_sha256(None) == EMPTY_CONTENT_SHA256
        assert content_sha256("") == EMPTY_CONTENT_SHA256
        assert EMPTY_CONTENT_SHA256 == hashlib.sha256(b"").hexdigest()

    def test_body(self):
        """Test hashing a serialized body."""
        body = '{"amount":100}'
        assert content_sha256(body) == hashlib.sha256(body.encode('utf-8')).hexdigest()

    def test_non_ascii_body_hashed_as_utf8(self):
        body = '{"name":"Иван"}'
        assert content_sha256(body) == hashlib.sha256(body.encode('utf-8')).hexdigest()


class TestCanonicalString:
    """Test canonical string layout."""

    def test_layout(self):
        """Test line order and the trailing content hash."""
        result = canonical_string("get", "/balance", "limit=50", DATE, "abc")

        assert result == (
            "GET\n"
            "/api/v1/balance\n"
            "limit=50\n"
            "date:Mon, 01 Jan 2024 00:00:00 GMT\n"
            "tb-content-sha256:abc\n"
            "abc"
        )

    def test_empty_query_keeps_blank_line(self):
        result = canonical_string("GET", "/balance", "", DATE, "abc")
        assert result.split("\n")[2] == ""
        assert len(result.split("\n")) == 6

    def test_values_are_trimmed(self):
        """Test surrounding whitespace is stripped."""
        result = canonical_string("POST", " /hold ", " a=1 ", f" {DATE} ", " abc ")

        assert result == (
            "POST\n/api/v1/hold\na=1\n"
            f"date:{DATE}\ntb-content-sha256:abc\nabc"
        )


class TestSign:
    """Test Authorization header computation."""

    def test_reference_vector(self):
        """Test the documented GET /balance example."""
        authorization = sign("secret", "P1", "GET", "/balance", "", DATE, EMPTY_CONTENT_SHA256)

        message = (
            "GET\n/api/v1/balance\n\n"
            "date:Mon, 01 Jan 2024 00:00:00 GMT\n"
            "tb-content-sha256:e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855\n"
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )
        expected = hmac.new(b"secret", message.encode('utf-8'), hashlib.sha256).hexdigest()
        assert authorization == f"TB1-HMAC-SHA256 P1:{expected}"

    def test_deterministic(self):
        """Test identical inputs give identical signatures."""
        args = ("secret", "P1", "POST", "/hold", "a=1", DATE, content_sha256('{"amount":1}'))
        assert sign(*args) == sign(*args)

    def test_signature_format(self):
        authorization = sign("secret", "P1", "GET", "/balance", "", DATE, EMPTY_CONTENT_SHA256)
        scheme, _, credential = authorization.partition(" ")
        partner_id, _, signature = credential.partition(":")

        assert scheme == "TB1-HMAC-SHA256"
        assert partner_id == "P1"
        assert len(signature) == 64
        int(signature, 16)

    @pytest.mark.parametrize("field, value", [
        ("secret_key", "other"),
        ("method", "POST"),
        ("path", "/transactions"),
        ("query", "limit=1"),
        ("date", "Tue, 02 Jan 2024 00:00:00 GMT"),
        ("content_hash", content_sha256("{}")),
    ])
    def test_every_input_affects_signature(self, field, value):
        """Test that changing any signed fact changes the signature."""
        base = dict(secret_key="secret", partner_id="P1", method="GET", path="/balance",
                    query="", date=DATE, content_hash=EMPTY_CONTENT_SHA256)
        changed = {**base, field: value}

        assert sign(**base) != sign(**changed)
