"""
Unit tests for signed request construction.
"""

import json

import pytest

from talkbank import (
    DispatchTarget,
    build_request,
    content_sha256,
    encode_query,
    filter_data,
    parse_location,
    sign,
)
from talkbank.constants import EMPTY_CONTENT_SHA256


DATE = "Mon, 01 Jan 2024 00:00:00 GMT"


@pytest.fixture
def location():
    return parse_location("https://baas.example.com:8443/api/v1")


def build(location, path, method='GET', body=None, query=None,
          target=DispatchTarget.STANDARD):
    return build_request(location, "P1", "secret", path, method=method, body=body,
                         query=query, target=target, date=DATE)


class TestParseLocation:
    """Test base URL parsing."""

    def test_parts(self, location):
        assert location.href == "https://baas.example.com:8443/api/v1"
        assert location.scheme == "https"
        assert location.host == "baas.example.com:8443"
        assert location.hostname == "baas.example.com"
        assert location.port == 8443
        assert location.path == "/api/v1"

    def test_trailing_slash_stripped(self):
        loc = parse_location("https://baas.example.com/api/v1/")
        assert loc.href == "https://baas.example.com/api/v1"
        assert loc.port is None

    @pytest.mark.parametrize("href", [
        "",
        "baas.example.com/api/v1",
        "ftp://baas.example.com/api/v1",
        "https:///api/v1",
        "https://baas.example.com:port/api/v1",
        "https://baas.example.com/api/v1?env=test",
        "https://baas.example.com/api/v1#section",
    ])
    def test_malformed(self, href):
        assert parse_location(href) is None


class TestFilterData:
    """Test None stripping."""

    def test_drops_none_only(self):
        data = {'a': None, 'b': 0, 'c': False, 'd': "", 'e': 'x'}
        assert filter_data(data) == {'b': 0, 'c': False, 'd': "", 'e': 'x'}

    def test_idempotent(self):
        data = {'a': None, 'b': 0, 'c': [1, None]}
        once = filter_data(data)
        assert filter_data(once) == once

    def test_does_not_mutate_input(self):
        data = {'a': None}
        filter_data(data)
        assert data == {'a': None}

    def test_empty(self):
        assert filter_data(None) == {}
        assert filter_data({}) == {}


class TestEncodeQuery:
    """Test query string encoding."""

    def test_stable_order(self):
        assert encode_query({'skip': 500, 'limit': 50}) == "limit=50&skip=500"
        assert encode_query({'limit': 50, 'skip': 500}) == "limit=50&skip=500"

    def test_drops_none_keeps_empty_string(self):
        assert encode_query({'a': None, 'alpha': '', 'b': 1}) == "alpha=&b=1"

    def test_lists_repeat_key(self):
        assert encode_query({'events': ['a', 'b']}) == "events=a&events=b"

    def test_booleans(self):
        assert encode_query({'x': True, 'y': False}) == "x=true&y=false"

    def test_strict_encoding(self):
        assert encode_query({'q': "a b/c+d"}) == "q=a%20b%2Fc%2Bd"

    def test_empty(self):
        assert encode_query(None) == ""
        assert encode_query({'a': None}) == ""


class TestBuildRequest:
    """Test full request assembly."""

    def test_get_request(self, location):
        request = build(location, '/balance')

        assert request.method == 'GET'
        assert request.url == "https://baas.example.com:8443/api/v1/balance"
        assert request.body is None
        assert request.headers.date == DATE
        assert request.headers.content_sha256 == EMPTY_CONTENT_SHA256
        assert request.headers.host == "baas.example.com:8443"
        assert request.headers.content_type == "application/json"
        assert request.headers.authorization == sign(
            "secret", "P1", "GET", "/balance", "", DATE, EMPTY_CONTENT_SHA256)

    def test_header_names(self, location):
        headers = build(location, '/balance').headers.as_dict()

        assert set(headers) == {'Authorization', 'date', 'host', 'Content-Type', 'tb-content-sha256'}

    def test_query_in_url_and_signature(self, location):
        """Test the same encoded query is dispatched and signed."""
        request = build(location, '/transactions', query={'skip': 500, 'limit': 50})

        assert request.query == "limit=50&skip=500"
        assert request.url.endswith("/transactions?limit=50&skip=500")
        assert request.headers.authorization == sign(
            "secret", "P1", "GET", "/transactions", "limit=50&skip=500", DATE, EMPTY_CONTENT_SHA256)

    def test_empty_query_not_appended(self, location):
        request = build(location, '/balance', query={'page': None})
        assert '?' not in request.url

    def test_post_body(self, location):
        """Test the serialized body is what gets hashed and signed."""
        body = {'amount': 100, 'order_slug': 'o-1'}
        request = build(location, '/hold', 'POST', body)

        assert request.body == '{"amount":100,"order_slug":"o-1"}'
        assert json.loads(request.body) == body
        assert request.headers.content_sha256 == content_sha256(request.body)
        assert request.headers.authorization == sign(
            "secret", "P1", "POST", "/hold", "", DATE, content_sha256(request.body))

    def test_non_ascii_body_not_escaped(self, location):
        request = build(location, '/clients', 'PUT', {'name': 'Иван'})
        assert request.body == '{"name":"Иван"}'

    @pytest.mark.parametrize("method, body", [
        ('GET', {'amount': 1}),
        ('DELETE', {'amount': 1}),
        ('POST', {}),
        ('POST', None),
        ('PUT', {}),
    ])
    def test_empty_body_rule(self, location, method, body):
        """Test requests without a body hash the empty string."""
        request = build(location, '/x', method, body)

        assert request.body is None
        assert request.headers.content_sha256 == EMPTY_CONTENT_SHA256

    def test_method_uppercased(self, location):
        request = build(location, '/hold', 'post', {'amount': 1})
        assert request.method == 'POST'
        assert request.body is not None

    def test_rewritten_target(self, location):
        """Test host rewrite changes the URL but not the signature."""
        body = {'token': 't', 'amount': 1}
        standard = build(location, '/client/v1/charge', 'POST', body)
        rewritten = build(location, '/client/v1/charge', 'POST', body,
                          target=DispatchTarget.HOST_REWRITTEN)

        assert standard.url == "https://baas.example.com:8443/api/v1/client/v1/charge"
        assert rewritten.url == "https://baas.example.com:8443/client/v1/charge"
        assert rewritten.headers.authorization == standard.headers.authorization
        assert rewritten.headers.host == standard.headers.host

    def test_default_date_is_http_date(self, location):
        request = build_request(location, "P1", "secret", '/balance')
        assert request.headers.date.endswith(" GMT")
        assert request.headers.date[3:5] == ", "

    def test_request_is_immutable(self, location):
        request = build(location, '/balance')
        with pytest.raises(AttributeError):
            request.url = "https://evil.example.com"
