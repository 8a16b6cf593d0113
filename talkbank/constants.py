"""
Constants for the TalkBank client library.
"""

# HTTP headers covered by the request signature
HEADER_DATE = "date"
HEADER_CONTENT_SHA256 = "tb-content-sha256"
HEADER_AUTHORIZATION = "Authorization"
HEADER_HOST = "host"
HEADER_CONTENT_TYPE = "Content-Type"

CONTENT_TYPE_JSON = "application/json"

# Signing
AUTH_SCHEME = "TB1-HMAC-SHA256"
API_PREFIX = "/api/v1"
EMPTY_CONTENT_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

# Methods that may carry a JSON body
BODY_METHODS = ("POST", "PUT")

DEFAULT_BASE_URL = "https://baas_test.talkbank.io/api/v1"

# Default configuration values
DEFAULT_CONFIG = {
    'timeout': 30,              # HTTP timeout in seconds
}
