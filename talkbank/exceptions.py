"""
Custom exceptions for the TalkBank client library.
"""


class TalkBankError(Exception):
    """Base exception for TalkBank client errors."""
    pass


class ConfigurationError(TalkBankError):
    """Raised when client configuration is invalid."""
    pass


class HTTPError(TalkBankError):
    """Raised when the HTTP transport fails."""
    pass


class APIError(TalkBankError):
    """Raised when the API answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str, response=None):
        super().__init__(f"API request failed with status {status_code}: {body}")
        self.status_code = status_code
        self.body = body
        self.response = response
