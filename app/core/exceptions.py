"""
Error taxonomy shared by the sync endpoint and the identity client.

ApiError subclasses are raised on the server and carry the HTTP status they
are rendered with by the handlers registered in app.main. ProviderAuthError
and SyncNetworkError only occur in the identity client.
"""

from typing import Optional


class EmpleoError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiError(EmpleoError):
    status_code: int = 500


class ValidationError(ApiError):
    """A required field is missing or malformed."""
    status_code = 400


class ConflictError(ApiError):
    """The provider identity matches a local record only partially."""
    status_code = 409


class PersistenceError(ApiError):
    """The users table could not be read or written."""
    status_code = 500


class ProviderAuthError(EmpleoError):
    """The identity provider rejected the request."""


class SyncNetworkError(EmpleoError):
    """The sync endpoint could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        # Set only when the endpoint answered
        self.response_status = status_code
