"""
Error taxonomy for the relay.

Startup errors are fatal and abort the process before the listener binds.
Request errors carry the HTTP status the server answers with; the response
body is always empty, details only go to the logs.
"""

from fastapi import status


class RelayError(Exception):
    """Base class for all relay errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR


class ConfigurationError(RelayError):
    """A required setting is missing or malformed."""


class AuthClientError(RelayError):
    """The authenticated BigQuery client could not be constructed."""


class BadRequestError(RelayError):
    """Malformed JSON body, missing field, or missing signature header."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(RelayError):
    """The request signature failed verification."""

    status_code = status.HTTP_401_UNAUTHORIZED


class UpstreamInsertError(RelayError):
    """BigQuery reported a failure for the insert call."""

    status_code = status.HTTP_502_BAD_GATEWAY
