"""Errors raised by the LG webOS TV connection manager."""

from __future__ import annotations


class LgWebOsError(Exception):
    """Base error for the LG webOS TV integration."""


class TransientNetworkError(LgWebOsError):
    """The TV could not be reached; retried by the connection loop."""


class ConnectionClosedError(TransientNetworkError):
    """The control session is down or dropped before a reply arrived."""


class RequestTimeoutError(TransientNetworkError):
    """No reply to a request within the request timeout."""


class ProtocolError(LgWebOsError):
    """The TV answered with an error code or a malformed payload."""

    def __init__(self, message: str, uri: str | None = None) -> None:
        super().__init__(message)
        self.uri = uri


class PairingRequiredError(LgWebOsError):
    """The TV is waiting for the pairing prompt to be confirmed on screen."""


class PersistenceError(LgWebOsError):
    """Reading or writing durable storage failed."""


class PointerUnavailableError(LgWebOsError):
    """The pointer/button channel is not available on this connection."""
