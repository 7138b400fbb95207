"""Exceptions raised by the Strava client.

Every failure in the token lifecycle or the activity fetch surfaces as a
subclass of :class:`StravaError` so ``main.py`` can treat them uniformly as
fatal.
"""
from __future__ import annotations


class StravaError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(StravaError):
    """Missing or invalid configuration (credentials, redirect URI, settings)."""


class TransportError(StravaError):
    """The provider could not be reached."""


class ApiError(StravaError):
    """The provider answered with a non-200 status."""

    def __init__(self, action: str, status_code: int, body: str) -> None:
        super().__init__(f"{action} failed (HTTP {status_code}): {body}")
        self.action = action
        self.status_code = status_code
        self.body = body


class DecodeError(StravaError):
    """A response or the token file did not contain the expected JSON."""


class TokenStoreError(StravaError):
    """The persisted token could not be read or written."""


class AuthorizationError(StravaError):
    """The browser authorization step did not produce a token."""


class NoTokenError(StravaError):
    """An API call was attempted before a token was obtained."""

    def __init__(self, message: str = "no valid token") -> None:
        super().__init__(message)
