"""Enumerations used by the token lifecycle.

``AuthState`` tracks where :class:`strava_recent.auth.StravaAuth` is in the
authorize / refresh sequence; it is mostly useful for logging and tests.
"""
from enum import Enum, auto


class AuthState(Enum):
    """Token lifecycle states."""
    NO_TOKEN = auto()
    AUTHORIZING = auto()
    REFRESHING = auto()
    AUTHORIZED = auto()
