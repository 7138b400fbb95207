"""Utility helpers for the Strava client.

Logging configuration used by ``main.py`` and the JSON response check shared
by the token and activity calls.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import requests

from .errors import ApiError, DecodeError


def configure_logging(log_file: str | Path = "strava_recent.log", level: int = logging.INFO, truncate: bool = True,
                      console_level: int = logging.WARNING) -> None:
    """Send records to ``log_file`` at ``level`` and to stderr at ``console_level``.

    With ``truncate`` the log starts empty on every run. Handlers installed by
    an earlier call are closed and replaced.
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    handlers = [
        (logging.FileHandler(log_path, mode="w" if truncate else "a", encoding="utf-8"), level),
        # stderr stays quiet so it doesn't interleave with the activity list
        (logging.StreamHandler(), console_level),
    ]
    for handler, handler_level in handlers:
        handler.setFormatter(fmt)
        handler.setLevel(handler_level)
        root.addHandler(handler)


def read_json_response(resp: requests.Response, action: str) -> Any:
    """Return the decoded JSON body of a 200 response.

    Any other status raises :class:`ApiError` carrying the raw body; an
    undecodable body raises :class:`DecodeError`.
    """
    if resp.status_code != 200:
        raise ApiError(action, resp.status_code, resp.text)
    try:
        return resp.json()
    except ValueError as exc:
        raise DecodeError(f"{action}: response is not valid JSON: {exc}") from exc
