"""Pytest fixtures for strava_recent tests."""

import json
import socket
import time

import pytest
import requests

from strava_recent.config import AppConfig
from strava_recent.token_store import TokenInfo


class DummyResp:
    """Stand-in for requests.Response with just what the client reads."""

    def __init__(self, status, json_data=None, text=None):
        self.status_code = status
        self._json = json_data
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ""
        self.text = text

    def json(self):
        if self._json is None:
            return json.loads(self.text)
        return self._json


class RecordingPost:
    """Replacement for requests.post that records calls and replays responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, url, data=None, timeout=None, **kwargs):
        self.calls.append({"url": url, "data": dict(data or {}), "timeout": timeout, **kwargs})
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def token_payload(**overrides):
    payload = {
        "access_token": "test_access_token_12345",
        "refresh_token": "test_refresh_token_67890",
        "expires_at": int(time.time()) + 6 * 3600,
        "expires_in": 21600,
        "token_type": "Bearer",
        "athlete": {"id": 12345678, "firstname": "Test", "lastname": "User"},
    }
    payload.update(overrides)
    return payload


def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def local_get(url):
    """GET against the local callback listener, ignoring any proxy settings."""
    session = requests.Session()
    session.trust_env = False
    try:
        return session.get(url, timeout=10)
    finally:
        session.close()


@pytest.fixture
def config(tmp_path):
    return AppConfig(
        client_id="12345",
        client_secret="test_client_secret",
        redirect_uri=f"http://127.0.0.1:{free_port()}/callback",
        token_file=tmp_path / "strava_token.json",
        open_browser=False,
    )


@pytest.fixture
def valid_token():
    return TokenInfo.from_dict(token_payload())


@pytest.fixture
def expired_token():
    return TokenInfo.from_dict(token_payload(
        access_token="expired_access_token",
        expires_at=int(time.time()) - 3600,
    ))
