"""Tests for fetching recent activities."""

import pytest
import requests

from conftest import DummyResp
from strava_recent.auth import StravaAuth
from strava_recent.client import StravaClient
from strava_recent.errors import ApiError, DecodeError, NoTokenError, TransportError
from strava_recent.token_store import InMemoryTokenStore


class RecordingGet:
    def __init__(self, resp):
        self.resp = resp
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if isinstance(self.resp, Exception):
            raise self.resp
        return self.resp


@pytest.fixture
def authorized(config, valid_token):
    auth = StravaAuth(config, token_store=InMemoryTokenStore(valid_token))
    auth.initialize()
    return auth


def test_no_token_fails_without_request(config, monkeypatch):
    get = RecordingGet(DummyResp(200, []))
    monkeypatch.setattr("strava_recent.client.requests.get", get)

    with pytest.raises(NoTokenError, match="no valid token"):
        StravaClient(StravaAuth(config)).get_activities(10)

    assert get.calls == []


def test_fetch_sends_bearer_and_per_page(authorized, valid_token, monkeypatch):
    activities = [{"name": "Morning Run", "distance": 5000.0}, {"id": 2}]
    get = RecordingGet(DummyResp(200, activities))
    monkeypatch.setattr("strava_recent.client.requests.get", get)

    result = StravaClient(authorized).get_activities(5)

    assert result == activities
    call = get.calls[0]
    assert call["url"] == "https://www.strava.com/api/v3/athlete/activities"
    assert call["params"] == {"per_page": 5}
    assert call["headers"] == {"Authorization": f"Bearer {valid_token.access_token}"}


def test_unauthorized_is_a_plain_failure(authorized, monkeypatch):
    body = '{"message":"Authorization Error","errors":[{"resource":"Athlete","code":"invalid"}]}'
    get = RecordingGet(DummyResp(401, text=body))
    post_calls = []
    monkeypatch.setattr("strava_recent.client.requests.get", get)
    monkeypatch.setattr("strava_recent.auth.requests.post", lambda *a, **k: post_calls.append(a))

    with pytest.raises(ApiError) as excinfo:
        StravaClient(authorized).get_activities(10)

    assert excinfo.value.status_code == 401
    assert excinfo.value.body == body
    assert len(get.calls) == 1
    assert post_calls == []


def test_non_array_body_is_a_decode_error(authorized, monkeypatch):
    monkeypatch.setattr("strava_recent.client.requests.get", RecordingGet(DummyResp(200, {"message": "odd"})))

    with pytest.raises(DecodeError):
        StravaClient(authorized).get_activities(10)


def test_invalid_json_is_a_decode_error(authorized, monkeypatch):
    monkeypatch.setattr("strava_recent.client.requests.get", RecordingGet(DummyResp(200, text="not json")))

    with pytest.raises(DecodeError):
        StravaClient(authorized).get_activities(10)


def test_network_failure_is_wrapped(authorized, monkeypatch):
    monkeypatch.setattr("strava_recent.client.requests.get", RecordingGet(requests.Timeout("read timed out")))

    with pytest.raises(TransportError, match="timed out"):
        StravaClient(authorized).get_activities(10)


@pytest.mark.parametrize("body", [[{"name": "Ride"}, "not a record"], [None], [[1, 2]]])
def test_non_object_records_are_a_decode_error(authorized, monkeypatch, body):
    monkeypatch.setattr("strava_recent.client.requests.get", RecordingGet(DummyResp(200, body)))

    with pytest.raises(DecodeError, match="activity objects"):
        StravaClient(authorized).get_activities(10)
