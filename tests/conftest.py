import json
from unittest.mock import MagicMock

import pytest
import requests

from resilient_notifier import NotifierConfig, RetryPolicy

VALID_TOKEN = "123456789:ABC-DEF1234ghIkl-zyx57W2v1u123ew11Xy"
VALID_CHAT_ID = "-100123456789"


def make_response(status_code, payload=None, text=None, headers=None):
    """Build a real requests.Response without touching the network."""
    resp = requests.Response()
    resp.status_code = status_code
    if payload is not None:
        resp._content = json.dumps(payload).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = (text or "").encode("utf-8")
    resp.encoding = "utf-8"
    for key, value in (headers or {}).items():
        resp.headers[key] = value
    return resp


def ok_response(message_id=1):
    return make_response(200, {"ok": True, "result": {"message_id": message_id}})


class FakeClock:
    """Monotonic clock whose sleep() just moves time forward."""

    def __init__(self, start=1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def config():
    return NotifierConfig.create(VALID_TOKEN, VALID_CHAT_ID)


@pytest.fixture
def no_delay_policy():
    return RetryPolicy(max_attempts=3, initial_delay=0.0, max_delay=0.0)


@pytest.fixture
def session():
    mock_session = MagicMock(spec=requests.Session)
    mock_session.headers = {}
    return mock_session


@pytest.fixture
def fake_clock():
    return FakeClock()
