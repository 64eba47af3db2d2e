"""
Shared fixtures: a stub HTTP session and an in-memory cache.
"""
import json

import pytest
import requests

from coffee_api import CoffeeApi
from coffee_store import CoffeeStore

BASE = "https://coffee.test/_ajax"

SHOP_LIST = {
    "data": [
        {"id": "1", "name": "Costa", "latitude": "53.4", "longitude": "-2.9"},
        {"id": "2", "name": "Starbucks Library", "latitude": "53.405", "longitude": "-2.965"},
    ],
    "code": 200,
}

SHOP_DETAIL = {
    "data": {
        "url": "https://costa.example/",
        "photo_url": "https://costa.example/shop.jpg",
        "phone_number": "0151 000 0000",
        "opening_hours": {
            "monday": "8:00 - 17:00",
            "tuesday": "8:00 - 17:00",
            "wednesday": None,
            "thursday": "8:00 - 17:00",
            "friday": "8:00 - 15:00",
        },
    },
    "code": 200,
}


class FakeResponse:
    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        if isinstance(self.body, (bytes, str)):
            return json.loads(self.body)
        return self.body


class FakeSession:
    """Answers GETs from a path -> response map; missing paths raise ConnectionError."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        path = url[len(BASE):]
        answer = self.routes.get(path)
        if answer is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def store():
    s = CoffeeStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def make_api():
    def _make(routes=None):
        return CoffeeApi(BASE, session=FakeSession(routes))
    return _make


@pytest.fixture
def shop_list():
    return json.loads(json.dumps(SHOP_LIST))


@pytest.fixture
def shop_detail():
    return json.loads(json.dumps(SHOP_DETAIL))


@pytest.fixture
def response():
    return FakeResponse
