"""
Pytest fixtures for the wizard app, the mock backend, and the wiring between
them.

The wizard's BackendClient talks HTTP through ``requests.request``; tests
swap that call for a dispatcher that replays it against the mock backend's
Flask test client, so the whole stack runs in-process on an in-memory store.
"""

from datetime import date, timedelta
from urllib.parse import urlsplit

import pytest
import requests

from busline import create_app
from mock_server import create_app as create_backend_app
from mock_server.seed import bus_seat_positions, is_taken

BACKEND_URL = "http://backend.test/api"


@pytest.fixture
def backend_app():
    return create_backend_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "SALE_DELAY_SECONDS": 0,
            "SEED_DAYS": 7,
        }
    )


@pytest.fixture
def backend(backend_app):
    return backend_app.test_client()


@pytest.fixture
def backend_calls(backend, monkeypatch):
    """Route every outgoing ``requests.request`` to the mock backend; records (method, path)."""
    calls = []

    def dispatch(method, url, params=None, json=None, timeout=None, **kwargs):
        path = urlsplit(url).path
        calls.append((method, path))
        served = backend.open(path, method=method, query_string=params, json=json)

        resp = requests.Response()
        resp.status_code = served.status_code
        resp._content = served.get_data()
        resp.headers["Content-Type"] = served.content_type
        resp.encoding = "utf-8"
        resp.url = url
        return resp

    monkeypatch.setattr(requests, "request", dispatch)
    return calls


@pytest.fixture
def app(backend_calls):
    return create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "BACKEND_BASE_URL": BACKEND_URL,
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def travel_day():
    return date.today() + timedelta(days=1)


@pytest.fixture
def trip_id(travel_day):
    return f"TRIP-{travel_day.strftime('%Y%m%d')}-1"


@pytest.fixture
def free_seats(trip_id):
    count = len(bus_seat_positions())
    return [no for no in range(1, count + 1) if not is_taken(trip_id, no)]


@pytest.fixture
def taken_seat(trip_id):
    count = len(bus_seat_positions())
    return next(no for no in range(1, count + 1) if is_taken(trip_id, no))
