import json

import httpx
import pytest

from app import create_app
from config import Config


class TestConfig(Config):
    TESTING = True
    BACKEND_URL = 'http://backend.test'
    REVERSE_GEOCODE_URL = 'http://geocoder.test/reverse'
    CLIENT_USER_AGENT = 'find-my-state-tests/1.0'


@pytest.fixture
def app():
    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()


class FakeServices:
    """
    httpx.MockTransport handler standing in for the geocoder and the
    backend. Records every request it sees.
    """

    def __init__(self, geocode=None, geocode_status=200, backend=None, backend_status=200):
        self.geocode = geocode if geocode is not None else {'address': {'state': 'California'}}
        self.geocode_status = geocode_status
        self.backend = backend
        self.backend_status = backend_status
        self.geocode_error = None
        self.backend_error = None
        self.requests = []

    @property
    def submitted(self):
        return [json.loads(r.content) for r in self.requests if r.url.host == 'backend.test']

    def __call__(self, request):
        self.requests.append(request)
        if request.url.host == 'geocoder.test':
            if self.geocode_error:
                raise self.geocode_error
            if isinstance(self.geocode, (bytes, str)):
                return httpx.Response(self.geocode_status, content=self.geocode)
            return httpx.Response(self.geocode_status, json=self.geocode)
        if self.backend_error:
            raise self.backend_error
        if isinstance(self.backend, (bytes, str)):
            return httpx.Response(self.backend_status, content=self.backend)
        body = self.backend if self.backend is not None else {'ok': True, 'received': json.loads(request.content)}
        return httpx.Response(self.backend_status, json=body)

    def transport(self):
        return httpx.MockTransport(self)


@pytest.fixture
def fake_services():
    return FakeServices()
