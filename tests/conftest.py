"""Shared test fixtures."""
import json
from unittest.mock import Mock

import pytest

from medibook.http_client import ApiClient
from medibook.models import Doctor
from medibook.session import SessionStore
from medibook.storage import LocalStorage


def make_response(status_code: int = 200, body=None):
    """Build a requests.Response stand-in."""
    response = Mock()
    response.status_code = status_code
    if body is None:
        response.content = b""
        response.json.side_effect = ValueError("No JSON")
    else:
        response.content = json.dumps(body).encode()
        response.json.return_value = body
    return response


@pytest.fixture
def storage() -> LocalStorage:
    """LocalStorage on an in-memory database."""
    return LocalStorage(database_url="sqlite:///:memory:")


@pytest.fixture
def session(storage) -> SessionStore:
    return SessionStore(storage)


@pytest.fixture
def patient_session(session) -> SessionStore:
    session.set_credentials({"id": "p1", "name": "Pat Doe", "role": "patient"}, "patient-token")
    return session


@pytest.fixture
def doctor_session(session) -> SessionStore:
    session.set_credentials({"id": "d1", "name": "Dr. Who", "role": "doctor"}, "doctor-token")
    return session


@pytest.fixture
def http():
    """requests.Session stand-in; set http.request.return_value per test."""
    return Mock()


@pytest.fixture
def api_client(http, session) -> ApiClient:
    return ApiClient(base_url="http://api.test/api/v1", session=session, http=http)


@pytest.fixture
def api():
    """Fully mocked ApiClient for page tests."""
    return Mock(spec=ApiClient)


@pytest.fixture
def doctors():
    return [
        Doctor(id="doc-1", name="Alice", specialization="Cardiology"),
        Doctor(id="doc-2", name="Bob", specialization="Neurology"),
    ]
