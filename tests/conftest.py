import os
import tempfile

# settings are read at import time, so the environment is prepared first
_TMP_DIR = tempfile.mkdtemp(prefix="portal-tests-")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DB_DRIVER_NAME"] = "sqlite"
os.environ["DB_DATABASE_NAME"] = os.path.join(_TMP_DIR, "portal.db")
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["API_KEY"] = ""
os.environ["SENDER_EMAIL"] = ""
os.environ["CONTENT_FILTER_WORDS"] = "forbiddenword"

import httpx
import pytest
from fastapi.testclient import TestClient

from portal.client.api import ApiClient
from portal.client.interface import UserInterface
from portal.client.models import User
from portal.client.session import AuthSession
from portal.client.storage import MemoryStorage
from portal.database.config.connection_engine import create_tables, drop_tables
from portal.database.entities.user import User as UserRecord
from portal.database.helpers.transactionManagement import SessionFactory
from portal.main import app as portal_app


@pytest.fixture
def app():
    drop_tables()
    create_tables()
    yield portal_app
    portal_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register an account and return its auth payload plus ready-made headers."""
    counter = {"n": 0}

    def _register(name: str = "Alice", email: str | None = None, password: str = "secret123") -> dict:
        counter["n"] += 1
        email = email or f"{name.lower()}{counter['n']}@example.com"
        response = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        payload = response.json()
        payload["headers"] = {"Authorization": f"Bearer {payload['token']}"}
        return payload

    return _register


@pytest.fixture
def promote(app):
    """Give a registered account a different role straight in the database."""
    def _promote(account: dict, role: str = "moderator") -> None:
        with SessionFactory() as db:
            db.get(UserRecord, account["_id"]).role = role
            db.commit()

    return _promote


@pytest.fixture
def make_post(client):
    def _make_post(headers: dict, **fields) -> dict:
        body = {"title": "Using SQLAlchemy sessions", "content": "Sessions track objects.", "category": "Python"}
        body.update(fields)
        response = client.post("/api/posts", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_post


class FakeServer:
    """
    Canned portal API for client tests, used as an `httpx.MockTransport` handler.

    Routes are keyed by `(method, path)` with the `/api` prefix removed; every
    request is recorded in `requests`. Unrouted requests answer 404.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method: str, path: str, body=None, status: int = 200, handler=None) -> None:
        self.routes[(method, path)] = handler or (lambda request: httpx.Response(status, json=body))

    def calls(self, method: str | None = None, path: str | None = None) -> list:
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (path is None or _path(r) == path)
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, _path(request)))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        return route(request)


def _path(request: httpx.Request) -> str:
    return request.url.path.removeprefix("/api")


def _post_payload(**fields) -> dict:
    """A post detail payload as served by `GET /posts/:id`."""
    body = {
        "_id": "p1",
        "title": "Async IO in practice",
        "content": "## Intro\nEvent loops run coroutines.",
        "author": {"_id": "author", "name": "Ada"},
        "type": "article",
        "category": "Python",
        "tags": ["asyncio"],
        "views": 10,
        "likes": [],
        "bookmarks": [],
        "answers": [],
        "comments": [],
        "editHistory": [],
        "summary": {"status": "idle"},
        "createdAt": "2024-05-01T10:00:00Z",
        "updatedAt": "2024-05-01T10:00:00Z",
    }
    body.update(fields)
    return body


def _session_for(user_id: str | None) -> AuthSession:
    session = AuthSession(MemoryStorage())
    if user_id:
        session.login(f"token-{user_id}", User.model_validate({"_id": user_id, "name": user_id.title()}))
    return session


@pytest.fixture
def fake_server():
    return FakeServer()


@pytest.fixture
def session():
    """Signed in as `reader`."""
    return _session_for("reader")


@pytest.fixture
def author_session():
    return _session_for("author")


@pytest.fixture
def anonymous():
    return _session_for(None)


@pytest.fixture
def ui():
    return UserInterface(location="/posts/p1")


@pytest.fixture
def api_for(fake_server):
    """Build an `ApiClient` talking to `fake_server` with the given session's token."""
    def _api_for(session: AuthSession) -> ApiClient:
        return ApiClient("http://portal.test/api", token_provider=session.get_token, transport=httpx.MockTransport(fake_server))

    return _api_for


@pytest.fixture
def post_payload():
    return _post_payload
