import json

import httpx
import pytest

from portal.client.api import ApiClient, ApiError
from portal.client.models import User
from portal.client.session import AuthService, AuthSession
from portal.client.storage import JsonFileStorage, MemoryStorage


def test_bearer_token_is_attached(fake_server, session, api_for):
    fake_server.on("GET", "/users/collections", {"collections": []})

    api_for(session).get("/users/collections")

    assert fake_server.requests[0].headers["Authorization"] == "Bearer token-reader"


def test_anonymous_requests_carry_no_token(fake_server, anonymous, api_for):
    fake_server.on("GET", "/posts", [])

    assert api_for(anonymous).get("/posts", params={"search": "asyncio", "category": None}) == []
    request = fake_server.requests[0]
    assert "Authorization" not in request.headers
    assert dict(request.url.params) == {"search": "asyncio"}


def test_error_status_and_server_message(fake_server, session, api_for):
    fake_server.on("PUT", "/posts/p1/like", {"message": "Post not found"}, status=404)

    with pytest.raises(ApiError) as raised:
        api_for(session).put("/posts/p1/like")

    assert raised.value.status == 404
    assert raised.value.message == "Post not found"


def test_transport_failure_has_no_status():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = ApiClient("http://portal.test/api", transport=httpx.MockTransport(refuse))

    with pytest.raises(ApiError) as raised:
        api.get("/posts")

    assert raised.value.status is None
    assert raised.value.message == "Network error"


def test_empty_body_reads_as_none(fake_server, session, api_for):
    fake_server.on("DELETE", "/posts/p1", handler=lambda request: httpx.Response(204))

    assert api_for(session).delete("/posts/p1") is None


def test_session_survives_restart(tmp_path):
    path = str(tmp_path / "storage.json")
    first = AuthSession(JsonFileStorage(path))
    first.login("tok", User.model_validate({"_id": "u1", "name": "Ada", "email": "ada@example.com"}))

    restored = AuthSession(JsonFileStorage(path))

    assert restored.is_authenticated
    assert restored.token == "tok"
    assert restored.user.name == "Ada"

    restored.logout()
    assert json.loads((tmp_path / "storage.json").read_text()) == {}
    assert not AuthSession(JsonFileStorage(path)).is_authenticated


def test_corrupt_stored_user_is_discarded():
    storage = MemoryStorage()
    storage.set_item("token", "tok")
    storage.set_item("user", "{not json")

    session = AuthSession(storage)

    assert not session.is_authenticated
    assert session.user is None


def test_auth_service_stores_token(fake_server, api_for):
    session = AuthSession(MemoryStorage())
    fake_server.on("POST", "/auth/login", {"_id": "u1", "name": "Ada", "email": "ada@example.com", "role": "user", "token": "jwt"})
    service = AuthService(api_for(session), session)

    user = service.login("ada@example.com", "pw")

    assert user.id == "u1"
    assert session.get_token() == "jwt"
    assert json.loads(fake_server.requests[0].content) == {"email": "ada@example.com", "password": "pw"}

    service.logout()
    assert session.user_id is None


def test_auth_service_surfaces_login_errors(fake_server, api_for):
    session = AuthSession(MemoryStorage())
    fake_server.on("POST", "/auth/login", {"message": "Invalid email or password"}, status=401)

    with pytest.raises(ApiError, match="Invalid email or password"):
        AuthService(api_for(session), session).login("ada@example.com", "wrong")

    assert not session.is_authenticated
