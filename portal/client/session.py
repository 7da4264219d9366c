"""
Auth session store and the auth round trips that feed it.

`AuthSession` holds the current user and bearer token. Both are persisted
in durable storage under the keys `token` and `user` and restored when the
session is constructed. The only mutators are `login()` and `logout()`; the
session is passed explicitly to every controller and to the `ApiClient`
(as its token provider).
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from portal.client.api import ApiClient
from portal.client.models import User
from portal.client.storage import MemoryStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class AuthSession:
    def __init__(self, storage: MemoryStorage):
        self.storage = storage
        self._token: Optional[str] = None
        self._user: Optional[User] = None
        self._restore()

    def _restore(self) -> None:
        token = self.storage.get_item(TOKEN_KEY)
        raw_user = self.storage.get_item(USER_KEY)
        if not token or not raw_user:
            return
        try:
            self._user = User.model_validate(json.loads(raw_user))
            self._token = token
        except (ValueError, ValidationError) as e:
            logger.warning(f"Discarding stored user record: {e}")

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def token(self) -> Optional[str]:
        return self._token

    def get_token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None and bool(self._token)

    @property
    def user_id(self) -> Optional[str]:
        return self._user.id if self._user else None

    def login(self, token: str, user: User) -> None:
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, user.model_dump_json(by_alias=True))
        self._token = token
        self._user = user

    def logout(self) -> None:
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        self._token = None
        self._user = None


class AuthService:
    """
    Login / register / Google sign-in against `/auth/*`.

    Every successful call stores the returned token and user in the session
    and returns the user. `ApiError` propagates to the caller (the login form
    shows its message).
    """

    def __init__(self, api: ApiClient, session: AuthSession):
        self.api = api
        self.session = session

    def _sign_in(self, payload: dict) -> User:
        token = payload.pop("token")
        user = User.model_validate(payload)
        self.session.login(token, user)
        logger.info(f"Signed in as {user.id}")
        return user

    def login(self, email: str, password: str) -> User:
        return self._sign_in(self.api.post("/auth/login", json={"email": email, "password": password}))

    def register(self, name: str, email: str, password: str) -> User:
        return self._sign_in(self.api.post("/auth/register", json={"name": name, "email": email, "password": password}))

    def google_login(self, access_token: str, action: str = "login") -> User:
        """Exchange a Google access token; `action="signup"` creates unknown accounts."""
        return self._sign_in(self.api.post("/auth/google", json={"token": access_token, "action": action}))

    def logout(self) -> None:
        self.session.logout()
