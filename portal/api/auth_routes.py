"""
FastAPI Router: Auth
=====================

Endpoints
---------
- POST /auth/register: create an account, 201 + auth payload
- POST /auth/login: e-mail / password sign-in
- POST /auth/google: Google OAuth access-token sign-in / sign-up

Every endpoint answers `{_id, name, email, role, avatar, token}`; the client
stores `token` and sends it back as `Authorization: Bearer <token>`.
"""

from fastapi import APIRouter

from portal.api.models import GoogleAuthDetails, RegisterDetails, UserCredentials
from portal.database.core.auth_funcs import fetch_google_profile, google_login, login_user, register_user

router = APIRouter(prefix="/auth", tags=["auth"])
"""Creates the FastAPI router in which we define its routes"""


@router.post("/register", status_code=201)
def register(data: RegisterDetails):
    """Register a new user account and sign it in.

    Responses:
        201: auth payload
        400: missing field or e-mail already registered
    """
    return register_user(name=data.name, email=data.email, password=data.password)


@router.post("/login")
def login(data: UserCredentials):
    """Authenticate with e-mail and password.

    Responses:
        200: auth payload
        401: {'message': 'Invalid email or password'}
    """
    return login_user(email=data.email, password=data.password)


@router.post("/google")
def google(data: GoogleAuthDetails):
    """Sign in with a Google access token.

    The token is exchanged for the Google profile first; `action` decides
    what happens to identities without an account (see `google_login`).
    """
    profile = fetch_google_profile(data.token)
    return google_login(profile=profile, action=data.action)
