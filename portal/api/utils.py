"""
Access tokens and the request dependencies that turn them into user ids.

Tokens are JWTs whose `sub` claim is the user id. Routers that
need a signed-in caller depend on `get_current_user`; read-only routes that
merely personalise their response depend on `get_optional_user`.

Settings used: `SECRET_KEY`, `ALGORITHM` and `ACCESS_TOKEN_EXPIRE_MINUTES`.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Header, HTTPException
from jose import JWTError, jwt

from portal.database.config.config import settings
from portal.database.core.user_funcs import user_exists

logger = logging.getLogger(__name__)


def create_access_token(data: dict) -> str:
    """
    Sign `data` into a token that expires after the configured lifetime.

    Parameters
    ----------
    data : dict
        Claims for the token. `sub` must hold the user id.

    Returns
    -------
    str
        The encoded token.
    """
    lifetime_seconds = int(settings.ACCESS_TOKEN_EXPIRE_MINUTES) * 60
    claims = dict(data)
    claims["exp"] = int(datetime.now(timezone.utc).timestamp()) + lifetime_seconds
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[str]:
    """
    Return the user id carried by `token`, or None when the signature is
    wrong, the token has expired or it cannot be decoded at all.
    """
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        return None
    return claims.get("sub")


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(authorization: Optional[str] = Header(None)) -> str:
    """
    Resolve the calling user from the `Authorization` header.

    Raises
    ------
    HTTPException
        401 'Not authorized, no token' without a bearer token,
        401 'Not authorized, token failed' when the token is invalid,
        expired, or points at a deleted account.
    """
    token = _bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Not authorized, no token")
    user_id = verify_token(token)
    if not user_id or not user_exists(user_id=user_id):
        raise HTTPException(status_code=401, detail="Not authorized, token failed")
    return user_id


def get_optional_user(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Same as `get_current_user`, but returns None instead of failing."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    return verify_token(token)
