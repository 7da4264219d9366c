"""
Service-layer operations for authentication.

All database-facing functions are wrapped with the `@transactional`
decorator, which manages SQLAlchemy sessions and transactions automatically.
Each function accepts (and uses) an injected `session: Session` provided by
the decorator and must be called with keyword arguments.

Failures are raised as `HTTPException` carrying the status code and the
message the client displays.
"""

import logging
import smtplib
from email.mime.text import MIMEText

import httpx
from fastapi import HTTPException
from sqlalchemy.orm import Session

from portal.api.utils import create_access_token
from portal.crypt.passwords import PasswordHasher
from portal.database.config.config import settings
from portal.database.core.serializers import auth_payload
from portal.database.daos.user_dao import UserDao
from portal.database.entities.user import User
from portal.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


def normalize_email(email: str | None) -> str:
    """Trim and lower-case an e-mail address (None → "")."""
    return email.strip().lower() if isinstance(email, str) else ""


@transactional
def register_user(session: Session, name: str | None, email: str | None, password: str | None) -> dict:
    """
    Create an account and return the auth payload.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    name, email, password : str | None
        Registration form values; all three are required.

    Returns
    -------
    dict
        `{_id, name, email, role, avatar, token}`.

    Raises
    ------
    HTTPException
        400 when a field is missing or the e-mail is already registered.
    """
    normalized = normalize_email(email)
    if not name or not normalized or not password:
        raise HTTPException(status_code=400, detail="Name, email, and password are required")

    user_dao = UserDao()
    if user_dao.fetchUserByEmail(session=session, email=normalized):
        raise HTTPException(status_code=400, detail="User already exists")

    user = user_dao.createUser(session=session, user_data=User(name=name, email=normalized, password=password))
    logger.info(f"Registered user {user.id}")

    send_email(
        to=user.email,
        subject="Welcome to Knowledge Portal!",
        body=f"Hi {user.name},\n\nThank you for registering at Knowledge Portal. "
        "We are excited to have you on board!\n\nBest Regards,\nKnowledge Portal Team",
    )
    return auth_payload(user, create_access_token({"sub": user.id}))


@transactional
def login_user(session: Session, email: str | None, password: str | None) -> dict:
    """
    Authenticate by e-mail and password.

    Raises
    ------
    HTTPException
        400 when a field is missing, 401 on any credential mismatch.
    """
    normalized = normalize_email(email)
    if not normalized or not password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = UserDao().fetchUserByEmail(session=session, email=normalized)
    if user is None or not PasswordHasher().verify_password(password, user.password):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return auth_payload(user, create_access_token({"sub": user.id}))


def fetch_google_profile(access_token: str) -> dict:
    """
    Resolve a Google OAuth access token into `{sub, name, email, picture}`.

    Raises
    ------
    HTTPException
        400 'Google login failed' when Google rejects the token or is unreachable.
    """
    try:
        response = httpx.get(settings.GOOGLE_USERINFO_URL, params={"access_token": access_token}, timeout=10.0)
        response.raise_for_status()
        profile = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Google userinfo lookup failed: {e}")
        raise HTTPException(status_code=400, detail="Google login failed")
    if not profile.get("email"):
        raise HTTPException(status_code=400, detail="Google login failed")
    return profile


@transactional
def google_login(session: Session, profile: dict, action: str = "login") -> dict:
    """
    Sign in (or sign up) with a resolved Google profile.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    profile : dict
        Output of `fetch_google_profile`.
    action : str
        "login" or "signup" ("register" is accepted as a synonym). An
        unknown identity is rejected on "login"
        and gets a new account on "signup".

    Returns
    -------
    dict
        Auth payload including `points` and `badges`.

    Raises
    ------
    HTTPException
        404 when `action` is "login" and no account matches.
    """
    user_dao = UserDao()
    normalized = normalize_email(profile.get("email"))
    google_id = profile.get("sub")
    picture = profile.get("picture")

    user = user_dao.fetchUserByGoogleId(session=session, google_id=google_id) if google_id else None
    if user is None:
        user = user_dao.fetchUserByEmail(session=session, email=normalized)

    if user is None:
        if action not in ("signup", "register"):
            raise HTTPException(status_code=404, detail="No account found for this Google user. Please sign up first")
        user = user_dao.createUser(
            session=session,
            user_data=User(
                name=profile.get("name") or normalized.split("@")[0],
                email=normalized,
                password=None,
                google_id=google_id,
                avatar=picture,
            ),
        )
        logger.info(f"Created user {user.id} via Google sign-up")
        send_email(
            to=user.email,
            subject="Welcome to Knowledge Portal!",
            body=f"Hi {user.name},\n\nThank you for joining Knowledge Portal via Google. "
            "We are excited to have you on board!\n\nBest Regards,\nKnowledge Portal Team",
        )
    else:
        if google_id and not user.google_id:
            user.google_id = google_id
        if picture and user.avatar != picture:
            user.avatar = picture

    return auth_payload(user, create_access_token({"sub": user.id}), include_rewards=True)


def send_email(to: str, subject: str, body: str) -> bool:
    """
    Send a plain-text e-mail through Gmail SMTP.

    Parameters
    ----------
    to : str
        Recipient address.
    subject, body : str
        Message subject and text.

    Returns
    -------
    bool
        True when the message was handed to the SMTP server.

    Notes
    -----
    - Uses `settings.SENDER_EMAIL` and `settings.APP_PASSWORD`; when either is
      missing the message is skipped with a warning.
    - SMTP failures are logged and never interrupt the calling flow.
    """
    sender_email = settings.SENDER_EMAIL
    sender_password = settings.APP_PASSWORD
    if not sender_email or not sender_password:
        logger.warning(f"SENDER_EMAIL or APP_PASSWORD not set. Email to {to} not sent.")
        return False

    msg = MIMEText(body)
    msg["Subject"] = subject
    msg["From"] = sender_email
    msg["To"] = to

    try:
        with smtplib.SMTP("smtp.gmail.com", 587, timeout=10) as server:
            server.starttls()
            server.login(sender_email, sender_password)
            server.sendmail(sender_email, to, msg.as_string())
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Error sending email to {to}: {e}")
        return False
