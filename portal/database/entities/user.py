"""
User ORM Model
==============

The ``User`` ORM model represents a registered community member. It maps to the
``app_user`` table and holds credentials, public profile data and the social
graph (followers / following) together with the member's saved posts.

Key features
~~~~~~~~~~~~
- String UUID primary key (``id``), portable across SQLite and PostgreSQL
- Unique, normalised e-mail address
- Optional password (accounts created through Google sign-in have none)
- Public profile fields (bio, location, company, socials, skills)
- Gamification counters (``points``, ``badges``)
- JSON id sets for ``followers``, ``following`` and ``bookmarks``

"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, TEXT, VARCHAR, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from portal.database.config.connection_engine import declarativeBase
from portal.database.helpers.defaults import new_id, utc_now


class User(declarativeBase):
    """
    ORM model for the `app_user` table.

    Attributes
    ----------
    id : str
        Primary key. UUID of the user.
    name : str
        Display name.
    email : str
        Lower-cased e-mail address, unique.
    password : str | None
        bcrypt hash of the password, or None for Google-only accounts.
    google_id : str | None
        Google subject identifier once the account is linked.
    role : str
        "user" or "admin".
    followers, following, bookmarks : list[str]
        Id sets of users (followers / following) and posts (bookmarks).
    """

    __tablename__ = "app_user"

    id: Mapped[str] = mapped_column(VARCHAR(36), primary_key=True, default=new_id)
    """Primary key. UUID of the user."""

    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    """Display name of the user."""

    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    """Lower-cased e-mail address."""

    password: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    """bcrypt hash, empty for Google-only accounts."""

    google_id: Mapped[Optional[str]] = mapped_column(VARCHAR(255), nullable=True)
    """Google account subject, set on Google sign-in."""

    role: Mapped[str] = mapped_column(VARCHAR(32), nullable=False, default="user")

    username: Mapped[Optional[str]] = mapped_column(VARCHAR(255), nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    website: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    company: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    job_title: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)

    socials: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    """Links keyed by network name (github, linkedin, twitter...)."""

    skills: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Reputation points."""

    badges: Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)
    """Earned badges as `{name, description, icon, earnedAt}`."""

    followers: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    """Ids of users following this user."""

    following: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    """Ids of users this user follows."""

    bookmarks: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    """Ids of bookmarked posts, in the order they were saved."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    """Registration timestamp (UTC)."""

    def __str__(self) -> str:
        return f"User: id:{self.id}, name: {self.name}, email: {self.email}"
