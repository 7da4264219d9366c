"""
Community ORM Models
====================

Entities behind the community hub:

- ``Room``: a topic chat room. Rooms are listed and joined over REST only;
  message transport is out of scope. ``members`` is an id set and
  ``is_archived`` hides a room from listings.
- ``Poll``: a community poll with ``options`` stored as
  ``[{"text": str, "votes": [user_id, ...]}, ...]``. A poll stays listed
  while ``is_active`` is set; ``expires_at`` defaults to one day after
  creation.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, TEXT, VARCHAR, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.database.config.connection_engine import declarativeBase
from portal.database.helpers.defaults import new_id, utc_now


class Room(declarativeBase):
    """ORM model for the `room` table."""

    __tablename__ = "room"

    id: Mapped[str] = mapped_column(VARCHAR(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(TEXT, nullable=False, default="")
    icon: Mapped[str] = mapped_column(VARCHAR(32), nullable=False, default="💬")
    topics: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    members: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[Optional[str]] = mapped_column(VARCHAR(36), ForeignKey("app_user.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class Poll(declarativeBase):
    """ORM model for the `poll` table."""

    __tablename__ = "poll"

    id: Mapped[str] = mapped_column(VARCHAR(36), primary_key=True, default=new_id)
    question: Mapped[str] = mapped_column(TEXT, nullable=False)
    author_id: Mapped[str] = mapped_column(VARCHAR(36), ForeignKey("app_user.id"), nullable=False)
    options: Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)
    """Answer options as `{text, votes}` documents."""

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    author = relationship("User", lazy="joined")
