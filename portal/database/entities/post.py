"""
Post ORM Model
==============

The ``Post`` ORM model is the central content record of the portal. A post is
an article, question, resource, tutorial, discussion or announcement written
by a ``User`` and stored in the ``post`` table.

Key features
~~~~~~~~~~~~
- String UUID primary key (``id``) and URL ``slug``
- Foreign key to the author (``author_id`` → ``app_user.id``)
- Classification: ``type``, ``category``, ``tags``, ``difficulty``
- Access control: ``visibility`` (public / private / followers) and
  ``moderation_status`` (approved / pending / rejected)
- Engagement: ``views`` counter plus ``unique_viewers``, ``likes`` and
  ``bookmarks`` id sets
- Edit tracking: ``is_edited`` + ``edit_history`` entries
  ``{_id, editedBy, editedAt, reason, changes}``
- AI summary document (``summary``) with a ``status`` discriminator
- Children: ``answers`` (questions) and ``comments`` (every other type),
  deleted together with the post

Integration notes
~~~~~~~~~~~~~~~~~
- ``summary`` always holds at least ``{"status": "idle"}``.
- ``flags`` and ``reports`` collect moderation signals; they are never sent
  to clients.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, TEXT, VARCHAR, Boolean, DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.database.config.connection_engine import declarativeBase
from portal.database.helpers.defaults import new_id, utc_now


def _idle_summary() -> dict:
    return {"status": "idle"}


class Post(declarativeBase):
    """
    ORM model for the `post` table.

    Attributes
    ----------
    id : str
        Primary key. UUID of the post.
    title, content, excerpt : str
        Markdown body plus a plain-text teaser derived from it.
    author_id : str
        Foreign key to `app_user`.
    accepted_answer_id : str | None
        Id of the accepted answer (questions only).
    summary : dict
        `{"status": "idle"|"processing"|"ready"|"error", ...}`.
    """

    __tablename__ = "post"

    id: Mapped[str] = mapped_column(VARCHAR(36), primary_key=True, default=new_id)
    """Primary key. UUID of the post."""

    title: Mapped[str] = mapped_column(VARCHAR(300), nullable=False)
    content: Mapped[str] = mapped_column(TEXT, nullable=False)
    excerpt: Mapped[str] = mapped_column(TEXT, nullable=False, default="")

    author_id: Mapped[str] = mapped_column(VARCHAR(36), ForeignKey("app_user.id"), nullable=False)
    """Foreign key reference to the `app_user` table (author)."""

    type: Mapped[str] = mapped_column(VARCHAR(32), nullable=False, default="article")
    category: Mapped[str] = mapped_column(VARCHAR(100), nullable=False)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    difficulty: Mapped[str] = mapped_column(VARCHAR(32), nullable=False, default="Beginner")
    visibility: Mapped[str] = mapped_column(VARCHAR(32), nullable=False, default="public")

    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unique_viewers: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    """Ids of signed-in users who opened the post."""

    likes: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    """Ids of users who liked the post."""

    bookmarks: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    """Ids of users who bookmarked the post."""

    attachments: Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)
    """Uploaded files as `{name, url, type, size}`."""

    accepted_answer_id: Mapped[Optional[str]] = mapped_column(VARCHAR(36), nullable=True)

    is_edited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    edit_history: Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)
    """Edit entries as `{_id, editedBy, editedAt, reason, changes}`; `changes` is a JSON string."""

    summary: Mapped[dict] = mapped_column(JSON, nullable=False, default=_idle_summary)

    reading_time: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """Estimated reading time in minutes."""

    slug: Mapped[str] = mapped_column(VARCHAR(400), nullable=False, default="")

    moderation_status: Mapped[str] = mapped_column(VARCHAR(32), nullable=False, default="approved")
    flags: Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)
    reports: Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    """Set on creation and on every content edit; engagement changes leave it alone."""

    author = relationship("User", lazy="joined")
    answers = relationship(
        "Answer",
        order_by="Answer.created_at",
        cascade="all, delete-orphan",
        back_populates="post",
    )
    comments = relationship(
        "Comment",
        order_by="Comment.created_at",
        cascade="all, delete-orphan",
        back_populates="post",
    )

    def __str__(self) -> str:
        return f"Post: id:{self.id}, title: {self.title}, type: {self.type}, author: {self.author_id}"
