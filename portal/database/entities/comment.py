"""
Comment ORM Models
==================

Two flat comment tables:

- ``Comment``: a comment under a non-question ``Post`` (``comment`` table).
- ``ProjectComment``: a comment under a gallery ``Project``
  (``project_comment`` table).

Both carry the commenter (``user_id``), plain ``text`` and a UTC
``created_at`` timestamp, and are removed together with their parent.
"""

from datetime import datetime

from sqlalchemy import TEXT, VARCHAR, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.database.config.connection_engine import declarativeBase
from portal.database.helpers.defaults import new_id, utc_now


class Comment(declarativeBase):
    """ORM model for the `comment` table."""

    __tablename__ = "comment"

    id: Mapped[str] = mapped_column(VARCHAR(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(VARCHAR(36), ForeignKey("post.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str] = mapped_column(VARCHAR(36), ForeignKey("app_user.id"), nullable=False)
    text: Mapped[str] = mapped_column(TEXT, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    post = relationship("Post", back_populates="comments")
    user = relationship("User", lazy="joined")


class ProjectComment(declarativeBase):
    """ORM model for the `project_comment` table."""

    __tablename__ = "project_comment"

    id: Mapped[str] = mapped_column(VARCHAR(36), primary_key=True, default=new_id)
    project_id: Mapped[str] = mapped_column(VARCHAR(36), ForeignKey("project.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str] = mapped_column(VARCHAR(36), ForeignKey("app_user.id"), nullable=False)
    text: Mapped[str] = mapped_column(TEXT, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    project = relationship("Project", back_populates="comments")
    user = relationship("User", lazy="joined")
