"""
Answer ORM Model
================

An ``Answer`` is a reply to a question-type ``Post``. Members vote answers up
or down and the question's author may accept exactly one of them.

Key features
~~~~~~~~~~~~
- Foreign keys to the question (``post_id``) and the author (``author_id``)
- ``votes`` document ``{"up": [...], "down": [...]}`` of user ids; a user
  appears in at most one of the two lists
- ``is_accepted`` / ``accepted_at`` acceptance marker
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, TEXT, VARCHAR, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.database.config.connection_engine import declarativeBase
from portal.database.helpers.defaults import new_id, utc_now


def _empty_votes() -> dict:
    return {"up": [], "down": []}


class Answer(declarativeBase):
    """ORM model for the `answer` table."""

    __tablename__ = "answer"

    id: Mapped[str] = mapped_column(VARCHAR(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(VARCHAR(36), ForeignKey("post.id", ondelete="CASCADE"), nullable=False)
    author_id: Mapped[str] = mapped_column(VARCHAR(36), ForeignKey("app_user.id"), nullable=False)
    content: Mapped[str] = mapped_column(TEXT, nullable=False)

    votes: Mapped[dict] = mapped_column(JSON, nullable=False, default=_empty_votes)
    """Voter id lists keyed by direction."""

    is_accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    post = relationship("Post", back_populates="answers")
    author = relationship("User", lazy="joined")

    def __str__(self) -> str:
        return f"Answer: id:{self.id}, post: {self.post_id}, accepted: {self.is_accepted}"
