"""
Collection ORM Model
====================

A ``Collection`` is a named, user-owned list of saved posts ("reading
lists"). Post ids are kept in insertion order and are never duplicated.
"""

from datetime import datetime
from typing import List

from sqlalchemy import JSON, TEXT, VARCHAR, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from portal.database.config.connection_engine import declarativeBase
from portal.database.helpers.defaults import new_id, utc_now


class Collection(declarativeBase):
    """
    ORM model for the `collection` table.

    Attributes
    ----------
    id : str
        Primary key. UUID of the collection.
    user_id : str
        Owner (`app_user.id`).
    name : str
        Collection name shown in the "Save to collection" menu.
    posts : list[str]
        Ordered, duplicate-free post ids.
    is_public : bool
        Whether other members may see the collection on the owner's profile.
    """

    __tablename__ = "collection"

    id: Mapped[str] = mapped_column(VARCHAR(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(VARCHAR(36), ForeignKey("app_user.id"), nullable=False)
    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    description: Mapped[str] = mapped_column(TEXT, nullable=False, default="")
    posts: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __str__(self) -> str:
        return f"Collection: id:{self.id}, name: {self.name}, owner: {self.user_id}, posts: {len(self.posts)}"
