"""
Project ORM Model
=================

A ``Project`` is a showcase entry in the project gallery: a cover image,
optional gallery images, repository / demo links and tags, with likes,
views and a flat comment thread (``ProjectComment``).
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, TEXT, VARCHAR, Boolean, DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.database.config.connection_engine import declarativeBase
from portal.database.helpers.defaults import new_id, utc_now


class Project(declarativeBase):
    """ORM model for the `project` table."""

    __tablename__ = "project"

    id: Mapped[str] = mapped_column(VARCHAR(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(VARCHAR(300), nullable=False)
    description: Mapped[str] = mapped_column(TEXT, nullable=False)
    cover_image: Mapped[str] = mapped_column(TEXT, nullable=False)
    gallery_images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    repo_link: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    demo_link: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    author_id: Mapped[str] = mapped_column(VARCHAR(36), ForeignKey("app_user.id"), nullable=False)
    likes: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    author = relationship("User", lazy="joined")
    comments = relationship(
        "ProjectComment",
        order_by="ProjectComment.created_at",
        cascade="all, delete-orphan",
        back_populates="project",
    )
