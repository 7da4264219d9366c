"""
Entities Package: SQLAlchemy 2.0 ORM Models
============================================

The `entities` package defines the ORM models of the portal, mapping
database tables to Python classes using SQLAlchemy 2.0-typed mappings.
These classes form the persistence backbone and are consumed by DAOs
(`daos` package) to perform CRUD and transactional operations.

Tech Stack & Conventions
------------------------
- String UUID primary keys (VARCHAR(36)), so SQLite and PostgreSQL both work
- Timezone-aware timestamps (UTC)
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`
- Id sets and small nested documents stored as JSON columns; mutations
  always assign a new list/dict so the ORM sees the change

Contents
--------
- User: member account, profile, followers / following, bookmarks
- Post: content record with answers, comments, edit history and AI summary
- Answer: reply to a question, with up / down votes and acceptance
- Comment / ProjectComment: flat comment threads
- Collection: user-owned list of saved posts
- Room / Poll: community hub entities
- Project: project gallery entry

Importing this package registers every table on the shared `metadata`.
"""

from portal.database.entities.user import User
from portal.database.entities.post import Post
from portal.database.entities.answer import Answer
from portal.database.entities.comment import Comment, ProjectComment
from portal.database.entities.collection import Collection
from portal.database.entities.community import Poll, Room
from portal.database.entities.project import Project

__all__ = [
    "User",
    "Post",
    "Answer",
    "Comment",
    "ProjectComment",
    "Collection",
    "Poll",
    "Room",
    "Project",
]
