"""
Post DAO

Purpose
-------
Data-access layer for the `Post` ORM entity:
- Create and delete posts
- Fetch a single post, a set of posts, or an author's recent posts
- Run the filtered / sorted / paginated feed query
- List the moderation queue (flagged or pending posts)

Feed filters
------------
`fetchFeed` combines, with AND:
- an optional search over title and content (case-insensitive substring)
- an optional exact category and author
- the visibility rule: public posts, the viewer's own private posts, and
  followers-only posts whose author is the viewer or someone the viewer follows
- the moderation rule: approved posts, plus the viewer's own posts

Sort keys: "top" (most viewed), "oldest", anything else newest first.

Error Handling
--------------
- Methods catch generic `Exception`, log the error, and re-raise.
"""

import logging
from typing import List, Optional

from sqlalchemy import and_, asc, desc, func, or_
from sqlalchemy.orm import Session

from portal.database.entities.post import Post

logger = logging.getLogger(__name__)


class PostDao:
    """
    Data Access Object (DAO) for managing Post entities.
    """

    def createPost(self, session: Session, post: Post) -> Post:
        """
        Stage a new post and flush it so the generated id is available.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        post : Post
            Post entity to be added.
        """
        try:
            session.add(post)
            session.flush()
            return post
        except Exception as e:
            logger.error(f"Error in PostDao.createPost. Error: {e}")
            raise e

    def fetchPostById(self, session: Session, post_id: str) -> Optional[Post]:
        try:
            return session.get(Post, post_id)
        except Exception as e:
            logger.error(f"Error in PostDao.fetchPostById. Error: {e}")
            raise e

    def fetchPostsByIds(self, session: Session, post_ids: List[str]) -> List[Post]:
        """
        Fetch posts by id, keeping the order of `post_ids`.

        Ids of deleted posts are skipped silently.
        """
        if not post_ids:
            return []
        try:
            found = {post.id: post for post in session.query(Post).filter(Post.id.in_(post_ids)).all()}
            return [found[post_id] for post_id in post_ids if post_id in found]
        except Exception as e:
            logger.error(f"Error in PostDao.fetchPostsByIds. Error: {e}")
            raise e

    def fetchRecentPostsByAuthor(self, session: Session, author_id: str, limit: int = 5) -> List[Post]:
        """Latest `limit` posts of an author, newest first."""
        try:
            return (
                session.query(Post)
                .filter(Post.author_id == author_id)
                .order_by(desc(Post.created_at))
                .limit(limit)
                .all()
            )
        except Exception as e:
            logger.error(f"Error in PostDao.fetchRecentPostsByAuthor. Error: {e}")
            raise e

    def fetchFeed(
        self,
        session: Session,
        viewer_id: Optional[str],
        viewer_following: List[str],
        search: Optional[str] = None,
        category: Optional[str] = None,
        author_id: Optional[str] = None,
        sort: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> List[Post]:
        """
        Run the feed query.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        viewer_id : str | None
            Id of the requesting user, None for anonymous visitors.
        viewer_following : list[str]
            Ids the viewer follows (empty for anonymous visitors).
        search, category, author_id : str | None
            Optional filters.
        sort : str | None
            "top", "oldest" or anything else for newest first.
        page, limit : int
            1-based page number and page size.

        Returns
        -------
        list[Post]
        """
        try:
            query = session.query(Post)

            if search:
                pattern = f"%{search}%"
                query = query.filter(or_(Post.title.ilike(pattern), Post.content.ilike(pattern)))
            if category:
                query = query.filter(Post.category == category)
            if author_id:
                query = query.filter(Post.author_id == author_id)

            visible = [Post.visibility == "public"]
            if viewer_id:
                visible.append(and_(Post.visibility == "private", Post.author_id == viewer_id))
                visible.append(
                    and_(Post.visibility == "followers", Post.author_id.in_([*viewer_following, viewer_id]))
                )
            query = query.filter(or_(*visible))

            if viewer_id:
                query = query.filter(or_(Post.moderation_status == "approved", Post.author_id == viewer_id))
            else:
                query = query.filter(Post.moderation_status == "approved")

            if sort == "top":
                query = query.order_by(desc(Post.views))
            elif sort == "oldest":
                query = query.order_by(asc(Post.created_at))
            else:
                query = query.order_by(desc(Post.created_at))

            return query.offset((page - 1) * limit).limit(limit).all()
        except Exception as e:
            logger.error(f"Error in PostDao.fetchFeed. Error: {e}")
            raise e

    def fetchModerationQueue(self, session: Session) -> List[Post]:
        """Posts that carry at least one flag or wait for review, most recently updated first."""
        try:
            return (
                session.query(Post)
                .filter(or_(Post.moderation_status == "pending", func.json_array_length(Post.flags) > 0))
                .order_by(desc(Post.updated_at))
                .all()
            )
        except Exception as e:
            logger.error(f"Error in PostDao.fetchModerationQueue. Error: {e}")
            raise e

    def deletePost(self, session: Session, post: Post) -> None:
        """Delete a post together with its answers and comments."""
        try:
            session.delete(post)
        except Exception as e:
            logger.error(f"Error in PostDao.deletePost. Error: {e}")
            raise e
