"""
Answer and Comment DAOs

Purpose
-------
Data access for the response channels of a post:
- `AnswerDao`: answers to questions (create, fetch by id, fetch per post)
- `CommentDao`: comments under posts and under gallery projects

Error Handling
--------------
- Methods catch generic `Exception`, log the error, and re-raise.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from portal.database.entities.answer import Answer
from portal.database.entities.comment import Comment, ProjectComment

logger = logging.getLogger(__name__)


class AnswerDao:
    """
    Data Access Object (DAO) for managing Answer entities.
    """

    def createAnswer(self, session: Session, answer: Answer) -> Answer:
        try:
            session.add(answer)
            session.flush()
            return answer
        except Exception as e:
            logger.error(f"Error in AnswerDao.createAnswer. Error: {e}")
            raise e

    def fetchAnswer(self, session: Session, post_id: str, answer_id: str) -> Optional[Answer]:
        """
        Fetch an answer belonging to `post_id`.

        Returns
        -------
        Answer | None
            None when the id is unknown or belongs to another post.
        """
        try:
            return (
                session.query(Answer)
                .filter(Answer.id == answer_id, Answer.post_id == post_id)
                .first()
            )
        except Exception as e:
            logger.error(f"Error in AnswerDao.fetchAnswer. Error: {e}")
            raise e

    def fetchAnswersByPost(self, session: Session, post_id: str) -> List[Answer]:
        """All answers of a post in creation order."""
        try:
            return (
                session.query(Answer)
                .filter(Answer.post_id == post_id)
                .order_by(Answer.created_at)
                .all()
            )
        except Exception as e:
            logger.error(f"Error in AnswerDao.fetchAnswersByPost. Error: {e}")
            raise e


class CommentDao:
    """
    Data Access Object (DAO) for post and project comments.
    """

    def createComment(self, session: Session, comment: Comment) -> Comment:
        try:
            session.add(comment)
            session.flush()
            return comment
        except Exception as e:
            logger.error(f"Error in CommentDao.createComment. Error: {e}")
            raise e

    def fetchComment(self, session: Session, post_id: str, comment_id: str) -> Optional[Comment]:
        try:
            return (
                session.query(Comment)
                .filter(Comment.id == comment_id, Comment.post_id == post_id)
                .first()
            )
        except Exception as e:
            logger.error(f"Error in CommentDao.fetchComment. Error: {e}")
            raise e

    def fetchCommentsByPost(self, session: Session, post_id: str) -> List[Comment]:
        try:
            return (
                session.query(Comment)
                .filter(Comment.post_id == post_id)
                .order_by(Comment.created_at)
                .all()
            )
        except Exception as e:
            logger.error(f"Error in CommentDao.fetchCommentsByPost. Error: {e}")
            raise e

    def deleteComment(self, session: Session, comment: Comment) -> None:
        try:
            session.delete(comment)
            session.flush()
        except Exception as e:
            logger.error(f"Error in CommentDao.deleteComment. Error: {e}")
            raise e

    def createProjectComment(self, session: Session, comment: ProjectComment) -> ProjectComment:
        try:
            session.add(comment)
            session.flush()
            return comment
        except Exception as e:
            logger.error(f"Error in CommentDao.createProjectComment. Error: {e}")
            raise e

    def fetchCommentsByProject(self, session: Session, project_id: str) -> List[ProjectComment]:
        try:
            return (
                session.query(ProjectComment)
                .filter(ProjectComment.project_id == project_id)
                .order_by(ProjectComment.created_at)
                .all()
            )
        except Exception as e:
            logger.error(f"Error in CommentDao.fetchCommentsByProject. Error: {e}")
            raise e
