"""
User DAO

Purpose
-------
Thin data-access layer for the `User` ORM entity. Provides:
- Creation (the password is hashed before insert)
- Lookup by id, e-mail, Google subject or a set of ids

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller
  (normally injected by `@transactional` in the service layer).
- Business rules (duplicate e-mails, follow rules, profile whitelists) live
  in `portal.database.core.user_funcs` and `auth_funcs`.

Error Handling
--------------
- Each method catches generic `Exception`, logs it, and re-raises.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from portal.crypt.passwords import PasswordHasher
from portal.database.entities.user import User

logger = logging.getLogger(__name__)


class UserDao:
    """
    Data Access Object (DAO) for managing User entities.
    """

    def createUser(self, session: Session, user_data: User) -> User:
        """
        Stage a new user; a plaintext password is hashed first.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_data : User
            User entity to persist. `password` may be None (Google accounts).

        Returns
        -------
        User
            The staged (and flushed) user, with its id populated.
        """
        try:
            if user_data.password:
                user_data.password = PasswordHasher().hash_password(user_data.password)
            session.add(user_data)
            session.flush()
            return user_data
        except Exception as e:
            logger.error(f"Error in UserDao.createUser. Error: {e}")
            raise e

    def fetchUserById(self, session: Session, user_id: str) -> Optional[User]:
        """Return the user with `user_id`, or None."""
        try:
            return session.get(User, user_id)
        except Exception as e:
            logger.error(f"Error in UserDao.fetchUserById. Error: {e}")
            raise e

    def fetchUserByEmail(self, session: Session, email: str) -> Optional[User]:
        """
        Fetch a user by (already normalised) e-mail address.

        Returns
        -------
        User | None
        """
        try:
            return session.query(User).filter(User.email == email).first()
        except Exception as e:
            logger.error(f"Error in UserDao.fetchUserByEmail. Error: {e}")
            raise e

    def fetchUserByGoogleId(self, session: Session, google_id: str) -> Optional[User]:
        try:
            return session.query(User).filter(User.google_id == google_id).first()
        except Exception as e:
            logger.error(f"Error in UserDao.fetchUserByGoogleId. Error: {e}")
            raise e

    def fetchUsersByIds(self, session: Session, user_ids: List[str]) -> List[User]:
        """
        Fetch several users at once, preserving the order of `user_ids`.

        Unknown ids are skipped.
        """
        if not user_ids:
            return []
        try:
            found = {user.id: user for user in session.query(User).filter(User.id.in_(user_ids)).all()}
            return [found[user_id] for user_id in user_ids if user_id in found]
        except Exception as e:
            logger.error(f"Error in UserDao.fetchUsersByIds. Error: {e}")
            raise e
