"""
Unit-of-work handling for the service layer.

Every `@transactional` service function runs inside one SQLAlchemy session.
The outermost call opens it and publishes it through a context variable;
service functions called from inside another one pick the same session up
instead of opening a second one. The session is committed when the outermost
call returns and rolled back when it raises, so an `HTTPException` raised
halfway through a service function leaves no partial writes behind.
"""

import contextvars
import logging
from functools import wraps
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from portal.database.config.connection_engine import connection_engine

logger = logging.getLogger(__name__)

db_session_context: contextvars.ContextVar[Optional[Session]] = contextvars.ContextVar("db_session_context", default=None)
"""Session of the transaction currently in progress, if any."""

SessionFactory = sessionmaker(bind=connection_engine, expire_on_commit=False)


def transactional(func):
    """
    Run `func` inside the current unit of work, opening one when needed.

    The wrapped function receives the session as its `session` keyword
    argument and must itself be called with keyword arguments only.

    Example
    -------
    >>> @transactional
    ... def close_poll(session: Session, poll_id: str) -> dict:
    ...     poll = CommunityDao().fetchPollById(session=session, poll_id=poll_id)
    ...     poll.is_active = False
    ...     return poll_dict(poll)
    """
    @wraps(func)
    def in_transaction(*args, **kwargs):
        active = db_session_context.get()
        if active is not None:
            return func(*args, session=active, **kwargs)

        session = SessionFactory()
        token = db_session_context.set(session)
        try:
            result = func(*args, session=session, **kwargs)
            session.commit()
            return result
        except Exception:
            logger.debug(f"Rolling back unit of work opened by {func.__name__}")
            session.rollback()
            raise
        finally:
            session.close()
            db_session_context.reset(token)

    return in_transaction
