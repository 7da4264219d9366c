"""
Community DAO

Purpose
-------
Data-access layer for the community hub:
- Rooms: create, fetch by name, list non-archived rooms
- Polls: create, fetch by id, list active polls newest first

Error Handling
--------------
- Methods catch generic `Exception`, log the error, and re-raise.
"""

import logging
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from portal.database.entities.community import Poll, Room

logger = logging.getLogger(__name__)


class CommunityDao:
    """
    Data Access Object (DAO) for Room and Poll entities.
    """

    def createRoom(self, session: Session, room: Room) -> Room:
        try:
            session.add(room)
            session.flush()
            return room
        except Exception as e:
            logger.error(f"Error in CommunityDao.createRoom. Error: {e}")
            raise e

    def fetchRoomByName(self, session: Session, name: str) -> Optional[Room]:
        try:
            return session.query(Room).filter(Room.name == name).first()
        except Exception as e:
            logger.error(f"Error in CommunityDao.fetchRoomByName. Error: {e}")
            raise e

    def fetchRooms(self, session: Session) -> List[Room]:
        """Non-archived rooms in creation order."""
        try:
            return (
                session.query(Room)
                .filter(Room.is_archived.is_(False))
                .order_by(Room.created_at)
                .all()
            )
        except Exception as e:
            logger.error(f"Error in CommunityDao.fetchRooms. Error: {e}")
            raise e

    def createPoll(self, session: Session, poll: Poll) -> Poll:
        try:
            session.add(poll)
            session.flush()
            return poll
        except Exception as e:
            logger.error(f"Error in CommunityDao.createPoll. Error: {e}")
            raise e

    def fetchPollById(self, session: Session, poll_id: str) -> Optional[Poll]:
        try:
            return session.get(Poll, poll_id)
        except Exception as e:
            logger.error(f"Error in CommunityDao.fetchPollById. Error: {e}")
            raise e

    def fetchActivePolls(self, session: Session) -> List[Poll]:
        """Polls flagged active, newest first."""
        try:
            return (
                session.query(Poll)
                .filter(Poll.is_active.is_(True))
                .order_by(desc(Poll.created_at))
                .all()
            )
        except Exception as e:
            logger.error(f"Error in CommunityDao.fetchActivePolls. Error: {e}")
            raise e
