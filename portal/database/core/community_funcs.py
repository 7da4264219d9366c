"""
Service-layer operations for the community hub (rooms and polls).

All functions are wrapped with the `@transactional` decorator and must be
called with keyword arguments.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from portal.database.core.serializers import poll_dict, room_dict
from portal.database.daos.community_dao import CommunityDao
from portal.database.entities.community import Poll, Room
from portal.database.helpers.defaults import as_utc, utc_now
from portal.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

DEFAULT_POLL_LIFETIME = timedelta(days=1)


@transactional
def list_rooms(session: Session) -> List[dict]:
    return [room_dict(room) for room in CommunityDao().fetchRooms(session=session)]


@transactional
def create_room(
    session: Session,
    user_id: str,
    name: Optional[str],
    description: Optional[str] = None,
    icon: Optional[str] = None,
    topics: Optional[List[str]] = None,
) -> dict:
    """
    Create a room; the creator becomes its first member.

    Raises
    ------
    HTTPException
        400 for a blank name or when a room with that name already exists.
    """
    if not name or not name.strip():
        raise HTTPException(status_code=400, detail="Room name is required")
    community_dao = CommunityDao()
    if community_dao.fetchRoomByName(session=session, name=name.strip()):
        raise HTTPException(status_code=400, detail="Room already exists")

    room = Room(
        name=name.strip(),
        description=description or "",
        topics=[topic.strip() for topic in (topics or []) if topic and topic.strip()],
        members=[user_id],
        created_by=user_id,
    )
    if icon:
        room.icon = icon
    community_dao.createRoom(session=session, room=room)
    logger.info(f"Room {room.name!r} created by {user_id}")
    return room_dict(room)


@transactional
def list_polls(session: Session) -> List[dict]:
    return [poll_dict(poll) for poll in CommunityDao().fetchActivePolls(session=session)]


@transactional
def create_poll(
    session: Session,
    user_id: str,
    question: Optional[str],
    options: Optional[List[str]],
    expires_at: Optional[datetime] = None,
) -> dict:
    """
    Create a poll with one `{text, votes: []}` entry per option.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    user_id : str
        Poll author.
    question : str | None
        Poll question (required).
    options : list[str] | None
        Option labels (at least one).
    expires_at : datetime | None
        Expiry; defaults to one day from now.

    Raises
    ------
    HTTPException
        400 when the question or the options are missing.
    """
    labels = [option for option in (options or []) if isinstance(option, str) and option.strip()]
    if not question or not question.strip() or not labels:
        raise HTTPException(status_code=400, detail="Question and at least one option are required")

    poll = Poll(
        question=question.strip(),
        author_id=user_id,
        options=[{"text": label, "votes": []} for label in labels],
        expires_at=as_utc(expires_at) if expires_at else utc_now() + DEFAULT_POLL_LIFETIME,
        is_active=True,
    )
    CommunityDao().createPoll(session=session, poll=poll)
    return poll_dict(poll)


@transactional
def vote_poll(session: Session, poll_id: str, user_id: str, option_index: Optional[int]) -> dict:
    """
    Move the caller's vote to `option_index`.

    Prior votes of the caller are removed from every option first, so a
    voter ends up in at most one option. An out-of-range index only clears
    the vote.
    """
    poll = CommunityDao().fetchPollById(session=session, poll_id=poll_id)
    if poll is None:
        raise HTTPException(status_code=404, detail="Poll not found")

    options = [
        {"text": option.get("text", ""), "votes": [voter for voter in option.get("votes", []) if voter != user_id]}
        for option in (poll.options or [])
    ]
    if option_index is not None and 0 <= option_index < len(options):
        options[option_index]["votes"].append(user_id)
    poll.options = options
    return poll_dict(poll)
