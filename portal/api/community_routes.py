"""
FastAPI Router: Community (rooms and polls)
============================================

Endpoints
---------
- GET  /community/rooms              non-archived rooms
- POST /community/rooms              create a room (201)
- GET  /community/polls              active polls, newest first
- POST /community/polls              create a poll (201)
- POST /community/polls/{id}/vote    move the caller's vote → poll
"""

from fastapi import APIRouter, Depends

from portal.api.models import PollDetails, PollVote, RoomDetails
from portal.api.utils import get_current_user
from portal.database.core.community_funcs import create_poll, create_room, list_polls, list_rooms, vote_poll

router = APIRouter(prefix="/community", tags=["community"])
"""Creates the FastAPI router in which we define its routes"""


@router.get("/rooms")
def rooms():
    return list_rooms()


@router.post("/rooms", status_code=201)
def new_room(data: RoomDetails, user_id: str = Depends(get_current_user)):
    return create_room(
        user_id=user_id,
        name=data.name,
        description=data.description,
        icon=data.icon,
        topics=data.topics,
    )


@router.get("/polls")
def polls():
    return list_polls()


@router.post("/polls", status_code=201)
def new_poll(data: PollDetails, user_id: str = Depends(get_current_user)):
    return create_poll(user_id=user_id, question=data.question, options=data.options, expires_at=data.expiresAt)


@router.post("/polls/{poll_id}/vote")
def poll_vote(poll_id: str, data: PollVote, user_id: str = Depends(get_current_user)):
    """Record the caller's vote; earlier votes of the caller are removed first."""
    return vote_poll(poll_id=poll_id, user_id=user_id, option_index=data.optionIndex)
