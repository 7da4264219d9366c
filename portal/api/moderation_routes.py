"""
FastAPI Router: Moderation queue
================================

Endpoints
---------
Moderators and admins only; everyone else gets 403.

- GET /moderation/posts         flagged or pending posts, newest update first
- PUT /moderation/posts/{id}    resolve with {status: approved|rejected, note?} → post
"""

from fastapi import APIRouter, Depends

from portal.api.models import ModerationDecision
from portal.api.utils import get_current_user
from portal.database.core.moderation_funcs import list_moderation_queue, resolve_post

router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.get("/posts")
def queue(user_id: str = Depends(get_current_user)):
    return list_moderation_queue(user_id=user_id)


@router.put("/posts/{post_id}")
def resolve(post_id: str, data: ModerationDecision, user_id: str = Depends(get_current_user)):
    return resolve_post(post_id=post_id, user_id=user_id, status=data.status, note=data.note)
