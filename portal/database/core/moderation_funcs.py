"""
Service-layer operations for the moderation queue.

Posts land in the queue when a user reports them or when their text trips
the blocked-terms filter; both set `moderation_status` to "pending", which
hides the post from everyone but its author. Moderators (users whose role is
"admin" or "moderator") list the queue and resolve each post:

- "approved" puts the post back in the feed and clears its flags;
- "rejected" keeps it hidden and keeps the flags for the record.

A moderator note, when given, is appended to the post's edit history.
"""

import logging
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from portal.database.core.serializers import iso, moderation_dict, post_dict
from portal.database.daos.post_dao import PostDao
from portal.database.daos.user_dao import UserDao
from portal.database.helpers.defaults import new_id, utc_now
from portal.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

MODERATOR_ROLES = ("admin", "moderator")
RESOLUTIONS = ("approved", "rejected")


def _require_moderator(session: Session, user_id: str) -> None:
    user = UserDao().fetchUserById(session=session, user_id=user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if user.role not in MODERATOR_ROLES:
        raise HTTPException(status_code=403, detail="Not authorized")


@transactional
def list_moderation_queue(session: Session, user_id: str) -> List[dict]:
    """Flagged or pending posts, most recently updated first (moderators only)."""
    _require_moderator(session, user_id)
    return [moderation_dict(post) for post in PostDao().fetchModerationQueue(session=session)]


@transactional
def resolve_post(session: Session, post_id: str, user_id: str, status: Optional[str], note: Optional[str] = None) -> dict:
    """
    Approve or reject a queued post.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    post_id : str
        Post to resolve.
    user_id : str
        Acting moderator.
    status : str
        "approved" or "rejected".
    note : str | None
        Optional note, recorded as an edit-history entry by the moderator.

    Returns
    -------
    dict
        The full post, including its remaining flags.

    Raises
    ------
    HTTPException
        403 for non-moderators, 400 for any other status, 404 for unknown posts.
    """
    _require_moderator(session, user_id)
    if status not in RESOLUTIONS:
        raise HTTPException(status_code=400, detail="Invalid status")

    post = PostDao().fetchPostById(session=session, post_id=post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")

    post.moderation_status = status
    if status == "approved":
        post.flags = []
    if note and note.strip():
        post.edit_history = [
            *(post.edit_history or []),
            {"_id": new_id(), "editedBy": user_id, "editedAt": iso(utc_now()), "reason": note.strip()},
        ]
    logger.info(f"Post {post.id} {status} by moderator {user_id}")

    editor_ids = list(dict.fromkeys(entry.get("editedBy") for entry in post.edit_history or []))
    editors = UserDao().fetchUsersByIds(session=session, user_ids=[uid for uid in editor_ids if uid])
    payload = post_dict(post, editors)
    payload["flags"] = list(post.flags or [])
    return payload
