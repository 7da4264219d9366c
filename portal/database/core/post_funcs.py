"""
Service-layer operations for posts, answers and comments.

All functions are wrapped with the `@transactional` decorator, which manages
SQLAlchemy sessions and transactions automatically. Each function accepts
(and uses) an injected `session: Session` provided by the decorator, must be
called with keyword arguments, and returns JSON-ready dicts / lists built by
`portal.database.core.serializers`.

Business rules
--------------
- Only the author may edit or delete a post, accept an answer, or delete
  their own comment (401 otherwise).
- A post whose title or content contains a blocked term (settings
  `CONTENT_FILTER_WORDS`) is moved to the moderation queue (`pending`) and
  auto-flagged, both on creation and on edit.
- Every edit that changes at least one tracked field appends an
  edit-history entry whose `changes` is a JSON string of
  `{field: {"from": old, "to": new}}`; long content is trimmed to 1200
  characters in that record.
- At most one answer per question is accepted at any time.
- A voter appears in at most one of an answer's `up` / `down` lists.
"""

import json
import logging
import math
import re
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from portal.database.config.config import settings
from portal.database.core.serializers import (
    answer_dict,
    comment_dict,
    iso,
    post_dict,
    post_summary_dict,
)
from portal.database.daos.answer_dao import AnswerDao, CommentDao
from portal.database.daos.post_dao import PostDao
from portal.database.daos.user_dao import UserDao
from portal.database.entities.answer import Answer
from portal.database.entities.comment import Comment
from portal.database.entities.post import Post
from portal.database.helpers.defaults import new_id, utc_now
from portal.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

REPORT_REASONS = ("spam", "inappropriate", "duplicate", "off-topic", "other")
TRACKED_FIELDS = ("title", "content", "category", "visibility", "type", "difficulty")
CHANGE_TEXT_LIMIT = 1200
WORDS_PER_MINUTE = 200


def find_blocked_term(text: str) -> Optional[str]:
    """Return the first configured blocked term contained in `text`, if any."""
    normalized = text.lower()
    for term in settings.blocked_terms():
        if term in normalized:
            return term
    return None


def make_slug(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug[:50]


def make_excerpt(content: str) -> str:
    return re.sub(r"<[^>]*>", "", content[:300]) + "..."


def estimate_reading_time(content: str) -> int:
    return max(1, math.ceil(len(content.split()) / WORDS_PER_MINUTE))


def parse_tags(tags) -> Optional[List[str]]:
    """
    Normalise a tags value: lists pass through, comma strings are split.

    Returns None for anything else so callers can keep the current tags.
    """
    if isinstance(tags, list):
        return [str(tag).strip() for tag in tags if str(tag).strip()]
    if isinstance(tags, str):
        return [tag.strip() for tag in tags.split(",") if tag.strip()]
    return None


def _trim(value):
    if isinstance(value, str) and len(value) > CHANGE_TEXT_LIMIT:
        return value[:CHANGE_TEXT_LIMIT] + "..."
    return value


def _auto_flag(post: Post, user_id: str) -> None:
    blocked = find_blocked_term(f"{post.title} {post.content}")
    if blocked:
        logger.info(f"Post {post.id} auto-flagged for term {blocked!r}")
        post.moderation_status = "pending"
        post.flags = [
            *(post.flags or []),
            {
                "user": user_id,
                "reason": "inappropriate",
                "description": f'Auto-flagged term: "{blocked}"',
                "createdAt": iso(utc_now()),
            },
        ]


def _fetch_post(session: Session, post_id: str) -> Post:
    post = PostDao().fetchPostById(session=session, post_id=post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


def _require_author(post: Post, user_id: str, detail: str = "Not authorized") -> None:
    if post.author_id != user_id:
        raise HTTPException(status_code=401, detail=detail)


def _full_payload(session: Session, post: Post) -> dict:
    editor_ids = list(dict.fromkeys(entry.get("editedBy") for entry in (post.edit_history or [])))
    editors = UserDao().fetchUsersByIds(session=session, user_ids=[uid for uid in editor_ids if uid])
    return post_dict(post, editors)


@transactional
def create_post(session: Session, user_id: str, data: dict) -> dict:
    """
    Create a post authored by `user_id`.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    user_id : str
        Author id.
    data : dict
        title, content, category (required) plus optional tags, type,
        difficulty, visibility and attachments.

    Returns
    -------
    dict
        The created post.

    Raises
    ------
    HTTPException
        400 when title, content or category is missing.
    """
    title = (data.get("title") or "").strip()
    content = data.get("content") or ""
    category = (data.get("category") or "").strip()
    if not title or not content.strip() or not category:
        raise HTTPException(status_code=400, detail="Title, content, and category are required")

    post = Post(
        id=new_id(),
        title=title,
        content=content,
        excerpt=make_excerpt(content),
        slug=make_slug(title),
        reading_time=estimate_reading_time(content),
        author_id=user_id,
        category=category,
        tags=parse_tags(data.get("tags")) or [],
        type=data.get("type") or "article",
        difficulty=data.get("difficulty") or "Beginner",
        visibility=data.get("visibility") or "public",
        attachments=list(data.get("attachments") or []),
        moderation_status="approved",
        flags=[],
    )
    _auto_flag(post, user_id)
    PostDao().createPost(session=session, post=post)
    return _full_payload(session, post)


@transactional
def list_posts(
    session: Session,
    viewer_id: Optional[str] = None,
    search: Optional[str] = None,
    category: Optional[str] = None,
    sort: Optional[str] = None,
    author: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> List[dict]:
    """
    Feed listing with visibility and moderation filters.

    `author="me"` resolves to the viewer and is ignored for anonymous
    callers.
    """
    following: List[str] = []
    if viewer_id:
        viewer = UserDao().fetchUserById(session=session, user_id=viewer_id)
        following = list(viewer.following or []) if viewer else []

    author_id = None
    if author == "me":
        author_id = viewer_id
    elif author:
        author_id = author

    posts = PostDao().fetchFeed(
        session=session,
        viewer_id=viewer_id,
        viewer_following=following,
        search=search,
        category=category,
        author_id=author_id,
        sort=sort,
        page=max(page, 1),
        limit=max(limit, 1),
    )
    return [post_summary_dict(post) for post in posts]


@transactional
def get_post(session: Session, post_id: str, viewer_id: Optional[str] = None) -> dict:
    """
    Fetch the full post aggregate and count the view.

    Every call increments `views`; signed-in viewers are also recorded once
    in `unique_viewers`.
    """
    post = _fetch_post(session, post_id)
    post.views = (post.views or 0) + 1
    if viewer_id and viewer_id not in (post.unique_viewers or []):
        post.unique_viewers = [*(post.unique_viewers or []), viewer_id]
    return _full_payload(session, post)


@transactional
def update_post(session: Session, post_id: str, user_id: str, fields: dict) -> dict:
    """
    Apply an author edit and record it in the edit history.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    post_id : str
        Post to edit.
    user_id : str
        Editing user; must be the author.
    fields : dict
        Only the keys the client sent. Recognised keys: title, content,
        category, visibility, type, difficulty, tags (list or comma string),
        attachments, editReason.

    Returns
    -------
    dict
        The full updated post.
    """
    post = _fetch_post(session, post_id)
    _require_author(post, user_id)

    changes = {}
    for field in TRACKED_FIELDS:
        if field in fields and fields[field] is not None and fields[field] != getattr(post, field):
            changes[field] = {"from": _trim(getattr(post, field)), "to": _trim(fields[field])}

    next_tags = parse_tags(fields.get("tags")) if "tags" in fields else None
    if next_tags is not None and next_tags != list(post.tags or []):
        changes["tags"] = {"from": list(post.tags or []), "to": next_tags}

    for field in TRACKED_FIELDS:
        if field in fields and fields[field] is not None:
            setattr(post, field, fields[field])
    if next_tags is not None:
        post.tags = next_tags
    if fields.get("attachments") is not None:
        post.attachments = list(fields["attachments"])

    if "title" in changes and not post.slug:
        post.slug = make_slug(post.title)
    if "content" in changes:
        post.reading_time = estimate_reading_time(post.content)
        post.excerpt = make_excerpt(post.content)

    _auto_flag(post, user_id)

    if changes:
        now = utc_now()
        post.is_edited = True
        post.updated_at = now
        post.edit_history = [
            *(post.edit_history or []),
            {
                "_id": new_id(),
                "editedBy": user_id,
                "editedAt": iso(now),
                "reason": fields.get("editReason") or "Updated post",
                "changes": json.dumps(changes),
            },
        ]
        logger.info(f"Post {post.id} edited by {user_id} ({', '.join(changes)})")

    return _full_payload(session, post)


@transactional
def delete_post(session: Session, post_id: str, user_id: str) -> dict:
    post = _fetch_post(session, post_id)
    _require_author(post, user_id)
    PostDao().deletePost(session=session, post=post)
    return {"message": "Post removed"}


@transactional
def like_post(session: Session, post_id: str, user_id: str) -> List[str]:
    """Toggle the caller's like and return the new likes list."""
    post = _fetch_post(session, post_id)
    likes = list(post.likes or [])
    if user_id in likes:
        likes = [liker for liker in likes if liker != user_id]
    else:
        likes.append(user_id)
    post.likes = likes
    return likes


@transactional
def toggle_bookmark(session: Session, post_id: str, user_id: str) -> dict:
    """
    Toggle a bookmark on both sides (user.bookmarks and post.bookmarks).

    Returns
    -------
    dict
        `{isBookmarked, bookmarksCount}` after the toggle.
    """
    user = UserDao().fetchUserById(session=session, user_id=user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    post = _fetch_post(session, post_id)

    was_bookmarked = post_id in (user.bookmarks or [])
    if was_bookmarked:
        user.bookmarks = [saved for saved in user.bookmarks if saved != post_id]
        post.bookmarks = [saver for saver in (post.bookmarks or []) if saver != user_id]
    else:
        user.bookmarks = [*(user.bookmarks or []), post_id]
        post.bookmarks = [*(post.bookmarks or []), user_id]

    return {"isBookmarked": not was_bookmarked, "bookmarksCount": len(post.bookmarks)}


@transactional
def report_post(session: Session, post_id: str, user_id: str, reason: Optional[str], description: Optional[str]) -> dict:
    """
    Record a user report and send the post to the moderation queue.

    Unknown reasons are recorded as "other".
    """
    post = _fetch_post(session, post_id)
    normalized = reason.strip().lower() if isinstance(reason, str) else "other"
    safe_reason = normalized if normalized in REPORT_REASONS else "other"
    post.flags = [
        *(post.flags or []),
        {"user": user_id, "reason": safe_reason, "description": description or "", "createdAt": iso(utc_now())},
    ]
    post.moderation_status = "pending"
    logger.info(f"Post {post.id} reported ({safe_reason})")
    return {"message": "Report received", "moderationStatus": post.moderation_status}


@transactional
def begin_summary(session: Session, post_id: str) -> dict:
    """
    Mark a post's summary as processing and return the text to summarise.

    Raises
    ------
    HTTPException
        404 for unknown posts, 501 when no model API key is configured.
    """
    post = _fetch_post(session, post_id)
    if not settings.API_KEY:
        raise HTTPException(status_code=501, detail="AI summaries are not configured")
    post.summary = {"status": "processing"}
    return {"title": post.title, "content": post.content}


@transactional
def complete_summary(session: Session, post_id: str, tldr: str, key_takeaways: List[str], model: str) -> dict:
    """Store a ready summary and return it."""
    post = _fetch_post(session, post_id)
    post.summary = {
        "status": "ready",
        "tldr": tldr,
        "keyTakeaways": list(key_takeaways),
        "model": model,
        "generatedAt": iso(utc_now()),
    }
    return dict(post.summary)


@transactional
def fail_summary(session: Session, post_id: str, error: str) -> dict:
    """Store a failed summary with the error text and return it."""
    post = _fetch_post(session, post_id)
    post.summary = {"status": "error", "error": error}
    return dict(post.summary)


@transactional
def add_comment(session: Session, post_id: str, user_id: str, text: Optional[str]) -> List[dict]:
    """Append a comment and return the post's full comment list."""
    post = _fetch_post(session, post_id)
    if not text or not text.strip():
        raise HTTPException(status_code=400, detail="Comment text is required")
    comment_dao = CommentDao()
    comment_dao.createComment(session=session, comment=Comment(post_id=post.id, user_id=user_id, text=text))
    return [comment_dict(comment) for comment in comment_dao.fetchCommentsByPost(session=session, post_id=post.id)]


@transactional
def delete_comment(session: Session, post_id: str, comment_id: str, user_id: str) -> List[dict]:
    """Delete the caller's own comment and return the remaining comments."""
    post = _fetch_post(session, post_id)
    comment_dao = CommentDao()
    comment = comment_dao.fetchComment(session=session, post_id=post.id, comment_id=comment_id)
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    if comment.user_id != user_id:
        raise HTTPException(status_code=401, detail="Not authorized")
    comment_dao.deleteComment(session=session, comment=comment)
    return [comment_dict(item) for item in comment_dao.fetchCommentsByPost(session=session, post_id=post.id)]


@transactional
def add_answer(session: Session, post_id: str, user_id: str, content: Optional[str]) -> List[dict]:
    """Append one answer and return the question's full answer list."""
    post = _fetch_post(session, post_id)
    if not content or not content.strip():
        raise HTTPException(status_code=400, detail="Answer content is required")
    answer_dao = AnswerDao()
    answer_dao.createAnswer(session=session, answer=Answer(post_id=post.id, author_id=user_id, content=content))
    return [answer_dict(answer) for answer in answer_dao.fetchAnswersByPost(session=session, post_id=post.id)]


@transactional
def accept_answer(session: Session, post_id: str, answer_id: str, user_id: str) -> List[dict]:
    """
    Accept one answer, clearing any previous acceptance.

    Raises
    ------
    HTTPException
        401 when the caller is not the question's author, 404 for unknown ids.
    """
    post = _fetch_post(session, post_id)
    _require_author(post, user_id, detail="Only the author can accept an answer")

    answer_dao = AnswerDao()
    chosen = answer_dao.fetchAnswer(session=session, post_id=post.id, answer_id=answer_id)
    if chosen is None:
        raise HTTPException(status_code=404, detail="Answer not found")

    answers = answer_dao.fetchAnswersByPost(session=session, post_id=post.id)
    for answer in answers:
        if answer.id == chosen.id:
            answer.is_accepted = True
            answer.accepted_at = utc_now()
        else:
            answer.is_accepted = False
            answer.accepted_at = None
    post.accepted_answer_id = chosen.id
    return [answer_dict(answer) for answer in answers]


@transactional
def vote_answer(session: Session, post_id: str, answer_id: str, user_id: str, direction: Optional[str]) -> dict:
    """
    Cast (or move) the caller's vote on an answer.

    The caller is first removed from both lists; `direction` "up" or "down"
    then adds them to that list. Any other value just clears the vote.
    """
    post = _fetch_post(session, post_id)
    answer = AnswerDao().fetchAnswer(session=session, post_id=post.id, answer_id=answer_id)
    if answer is None:
        raise HTTPException(status_code=404, detail="Answer not found")

    votes = answer.votes or {}
    up = [voter for voter in votes.get("up", []) if voter != user_id]
    down = [voter for voter in votes.get("down", []) if voter != user_id]
    if direction == "up":
        up.append(user_id)
    elif direction == "down":
        down.append(user_id)
    answer.votes = {"up": up, "down": down}
    return answer_dict(answer)
