"""
Entity → JSON payload conversion.

Every API payload uses `_id` for identifiers and camelCase keys, and every
timestamp is an ISO-8601 UTC string. Referenced users are embedded as small
`{_id, name, email, avatar}` documents.

The functions here must run while the owning session is still open
(i.e. inside a `@transactional` service function), because they walk
relationships.
"""

from datetime import datetime
from typing import Dict, Iterable, Optional

from portal.database.entities.answer import Answer
from portal.database.entities.collection import Collection
from portal.database.entities.comment import Comment, ProjectComment
from portal.database.entities.community import Poll, Room
from portal.database.entities.post import Post
from portal.database.entities.project import Project
from portal.database.entities.user import User
from portal.database.helpers.defaults import as_utc


def iso(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 string in UTC, `Z` suffixed; None passes through."""
    value = as_utc(value)
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def user_ref(user: Optional[User]) -> Optional[dict]:
    """Embedded author / commenter reference."""
    if user is None:
        return None
    return {
        "_id": user.id,
        "name": user.name,
        "email": user.email,
        "username": user.username,
        "avatar": user.avatar or "",
    }


def user_dict(user: User) -> dict:
    """Full public profile; credentials are never included."""
    return {
        "_id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "username": user.username,
        "avatar": user.avatar or "",
        "bio": user.bio,
        "location": user.location,
        "website": user.website,
        "company": user.company,
        "jobTitle": user.job_title,
        "socials": dict(user.socials or {}),
        "skills": list(user.skills or []),
        "points": user.points or 0,
        "badges": list(user.badges or []),
        "followers": list(user.followers or []),
        "following": list(user.following or []),
        "bookmarks": list(user.bookmarks or []),
        "createdAt": iso(user.created_at),
    }


def auth_payload(user: User, token: str, include_rewards: bool = False) -> dict:
    """
    Response body of the login / register / Google endpoints.

    Parameters
    ----------
    user : User
        Authenticated user.
    token : str
        Freshly issued bearer token.
    include_rewards : bool
        Also return `points` and `badges` (Google sign-in does).
    """
    payload = {
        "_id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "avatar": user.avatar or "",
        "token": token,
    }
    if include_rewards:
        payload["points"] = user.points or 0
        payload["badges"] = list(user.badges or [])
    return payload


def answer_dict(answer: Answer) -> dict:
    votes = answer.votes or {}
    return {
        "_id": answer.id,
        "content": answer.content,
        "author": user_ref(answer.author),
        "votes": {"up": list(votes.get("up", [])), "down": list(votes.get("down", []))},
        "isAccepted": bool(answer.is_accepted),
        "acceptedAt": iso(answer.accepted_at),
        "createdAt": iso(answer.created_at),
    }


def comment_dict(comment: Comment | ProjectComment) -> dict:
    return {
        "_id": comment.id,
        "text": comment.text,
        "user": user_ref(comment.user),
        "createdAt": iso(comment.created_at),
    }


def edit_entry_dict(entry: dict, editors: Dict[str, User]) -> dict:
    editor = editors.get(entry.get("editedBy"))
    return {
        "_id": entry.get("_id"),
        "editedBy": user_ref(editor) if editor else {"_id": entry.get("editedBy")},
        "editedAt": entry.get("editedAt"),
        "reason": entry.get("reason"),
        "changes": entry.get("changes"),
    }


def post_summary_dict(post: Post) -> dict:
    """
    Feed representation of a post.

    Heavy fields (content, edit history, moderation flags) are left out.
    """
    return {
        "_id": post.id,
        "title": post.title,
        "excerpt": post.excerpt,
        "author": user_ref(post.author),
        "type": post.type,
        "category": post.category,
        "tags": list(post.tags or []),
        "difficulty": post.difficulty,
        "visibility": post.visibility,
        "views": post.views or 0,
        "likes": list(post.likes or []),
        "bookmarks": list(post.bookmarks or []),
        "attachments": list(post.attachments or []),
        "acceptedAnswer": post.accepted_answer_id,
        "isEdited": bool(post.is_edited),
        "summary": dict(post.summary or {"status": "idle"}),
        "readingTime": post.reading_time,
        "slug": post.slug,
        "moderationStatus": post.moderation_status,
        "answersCount": len(post.answers),
        "commentsCount": len(post.comments),
        "createdAt": iso(post.created_at),
        "updatedAt": iso(post.updated_at),
    }


def post_dict(post: Post, editors: Iterable[User] = ()) -> dict:
    """
    Full post aggregate as returned by `GET /posts/:id`.

    Parameters
    ----------
    post : Post
        Post entity (answers and comments are loaded through relationships).
    editors : Iterable[User]
        Users referenced by the edit history, used to embed `editedBy`.
    """
    editor_map = {user.id: user for user in editors}
    payload = post_summary_dict(post)
    payload.update(
        {
            "content": post.content,
            "answers": [answer_dict(answer) for answer in post.answers],
            "comments": [comment_dict(comment) for comment in post.comments],
            "editHistory": [edit_entry_dict(entry, editor_map) for entry in (post.edit_history or [])],
        }
    )
    return payload


def moderation_dict(post: Post) -> dict:
    """Queue entry for moderators: the feed fields plus the raw flags."""
    payload = post_summary_dict(post)
    payload["flags"] = list(post.flags or [])
    return payload


def collection_dict(collection: Collection) -> dict:
    return {
        "_id": collection.id,
        "name": collection.name,
        "description": collection.description or "",
        "posts": list(collection.posts or []),
        "isPublic": bool(collection.is_public),
        "createdAt": iso(collection.created_at),
    }


def poll_dict(poll: Poll) -> dict:
    return {
        "_id": poll.id,
        "question": poll.question,
        "author": user_ref(poll.author),
        "options": [
            {"text": option.get("text", ""), "votes": list(option.get("votes", []))}
            for option in (poll.options or [])
        ],
        "expiresAt": iso(poll.expires_at),
        "isActive": bool(poll.is_active),
        "createdAt": iso(poll.created_at),
    }


def room_dict(room: Room) -> dict:
    members = list(room.members or [])
    return {
        "_id": room.id,
        "name": room.name,
        "description": room.description or "",
        "icon": room.icon,
        "topics": list(room.topics or []),
        "members": members,
        "memberCount": len(members),
        "createdAt": iso(room.created_at),
    }


def project_dict(project: Project, with_comments: bool = True) -> dict:
    payload = {
        "_id": project.id,
        "title": project.title,
        "description": project.description,
        "coverImage": project.cover_image,
        "galleryImages": list(project.gallery_images or []),
        "repoLink": project.repo_link,
        "demoLink": project.demo_link,
        "tags": list(project.tags or []),
        "author": user_ref(project.author),
        "likes": list(project.likes or []),
        "views": project.views or 0,
        "isFeatured": bool(project.is_featured),
        "createdAt": iso(project.created_at),
    }
    if with_comments:
        payload["comments"] = [comment_dict(comment) for comment in project.comments]
    return payload
