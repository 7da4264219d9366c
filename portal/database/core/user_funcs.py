"""
Service-layer operations for member profiles, the follow graph, bookmarks
and collections.

All functions are wrapped with the `@transactional` decorator and must be
called with keyword arguments; the session is injected by the decorator.
"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from portal.database.core.serializers import collection_dict, post_summary_dict, user_dict, user_ref
from portal.database.daos.collection_dao import CollectionDao
from portal.database.daos.post_dao import PostDao
from portal.database.daos.user_dao import UserDao
from portal.database.entities.collection import Collection
from portal.database.entities.user import User
from portal.database.helpers.defaults import as_utc, utc_now
from portal.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

PROFILE_FIELDS = {
    "name": "name",
    "username": "username",
    "bio": "bio",
    "location": "location",
    "website": "website",
    "company": "company",
    "jobTitle": "job_title",
    "socials": "socials",
    "skills": "skills",
}
"""Editable profile keys (API name → column). Credentials are never editable here."""


def _fetch_user(session: Session, user_id: str) -> User:
    user = UserDao().fetchUserById(session=session, user_id=user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _fetch_collection(session: Session, user_id: str, collection_id: str) -> Collection:
    collection = CollectionDao().fetchUserCollection(session=session, user_id=user_id, collection_id=collection_id)
    if collection is None:
        raise HTTPException(status_code=404, detail="Collection not found")
    return collection


@transactional
def get_profile(session: Session, user_id: str) -> dict:
    """
    Public profile with populated social graph and the five latest posts.

    Returns
    -------
    dict
        `{"user": {..., "stats": {"joinedDaysAgo": int}}, "recentPosts": [...]}`;
        `followers` / `following` are embedded user references.
    """
    user_dao = UserDao()
    user = _fetch_user(session, user_id)

    payload = user_dict(user)
    payload["followers"] = [user_ref(u) for u in user_dao.fetchUsersByIds(session=session, user_ids=list(user.followers or []))]
    payload["following"] = [user_ref(u) for u in user_dao.fetchUsersByIds(session=session, user_ids=list(user.following or []))]
    joined = as_utc(user.created_at) or utc_now()
    payload["stats"] = {"joinedDaysAgo": (utc_now() - joined).days}

    recent = PostDao().fetchRecentPostsByAuthor(session=session, author_id=user.id, limit=5)
    return {"user": payload, "recentPosts": [post_summary_dict(post) for post in recent]}


@transactional
def update_profile(session: Session, user_id: str, updates: dict) -> dict:
    """Apply whitelisted profile updates; `password` and `email` are ignored."""
    user = _fetch_user(session, user_id)
    for api_name, column in PROFILE_FIELDS.items():
        if api_name in updates and updates[api_name] is not None:
            setattr(user, column, updates[api_name])
    return {"user": user_dict(user)}


@transactional
def update_avatar(session: Session, user_id: str, avatar_url: str) -> dict:
    user = _fetch_user(session, user_id)
    user.avatar = avatar_url
    return {"user": user_dict(user), "avatarUrl": avatar_url}


@transactional
def toggle_follow(session: Session, user_id: str, target_id: str) -> dict:
    """
    Follow or unfollow `target_id`.

    Returns
    -------
    dict
        `{isFollowing, followersCount}` from the target's point of view.

    Raises
    ------
    HTTPException
        400 when following yourself, 404 for unknown users.
    """
    if user_id == target_id:
        raise HTTPException(status_code=400, detail="Cannot follow yourself")
    target = _fetch_user(session, target_id)
    current = _fetch_user(session, user_id)

    is_following = user_id in (target.followers or [])
    if is_following:
        target.followers = [follower for follower in target.followers if follower != user_id]
        current.following = [followed for followed in (current.following or []) if followed != target_id]
    else:
        target.followers = [*(target.followers or []), user_id]
        current.following = [*(current.following or []), target_id]

    return {"isFollowing": not is_following, "followersCount": len(target.followers)}


@transactional
def get_bookmarks(session: Session, user_id: str, page: int = 1, limit: int = 50) -> dict:
    """
    The caller's bookmarked posts in the order they were saved.

    Returns
    -------
    dict
        `{"bookmarks": [post, ...], "total": int}`; bookmarks pointing at
        deleted posts are skipped.
    """
    user = _fetch_user(session, user_id)
    posts = PostDao().fetchPostsByIds(session=session, post_ids=list(user.bookmarks or []))
    page, limit = max(page, 1), max(limit, 1)
    paged = posts[(page - 1) * limit: page * limit]
    return {"bookmarks": [post_summary_dict(post) for post in paged], "total": len(posts)}


@transactional
def list_collections(session: Session, user_id: str) -> dict:
    collections = CollectionDao().fetchCollectionsByUser(session=session, user_id=user_id)
    return {"collections": [collection_dict(collection) for collection in collections]}


@transactional
def get_collection(session: Session, user_id: str, collection_id: str) -> dict:
    """A single collection with its posts expanded into `postDetails`."""
    collection = _fetch_collection(session, user_id, collection_id)
    payload = collection_dict(collection)
    posts = PostDao().fetchPostsByIds(session=session, post_ids=list(collection.posts or []))
    payload["postDetails"] = [post_summary_dict(post) for post in posts]
    return {"collection": payload}


@transactional
def create_collection(
    session: Session,
    user_id: str,
    name: Optional[str],
    description: Optional[str] = None,
    is_public: bool = False,
) -> dict:
    """
    Create a collection and return every collection of the user.

    Raises
    ------
    HTTPException
        400 'Collection name is required' for a blank name.
    """
    if not name or not name.strip():
        raise HTTPException(status_code=400, detail="Collection name is required")
    collection_dao = CollectionDao()
    collection_dao.createCollection(
        session=session,
        collection=Collection(
            user_id=user_id,
            name=name.strip(),
            description=description or "",
            is_public=bool(is_public),
            posts=[],
        ),
    )
    collections = collection_dao.fetchCollectionsByUser(session=session, user_id=user_id)
    return {"collections": [collection_dict(collection) for collection in collections]}


@transactional
def update_collection(session: Session, user_id: str, collection_id: str, updates: dict) -> dict:
    collection = _fetch_collection(session, user_id, collection_id)
    if updates.get("name") is not None:
        collection.name = updates["name"]
    if updates.get("description") is not None:
        collection.description = updates["description"]
    if updates.get("isPublic") is not None:
        collection.is_public = bool(updates["isPublic"])
    return {"collection": collection_dict(collection)}


@transactional
def delete_collection(session: Session, user_id: str, collection_id: str) -> dict:
    collection_dao = CollectionDao()
    collection = _fetch_collection(session, user_id, collection_id)
    collection_dao.deleteCollection(session=session, collection=collection)
    collections = collection_dao.fetchCollectionsByUser(session=session, user_id=user_id)
    return {"collections": [collection_dict(item) for item in collections]}


@transactional
def add_post_to_collection(session: Session, user_id: str, collection_id: str, post_id: Optional[str]) -> dict:
    """Add a post id (no duplicates) and return the collection."""
    if not post_id:
        raise HTTPException(status_code=400, detail="postId is required")
    collection = _fetch_collection(session, user_id, collection_id)
    if post_id not in (collection.posts or []):
        collection.posts = [*(collection.posts or []), post_id]
    return {"collection": collection_dict(collection)}


@transactional
def remove_post_from_collection(session: Session, user_id: str, collection_id: str, post_id: str) -> dict:
    collection = _fetch_collection(session, user_id, collection_id)
    collection.posts = [saved for saved in (collection.posts or []) if saved != post_id]
    return {"collection": collection_dict(collection)}


@transactional
def user_exists(session: Session, user_id: str) -> bool:
    """True when an account with `user_id` exists (token subjects are checked against it)."""
    return UserDao().fetchUserById(session=session, user_id=user_id) is not None
