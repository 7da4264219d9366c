"""
FastAPI Router: Users, Bookmarks, Collections
==============================================

Endpoints
---------
- GET    /users/bookmarks                              saved posts of the caller
- GET    /users/collections                            caller's collections
- POST   /users/collections                            create → {collections}
- GET    /users/collections/{cid}                      one collection with post details
- PUT    /users/collections/{cid}                      rename / describe / publish
- DELETE /users/collections/{cid}                      delete → {collections}
- POST   /users/collections/{cid}/posts                add a post → {collection}
- DELETE /users/collections/{cid}/posts/{post_id}      remove a post → {collection}
- PUT    /users/profile                                whitelisted profile update
- POST   /users/avatar                                 multipart `avatar` upload
- PUT    /users/{id}/follow                            toggle follow
- GET    /users/{id}                                   public profile + recent posts

Fixed paths are registered before `/{user_id}` so they are never captured
as a user id.
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from portal.api.models import CollectionDetails, CollectionPost, ProfileUpdate
from portal.api.uploads import classify, persist_upload
from portal.api.utils import get_current_user
from portal.database.core.user_funcs import (
    add_post_to_collection,
    create_collection,
    delete_collection,
    get_bookmarks,
    get_collection,
    get_profile,
    list_collections,
    remove_post_from_collection,
    toggle_follow,
    update_avatar,
    update_collection,
    update_profile,
)

router = APIRouter(prefix="/users", tags=["users"])
"""Creates the FastAPI router in which we define its routes"""


@router.get("/bookmarks")
def bookmarks(page: int = 1, limit: int = 50, user_id: str = Depends(get_current_user)):
    return get_bookmarks(user_id=user_id, page=page, limit=limit)


@router.get("/collections")
def collections(user_id: str = Depends(get_current_user)):
    return list_collections(user_id=user_id)


@router.post("/collections", status_code=201)
def new_collection(data: CollectionDetails, user_id: str = Depends(get_current_user)):
    return create_collection(
        user_id=user_id,
        name=data.name,
        description=data.description,
        is_public=bool(data.isPublic),
    )


@router.get("/collections/{collection_id}")
def collection(collection_id: str, user_id: str = Depends(get_current_user)):
    return get_collection(user_id=user_id, collection_id=collection_id)


@router.put("/collections/{collection_id}")
def edit_collection(collection_id: str, data: CollectionDetails, user_id: str = Depends(get_current_user)):
    return update_collection(user_id=user_id, collection_id=collection_id, updates=data.model_dump(exclude_unset=True))


@router.delete("/collections/{collection_id}")
def remove_collection(collection_id: str, user_id: str = Depends(get_current_user)):
    return delete_collection(user_id=user_id, collection_id=collection_id)


@router.post("/collections/{collection_id}/posts")
def collect_post(collection_id: str, data: CollectionPost, user_id: str = Depends(get_current_user)):
    return add_post_to_collection(user_id=user_id, collection_id=collection_id, post_id=data.postId)


@router.delete("/collections/{collection_id}/posts/{post_id}")
def uncollect_post(collection_id: str, post_id: str, user_id: str = Depends(get_current_user)):
    return remove_post_from_collection(user_id=user_id, collection_id=collection_id, post_id=post_id)


@router.put("/profile")
def profile(data: ProfileUpdate, user_id: str = Depends(get_current_user)):
    """Update the caller's profile; only whitelisted keys are applied."""
    return update_profile(user_id=user_id, updates=data.model_dump(exclude_unset=True))


@router.post("/avatar")
def avatar(avatar: UploadFile = File(None), user_id: str = Depends(get_current_user)):
    """
    Replace the caller's avatar.

    Responses:
        200: {'user', 'avatarUrl'}
        400: {'message': 'No file uploaded'} or a non-image file
    """
    if avatar is None or not avatar.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if classify(avatar) != "image":
        raise HTTPException(status_code=400, detail="Avatar must be an image")
    stored = persist_upload(avatar)
    return update_avatar(user_id=user_id, avatar_url=stored.url)


@router.put("/{target_id}/follow")
def follow(target_id: str, user_id: str = Depends(get_current_user)):
    return toggle_follow(user_id=user_id, target_id=target_id)


@router.get("/{target_id}")
def public_profile(target_id: str):
    return get_profile(user_id=target_id)
