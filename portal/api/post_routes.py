"""
FastAPI Router: Posts, Answers, Comments, AI Summaries
=======================================================

Endpoints
---------
- GET    /posts                                feed (search, category, sort, author, page, limit)
- POST   /posts                                create a post (201)
- GET    /posts/{id}                           full post aggregate (counts a view)
- PUT    /posts/{id}                           author edit, recorded in the edit history
- DELETE /posts/{id}                           author delete
- PUT    /posts/{id}/like                      toggle like → likes list
- PUT    /posts/{id}/bookmark                  toggle bookmark → {isBookmarked, bookmarksCount}
- POST   /posts/{id}/report                    report → {message, moderationStatus}
- POST   /posts/{id}/summary                   generate the AI summary → summary document
- POST   /posts/{id}/comment                   add comment → comments list
- DELETE /posts/{id}/comment/{comment_id}      delete own comment → comments list
- POST   /posts/{id}/answers                   add answer → answers list
- PUT    /posts/{id}/answers/{answer_id}/accept  accept (question author only) → answers list
- PUT    /posts/{id}/answers/{answer_id}/vote    vote up / down → answer

Key Notes
---------
- Mutating endpoints require a bearer token (`get_current_user`); the feed
  and the detail view accept anonymous callers (`get_optional_user`).
- The summary endpoint drives the summary state: it is stored as
  `processing` before the model is called, then `ready` or `error`.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from portal.api.models import AnswerDetails, CommentDetails, PostDetails, PostUpdateDetails, ReportDetails, VoteDetails
from portal.api.summary_pipeline import SummaryPipeline, get_summary_pipeline
from portal.api.utils import get_current_user, get_optional_user
from portal.database.core.post_funcs import (
    accept_answer,
    add_answer,
    add_comment,
    begin_summary,
    complete_summary,
    create_post,
    delete_comment,
    delete_post,
    fail_summary,
    get_post,
    like_post,
    list_posts,
    report_post,
    toggle_bookmark,
    update_post,
    vote_answer,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])
"""Creates the FastAPI router in which we define its routes"""


@router.get("")
def feed(
    search: Optional[str] = None,
    category: Optional[str] = None,
    sort: Optional[str] = None,
    author: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    viewer_id: Optional[str] = Depends(get_optional_user),
):
    """List posts visible to the caller, newest first unless `sort` says otherwise."""
    return list_posts(
        viewer_id=viewer_id,
        search=search,
        category=category,
        sort=sort,
        author=author,
        page=page,
        limit=limit,
    )


@router.post("", status_code=201)
def new_post(data: PostDetails, user_id: str = Depends(get_current_user)):
    return create_post(user_id=user_id, data=data.model_dump())


@router.get("/{post_id}")
def post_detail(post_id: str, viewer_id: Optional[str] = Depends(get_optional_user)):
    return get_post(post_id=post_id, viewer_id=viewer_id)


@router.put("/{post_id}")
def edit_post(post_id: str, data: PostUpdateDetails, user_id: str = Depends(get_current_user)):
    """Apply the fields present in the body; absent fields are left untouched."""
    return update_post(post_id=post_id, user_id=user_id, fields=data.model_dump(exclude_unset=True))


@router.delete("/{post_id}")
def remove_post(post_id: str, user_id: str = Depends(get_current_user)):
    return delete_post(post_id=post_id, user_id=user_id)


@router.put("/{post_id}/like")
def like(post_id: str, user_id: str = Depends(get_current_user)):
    return like_post(post_id=post_id, user_id=user_id)


@router.put("/{post_id}/bookmark")
def bookmark(post_id: str, user_id: str = Depends(get_current_user)):
    return toggle_bookmark(post_id=post_id, user_id=user_id)


@router.post("/{post_id}/report")
def report(post_id: str, data: ReportDetails, user_id: str = Depends(get_current_user)):
    return report_post(post_id=post_id, user_id=user_id, reason=data.reason, description=data.description)


@router.post("/{post_id}/summary")
def summary(
    post_id: str,
    user_id: str = Depends(get_current_user),
    pipeline: SummaryPipeline = Depends(get_summary_pipeline),
):
    """Generate (or regenerate) the AI summary of a post.

    Responses:
        200: {'status': 'ready', 'tldr', 'keyTakeaways', 'model', 'generatedAt'}
        404: unknown post
        500: {'message': 'Failed to generate summary'} (summary stored as error)
        501: {'message': 'AI summaries are not configured'}
    """
    source = begin_summary(post_id=post_id)
    try:
        result = pipeline.summarize(source["title"], source["content"])
    except Exception as e:
        logger.error(f"Summary generation failed for post {post_id}: {e}")
        fail_summary(post_id=post_id, error=str(e) or "Failed to generate summary")
        raise HTTPException(status_code=500, detail="Failed to generate summary")
    return complete_summary(
        post_id=post_id,
        tldr=result["tldr"],
        key_takeaways=result["keyTakeaways"],
        model=pipeline.model_name,
    )


@router.post("/{post_id}/comment")
def comment(post_id: str, data: CommentDetails, user_id: str = Depends(get_current_user)):
    return add_comment(post_id=post_id, user_id=user_id, text=data.text)


@router.delete("/{post_id}/comment/{comment_id}")
def remove_comment(post_id: str, comment_id: str, user_id: str = Depends(get_current_user)):
    return delete_comment(post_id=post_id, comment_id=comment_id, user_id=user_id)


@router.post("/{post_id}/answers")
def answer(post_id: str, data: AnswerDetails, user_id: str = Depends(get_current_user)):
    return add_answer(post_id=post_id, user_id=user_id, content=data.content)


@router.put("/{post_id}/answers/{answer_id}/accept")
def accept(post_id: str, answer_id: str, user_id: str = Depends(get_current_user)):
    return accept_answer(post_id=post_id, answer_id=answer_id, user_id=user_id)


@router.put("/{post_id}/answers/{answer_id}/vote")
def vote(post_id: str, answer_id: str, data: VoteDetails, user_id: str = Depends(get_current_user)):
    return vote_answer(post_id=post_id, answer_id=answer_id, user_id=user_id, direction=data.type)
