"""
FastAPI Router: Project gallery
================================

Endpoints
---------
- GET  /projects                  gallery (tag filter, sort=newest|oldest|popular)
- POST /projects                  showcase a project (201)
- GET  /projects/{id}             detail with comments (counts a view)
- PUT  /projects/{id}/like        toggle like → likes list
- POST /projects/{id}/comments    add comment → comments list
"""

from typing import Optional

from fastapi import APIRouter, Depends

from portal.api.models import CommentDetails, ProjectDetails
from portal.api.utils import get_current_user
from portal.database.core.project_funcs import add_project_comment, create_project, get_project, like_project, list_projects

router = APIRouter(prefix="/projects", tags=["projects"])
"""Creates the FastAPI router in which we define its routes"""


@router.get("")
def gallery(tag: Optional[str] = None, sort: Optional[str] = None):
    return list_projects(tag=tag, sort=sort)


@router.post("", status_code=201)
def new_project(data: ProjectDetails, user_id: str = Depends(get_current_user)):
    return create_project(user_id=user_id, data=data.model_dump())


@router.get("/{project_id}")
def project_detail(project_id: str):
    return get_project(project_id=project_id)


@router.put("/{project_id}/like")
def like(project_id: str, user_id: str = Depends(get_current_user)):
    return like_project(project_id=project_id, user_id=user_id)


@router.post("/{project_id}/comments")
def comment(project_id: str, data: CommentDetails, user_id: str = Depends(get_current_user)):
    return add_project_comment(project_id=project_id, user_id=user_id, text=data.text)
