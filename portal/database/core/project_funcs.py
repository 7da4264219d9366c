"""
Service-layer operations for the project gallery.

All functions are wrapped with the `@transactional` decorator and must be
called with keyword arguments.
"""

from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from portal.database.core.serializers import comment_dict, project_dict
from portal.database.daos.answer_dao import CommentDao
from portal.database.daos.project_dao import ProjectDao
from portal.database.entities.comment import ProjectComment
from portal.database.entities.project import Project
from portal.database.helpers.transactionManagement import transactional


def _fetch_project(session: Session, project_id: str) -> Project:
    project = ProjectDao().fetchProjectById(session=session, project_id=project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@transactional
def create_project(session: Session, user_id: str, data: dict) -> dict:
    """
    Publish a project.

    Raises
    ------
    HTTPException
        400 when title, description or cover image is missing.
    """
    if not data.get("title") or not data.get("description") or not data.get("coverImage"):
        raise HTTPException(status_code=400, detail="Title, description, and cover image are required")
    project = Project(
        title=data["title"],
        description=data["description"],
        cover_image=data["coverImage"],
        gallery_images=list(data.get("galleryImages") or []),
        repo_link=data.get("repoLink"),
        demo_link=data.get("demoLink"),
        tags=list(data.get("tags") or []),
        author_id=user_id,
    )
    ProjectDao().createProject(session=session, project=project)
    return project_dict(project)


@transactional
def list_projects(session: Session, tag: Optional[str] = None, sort: Optional[str] = None) -> List[dict]:
    projects = ProjectDao().fetchProjects(session=session, tag=tag, sort=sort)
    return [project_dict(project, with_comments=False) for project in projects]


@transactional
def get_project(session: Session, project_id: str) -> dict:
    """Project detail with comments; every call counts a view."""
    project = _fetch_project(session, project_id)
    project.views = (project.views or 0) + 1
    return project_dict(project)


@transactional
def like_project(session: Session, project_id: str, user_id: str) -> List[str]:
    project = _fetch_project(session, project_id)
    likes = list(project.likes or [])
    if user_id in likes:
        likes = [liker for liker in likes if liker != user_id]
    else:
        likes.append(user_id)
    project.likes = likes
    return likes


@transactional
def add_project_comment(session: Session, project_id: str, user_id: str, text: Optional[str]) -> List[dict]:
    """Append a comment and return the project's full comment list."""
    project = _fetch_project(session, project_id)
    if not text or not text.strip():
        raise HTTPException(status_code=400, detail="Comment text is required")
    comment_dao = CommentDao()
    comment_dao.createProjectComment(
        session=session,
        comment=ProjectComment(project_id=project.id, user_id=user_id, text=text),
    )
    return [comment_dict(comment) for comment in comment_dao.fetchCommentsByProject(session=session, project_id=project.id)]
