"""
Project DAO

Purpose
-------
Data-access layer for the project gallery:
- Create a project, fetch one by id
- List projects with an optional tag filter and a sort key
  ("popular" = most viewed, "oldest", anything else newest first)

Error Handling
--------------
- Methods catch generic `Exception`, log the error, and re-raise.
"""

import logging
from typing import List, Optional

from sqlalchemy import asc, desc
from sqlalchemy.orm import Session

from portal.database.entities.project import Project

logger = logging.getLogger(__name__)


class ProjectDao:
    """
    Data Access Object (DAO) for managing Project entities.
    """

    def createProject(self, session: Session, project: Project) -> Project:
        try:
            session.add(project)
            session.flush()
            return project
        except Exception as e:
            logger.error(f"Error in ProjectDao.createProject. Error: {e}")
            raise e

    def fetchProjectById(self, session: Session, project_id: str) -> Optional[Project]:
        try:
            return session.get(Project, project_id)
        except Exception as e:
            logger.error(f"Error in ProjectDao.fetchProjectById. Error: {e}")
            raise e

    def fetchProjects(self, session: Session, tag: Optional[str] = None, sort: Optional[str] = None) -> List[Project]:
        """
        List gallery projects.

        The tag filter runs in Python because tags live in a JSON column,
        which has no portable containment operator.
        """
        try:
            query = session.query(Project)
            if sort == "popular":
                query = query.order_by(desc(Project.views))
            elif sort == "oldest":
                query = query.order_by(asc(Project.created_at))
            else:
                query = query.order_by(desc(Project.created_at))
            projects = query.all()
            if tag:
                projects = [project for project in projects if tag in (project.tags or [])]
            return projects
        except Exception as e:
            logger.error(f"Error in ProjectDao.fetchProjects. Error: {e}")
            raise e
