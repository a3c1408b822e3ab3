"""Persistence for projects."""

from typing import Any, Dict, List, Optional
import uuid

from sqlalchemy import delete, select, update

from .. import domain
from .models import DBProject
from .util import Database


class ProjectStore(object):
    """Projects, keyed by project id."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def create(self, owner: str, name: str) -> domain.Project:
        """Persist a new project."""
        project = domain.Project(project_id=str(uuid.uuid4()), owner=owner,
                                 name=name)
        with self.db.transaction() as session:
            session.add(DBProject(**project._asdict()))
        return project

    def find_one(self, project_id: str) -> Optional[domain.Project]:
        with self.db.transaction() as session:
            db_project = session.get(DBProject, project_id)
            if db_project is None:
                return None
            return db_project.to_domain()

    def names_for(self, owner: str) -> List[str]:
        """Names of all projects owned by ``owner``."""
        with self.db.transaction() as session:
            return list(session.execute(
                select(DBProject.name).where(DBProject.owner == owner)
            ).scalars())

    def update_one(self, project_id: str, values: Dict[str, Any],
                   owner: Optional[str] = None) -> int:
        """
        Update a project, optionally only while it belongs to ``owner``.

        Returns the number of projects matched (0 or 1).
        """
        stmt = update(DBProject).where(DBProject.project_id == project_id)
        if owner is not None:
            stmt = stmt.where(DBProject.owner == owner)
        stmt = stmt.values(**values) \
            .execution_options(synchronize_session=False)
        with self.db.transaction() as session:
            return int(session.execute(stmt).rowcount)

    def delete_many(self, owner: str) -> int:
        """Delete every project owned by ``owner``."""
        with self.db.transaction() as session:
            result = session.execute(
                delete(DBProject)
                .where(DBProject.owner == owner)
                .execution_options(synchronize_session=False)
            )
            return int(result.rowcount)
