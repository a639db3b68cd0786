# aibuilder/db/sql_store.py
from contextlib import contextmanager
from datetime import timedelta
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import User, Project, ProjectFile, FileTypeEnum
from ..models.clock import utcnow
from .store import Store, DuplicateKey, ForeignKeyViolation

_PROJECT_FIELDS = {"name": "name", "description": "description", "metadata": "project_metadata"}
_FILE_FIELDS = {"path", "content", "file_type", "parent_id"}

# SQLSTATE class 23 codes: 23503 foreign_key_violation, 23505 unique_violation
_FK_SQLSTATE = "23503"


def _is_foreign_key_error(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == _FK_SQLSTATE:
        return True
    # sqlite3 has no sqlstate; its message is "FOREIGN KEY constraint failed"
    return "FOREIGN KEY" in str(orig).upper()


def _touch(row) -> None:
    # updated_at must strictly advance, even within one clock tick
    now = utcnow()
    if row.updated_at is not None and now <= row.updated_at:
        now = row.updated_at + timedelta(microseconds=1)
    row.updated_at = now


class SqlStore(Store):
    """Store backed by one SQLAlchemy Session (one per request)."""

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    @contextmanager
    def atomic(self):
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.session.rollback()
            raise
        else:
            self._depth -= 1
            if self._depth == 0:
                self.session.commit()

    def close(self) -> None:
        self.session.close()

    def _flush(self) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            if _is_foreign_key_error(exc):
                raise ForeignKeyViolation(str(exc.orig)) from exc
            raise DuplicateKey(str(exc.orig)) from exc

    # ---------- users ----------
    def get_user(self, user_id: int) -> Optional[dict]:
        user = self.session.get(User, user_id)
        return user.to_dict() if user else None

    def get_user_credentials(self, email: str) -> Optional[dict]:
        user = self.session.query(User).filter(User.email == email).first()
        if not user:
            return None
        row = user.to_dict()
        row["password_hash"] = user.password_hash
        return row

    def insert_user(self, email: str, password_hash: str, name: str) -> dict:
        user = User(email=email, password_hash=password_hash, name=name)
        self.session.add(user)
        self._flush()
        return user.to_dict()

    # ---------- projects ----------
    def _owned_project(self, project_id: int, user_id: int) -> Optional[Project]:
        return (
            self.session.query(Project)
            .filter(Project.id == project_id, Project.user_id == user_id)
            .first()
        )

    def get_owned_project(self, project_id: int, user_id: int) -> Optional[dict]:
        project = self._owned_project(project_id, user_id)
        return project.to_dict() if project else None

    def list_projects(self, user_id: int) -> list[dict]:
        rows = (
            self.session.query(Project)
            .filter(Project.user_id == user_id)
            .order_by(Project.updated_at.desc(), Project.id.desc())
            .all()
        )
        return [p.to_dict() for p in rows]

    def insert_project(
        self, name: str, description: Optional[str], user_id: int, metadata: Optional[dict]
    ) -> dict:
        project = Project(
            name=name,
            description=description,
            user_id=user_id,
            project_metadata=metadata,
        )
        self.session.add(project)
        self._flush()
        return project.to_dict()

    def update_project(self, project_id: int, changes: dict[str, Any]) -> dict:
        project = self.session.get(Project, project_id)
        if project is None:
            raise LookupError(f"project {project_id} vanished")
        for key, attr in _PROJECT_FIELDS.items():
            if key in changes:
                setattr(project, attr, changes[key])
        _touch(project)
        self._flush()
        return project.to_dict()

    def delete_project(self, project_id: int) -> bool:
        # project_files go with it via ON DELETE CASCADE
        count = (
            self.session.query(Project)
            .filter(Project.id == project_id)
            .delete(synchronize_session=False)
        )
        self.session.expire_all()
        return count > 0

    # ---------- files ----------
    def get_file(self, file_id: int) -> Optional[dict]:
        row = self.session.get(ProjectFile, file_id)
        return row.to_dict() if row else None

    def get_owned_file(self, file_id: int, user_id: int) -> Optional[dict]:
        row = (
            self.session.query(ProjectFile)
            .join(Project, Project.id == ProjectFile.project_id)
            .filter(ProjectFile.id == file_id, Project.user_id == user_id)
            .first()
        )
        return row.to_dict() if row else None

    def find_file_by_path(
        self, project_id: int, path: str, exclude_id: Optional[int] = None
    ) -> Optional[dict]:
        q = self.session.query(ProjectFile).filter(
            ProjectFile.project_id == project_id, ProjectFile.path == path
        )
        if exclude_id is not None:
            q = q.filter(ProjectFile.id != exclude_id)
        row = q.first()
        return row.to_dict() if row else None

    def list_files(self, project_id: int) -> list[dict]:
        rows = (
            self.session.query(ProjectFile)
            .filter(ProjectFile.project_id == project_id)
            .order_by(ProjectFile.id)
            .all()
        )
        return [r.to_dict() for r in rows]

    def has_children(self, file_id: int) -> bool:
        child = (
            self.session.query(ProjectFile.id)
            .filter(ProjectFile.parent_id == file_id)
            .first()
        )
        return child is not None

    def insert_file(
        self,
        project_id: int,
        path: str,
        content: str,
        file_type: str,
        parent_id: Optional[int] = None,
    ) -> dict:
        row = ProjectFile(
            project_id=project_id,
            path=path,
            content=content,
            file_type=FileTypeEnum(file_type),
            parent_id=parent_id,
        )
        self.session.add(row)
        self._flush()
        return row.to_dict()

    def update_file(self, file_id: int, changes: dict[str, Any]) -> dict:
        row = self.session.get(ProjectFile, file_id)
        if row is None:
            raise LookupError(f"file {file_id} vanished")
        for key in _FILE_FIELDS:
            if key not in changes:
                continue
            value = changes[key]
            if key == "file_type":
                value = FileTypeEnum(value)
            setattr(row, key, value)
        _touch(row)
        self._flush()
        return row.to_dict()

    def delete_file(self, file_id: int) -> bool:
        row = self.session.get(ProjectFile, file_id)
        if row is None:
            return False
        self.session.delete(row)
        self._flush()
        return True
