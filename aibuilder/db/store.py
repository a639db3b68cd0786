"""
Storage contract used by the service layer.

Services never touch a Session directly; they get a ``Store`` injected and
work with plain dict rows. ``SqlStore`` is the SQLAlchemy implementation.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Optional


class DuplicateKey(Exception):
    """A write hit a unique constraint (email, or project_id + path)."""


class ForeignKeyViolation(Exception):
    """A write referenced a row that is gone, or removed a row still referenced."""


class Store(ABC):

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Run the enclosed reads/writes as one transaction. Nested scopes join the outer one."""

    # ---------- users ----------
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[dict]:
        pass

    @abstractmethod
    def get_user_credentials(self, email: str) -> Optional[dict]:
        """User row including ``password_hash``; only the auth service should call this."""

    @abstractmethod
    def insert_user(self, email: str, password_hash: str, name: str) -> dict:
        pass

    # ---------- projects ----------
    @abstractmethod
    def get_owned_project(self, project_id: int, user_id: int) -> Optional[dict]:
        pass

    @abstractmethod
    def list_projects(self, user_id: int) -> list[dict]:
        pass

    @abstractmethod
    def insert_project(
        self, name: str, description: Optional[str], user_id: int, metadata: Optional[dict]
    ) -> dict:
        pass

    @abstractmethod
    def update_project(self, project_id: int, changes: dict[str, Any]) -> dict:
        """Apply ``changes`` and always refresh ``updated_at``."""

    @abstractmethod
    def delete_project(self, project_id: int) -> bool:
        pass

    # ---------- files ----------
    @abstractmethod
    def get_file(self, file_id: int) -> Optional[dict]:
        pass

    @abstractmethod
    def get_owned_file(self, file_id: int, user_id: int) -> Optional[dict]:
        pass

    @abstractmethod
    def find_file_by_path(
        self, project_id: int, path: str, exclude_id: Optional[int] = None
    ) -> Optional[dict]:
        pass

    @abstractmethod
    def list_files(self, project_id: int) -> list[dict]:
        pass

    @abstractmethod
    def has_children(self, file_id: int) -> bool:
        pass

    @abstractmethod
    def insert_file(
        self,
        project_id: int,
        path: str,
        content: str,
        file_type: str,
        parent_id: Optional[int] = None,
    ) -> dict:
        pass

    @abstractmethod
    def update_file(self, file_id: int, changes: dict[str, Any]) -> dict:
        """Apply ``changes`` and always refresh ``updated_at``."""

    @abstractmethod
    def delete_file(self, file_id: int) -> bool:
        pass
