# aibuilder/services/files.py
"""
File-tree integrity rules for a project's virtual file system.

Every node (file or directory) lives in exactly one project and is addressed
by a path that is unique inside that project. A node's parent, when set, must
be a directory of the same project, and a directory that still has children
cannot be deleted. The checks below run inside one store transaction together
with the write they guard.
"""
import logging
from typing import Any, Dict, List, Optional

from ..auth.guards import require_owned_file, require_owned_project
from ..db.store import Store, DuplicateKey, ForeignKeyViolation
from ..models import FileTypeEnum
from .errors import (
    DirectoryNotEmpty,
    InvalidParent,
    ParentNotDirectory,
    ParentNotFound,
    PathConflict,
)

log = logging.getLogger(__name__)

FILE_TYPES = {t.value for t in FileTypeEnum}
DIRECTORY = FileTypeEnum.directory.value


def tree_order(rows: List[dict]) -> List[dict]:
    """Directories first, then files; each group by path."""
    return sorted(rows, key=lambda r: (r["file_type"] != DIRECTORY, r["path"]))


class FileTreeService:
    def __init__(self, store: Store):
        self.store = store

    # ---------- checks ----------
    def _check_path_free(self, project_id: int, path: str, exclude_id: Optional[int] = None,
                         message: Optional[str] = None) -> None:
        if self.store.find_file_by_path(project_id, path, exclude_id=exclude_id):
            raise PathConflict(message)

    def _check_parent(self, project_id: int, parent_id: int) -> dict:
        parent = self.store.get_file(parent_id)
        if parent is None or parent["project_id"] != project_id:
            raise ParentNotFound()
        if parent["file_type"] != DIRECTORY:
            raise ParentNotDirectory()
        return parent

    def _check_not_own_ancestor(self, node_id: int, parent: dict) -> None:
        seen = set()
        current = parent
        while current is not None:
            if current["id"] == node_id:
                raise InvalidParent()
            if current["id"] in seen:
                break
            seen.add(current["id"])
            pid = current["parent_id"]
            current = self.store.get_file(pid) if pid is not None else None

    # ---------- operations ----------
    def create(
        self,
        user_id: int,
        project_id: int,
        path: str,
        content: str,
        file_type: str,
        parent_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        with self.store.atomic():
            require_owned_project(self.store, project_id, user_id)
            self._check_path_free(project_id, path)
            if parent_id is not None:
                self._check_parent(project_id, parent_id)

            if file_type == DIRECTORY:
                content = ""
            try:
                row = self.store.insert_file(project_id, path, content, file_type, parent_id)
            except DuplicateKey:
                raise PathConflict()
            except ForeignKeyViolation:
                # parent removed after it was checked
                raise ParentNotFound()

        log.debug("created %s %s in project %s", file_type, path, project_id)
        return row

    def update(self, user_id: int, file_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partial update: only keys present in ``changes`` are written
        (path, content, file_type, parent_id). updated_at always moves.
        """
        with self.store.atomic():
            current = require_owned_file(self.store, file_id, user_id)
            project_id = current["project_id"]
            changes = dict(changes)

            if "path" in changes and changes["path"] != current["path"]:
                self._check_path_free(
                    project_id, changes["path"], exclude_id=file_id,
                    message="A file with this path already exists in the project",
                )

            parent_id = changes.get("parent_id")
            if parent_id is not None and parent_id != current["parent_id"]:
                if parent_id == file_id:
                    raise InvalidParent()
                parent = self._check_parent(project_id, parent_id)
                self._check_not_own_ancestor(file_id, parent)

            new_type = changes.get("file_type", current["file_type"])
            if current["file_type"] == DIRECTORY and new_type != DIRECTORY:
                if self.store.has_children(file_id):
                    raise DirectoryNotEmpty("Cannot convert a non-empty directory to a file")
            if new_type == DIRECTORY:
                changes["content"] = ""

            try:
                row = self.store.update_file(file_id, changes)
            except DuplicateKey:
                raise PathConflict("A file with this path already exists in the project")
            except ForeignKeyViolation:
                raise ParentNotFound()
        return row

    def delete(self, user_id: int, file_id: int) -> bool:
        with self.store.atomic():
            row = require_owned_file(self.store, file_id, user_id)
            if row["file_type"] == DIRECTORY and self.store.has_children(file_id):
                raise DirectoryNotEmpty()
            try:
                self.store.delete_file(file_id)
            except ForeignKeyViolation:
                # a child was added after the emptiness check
                raise DirectoryNotEmpty()

        log.debug("deleted %s %s", row["file_type"], row["path"])
        return True

    def list(self, user_id: int, project_id: int) -> List[Dict[str, Any]]:
        with self.store.atomic():
            require_owned_project(self.store, project_id, user_id)
            rows = self.store.list_files(project_id)
        return tree_order(rows)

    def get(self, user_id: int, file_id: int) -> Optional[Dict[str, Any]]:
        """The file, or None when it is missing or belongs to someone else."""
        return self.store.get_owned_file(file_id, user_id)
