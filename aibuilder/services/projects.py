# aibuilder/services/projects.py
import logging
from typing import Any, Dict, List, Optional

from ..auth.guards import require_owned_project
from ..db.store import Store, ForeignKeyViolation
from ..models import FileTypeEnum
from .errors import UserNotFound
from .files import tree_order

log = logging.getLogger(__name__)

# every new project starts with these top-level directories
SEED_DIRECTORIES = ("/src", "/public")


class ProjectService:
    def __init__(self, store: Store):
        self.store = store

    def create(
        self,
        name: str,
        user_id: int,
        description: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> Dict[str, Any]:
        """Create a project for an existing user and seed its default directories."""
        with self.store.atomic():
            if self.store.get_user(user_id) is None:
                raise UserNotFound(f"User with id {user_id} does not exist")

            try:
                project = self.store.insert_project(name, description, user_id, metadata)
            except ForeignKeyViolation:
                raise UserNotFound(f"User with id {user_id} does not exist")
            for path in SEED_DIRECTORIES:
                self.store.insert_file(project["id"], path, "", FileTypeEnum.directory.value)

        log.info("created project %s for user %s", project["id"], user_id)
        return project

    def list(self, user_id: int) -> List[Dict[str, Any]]:
        """All of the user's projects, most recently updated first."""
        return self.store.list_projects(user_id)

    def get(self, project_id: int, user_id: int) -> Optional[Dict[str, Any]]:
        return self.store.get_owned_project(project_id, user_id)

    def update(self, project_id: int, user_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        with self.store.atomic():
            require_owned_project(self.store, project_id, user_id)
            return self.store.update_project(project_id, changes)

    def delete(self, project_id: int, user_id: int) -> bool:
        with self.store.atomic():
            require_owned_project(self.store, project_id, user_id)
            self.store.delete_project(project_id)

        log.info("deleted project %s", project_id)
        return True

    def with_files(self, project_id: int, user_id: int) -> Optional[Dict[str, Any]]:
        project = self.store.get_owned_project(project_id, user_id)
        if project is None:
            return None
        return {"project": project, "files": tree_order(self.store.list_files(project_id))}
