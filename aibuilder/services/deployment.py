# aibuilder/services/deployment.py
import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..auth.guards import require_owned_project
from ..db.store import Store
from .errors import EmptyProject, InvalidInput
from .generation import simulated_delay

log = logging.getLogger(__name__)

ENVIRONMENTS = ("development", "staging", "production")

_ENV_SUFFIX = {"development": "dev", "staging": "staging"}
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    slug = _NON_ALNUM.sub("-", (name or "").lower()).strip("-")
    return slug or "project"


class Deployer(ABC):
    @abstractmethod
    def deploy(self, project: dict, environment: str, files: List[dict],
               config: Optional[dict] = None) -> str:
        """Publish ``files`` and return the public URL."""


class StubDeployer(Deployer):
    """Pretends to deploy; builds a stable production URL and timestamped preview URLs."""

    def __init__(self, domain: str = "vercel.app", clock=time.time):
        self.domain = domain
        self.clock = clock

    def deploy(self, project, environment, files, config=None):
        slug = slugify(project["name"])
        if environment == "production":
            return f"https://{slug}.{self.domain}"
        return f"https://{slug}-{_ENV_SUFFIX[environment]}-{int(self.clock())}.{self.domain}"


class DeploymentService:
    def __init__(self, store: Store, deployer: Deployer,
                 delay_ms: int = 0, max_delay_ms: int = 2000):
        self.store = store
        self.deployer = deployer
        self.delay_ms = delay_ms
        self.max_delay_ms = max_delay_ms

    def deploy_project(
        self,
        user_id: int,
        project_id: int,
        environment: str,
        deployment_config: Optional[dict] = None,
    ) -> Dict[str, Any]:
        with self.store.atomic():
            project = require_owned_project(self.store, project_id, user_id)
            if environment not in ENVIRONMENTS:
                raise InvalidInput("environment", f"must be one of {', '.join(ENVIRONMENTS)}")
            files = self.store.list_files(project_id)
            if not files:
                raise EmptyProject()

        simulated_delay(len(files), self.delay_ms, self.max_delay_ms)
        url = self.deployer.deploy(project, environment, files, deployment_config)
        log.info("deployed project %s to %s (%d files, config keys=%s)",
                 project_id, environment, len(files), sorted((deployment_config or {}).keys()))
        return {
            "message": f'Project "{project["name"]}" successfully deployed to {environment}',
            "deployment_url": url,
        }
