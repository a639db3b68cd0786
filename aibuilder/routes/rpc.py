# aibuilder/routes/rpc.py
"""
Typed RPC surface.

    GET|POST /api/rpc/<procedure>

The request body (or, for queries, the ``input`` query parameter) is the
procedure input as a JSON object. Success returns ``{"result": ...}``;
failures return ``{"error": <code>, "message": ...}`` with a matching status.
Authenticated procedures need ``Authorization: Bearer <token>`` as issued by
registerUser / loginUser.
"""
from __future__ import annotations
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from flask import Blueprint, request, jsonify, current_app, g

from .. import get_store
from ..auth.guards import require_auth
from ..services.auth import AuthService
from ..services.deployment import DeploymentService, ENVIRONMENTS
from ..services.errors import ServiceError, InvalidInput, Forbidden
from ..services.files import FileTreeService, FILE_TYPES
from ..services.generation import GenerationService
from ..services.projects import ProjectService
from ..services.validation import (
    UNSET,
    require_object,
    require_int,
    optional_int,
    require_str,
    optional_str,
    optional_object,
    require_choice,
    optional_choice,
    require_email,
    supplied,
    MIN_PASSWORD_LEN,
)

rpc_bp = Blueprint("rpc", __name__)


@dataclass(frozen=True)
class Procedure:
    name: str
    kind: str          # "query" or "mutation"
    handler: Callable[[dict], Any]
    auth: bool = True


PROCEDURES: dict[str, Procedure] = {}


def procedure(name: str, kind: str = "query", auth: bool = True):
    assert kind in {"query", "mutation"}
    def deco(fn):
        PROCEDURES[name] = Procedure(name, kind, fn, auth)
        return fn
    return deco


# --- helpers -------------------------------------------------

def _jsonable(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _read_input() -> dict:
    if request.method == "GET":
        raw = request.args.get("input")
        if not raw:
            return {}
        try:
            return require_object(json.loads(raw))
        except json.JSONDecodeError:
            raise InvalidInput("input", "malformed JSON")
    if not request.get_data():
        return {}
    data = request.get_json(silent=True)
    if data is None:
        raise InvalidInput("input", "malformed JSON")
    return require_object(data)


def _acting_user(data: dict, key: str = "userId") -> int:
    """The authenticated user; an explicit id in the input must match it."""
    if key in data:
        claimed = require_int(data, key)
        if claimed != g.user_id:
            raise Forbidden()
    return g.user_id


def _or_none(v):
    return None if v is UNSET else v


def _auth_service() -> AuthService:
    return AuthService(
        get_store(),
        current_app.config["JWT_SECRET"],
        current_app.config["JWT_EXPIRES_HOURS"],
    )


def _generation_service() -> GenerationService:
    cfg = current_app.config
    return GenerationService(get_store(), cfg["CODE_GENERATOR"],
                             cfg["STUB_DELAY_MS"], cfg["STUB_DELAY_MAX_MS"])


def _deployment_service() -> DeploymentService:
    cfg = current_app.config
    return DeploymentService(get_store(), cfg["DEPLOYER"],
                             cfg["STUB_DELAY_MS"], cfg["STUB_DELAY_MAX_MS"])


# --- dispatch ------------------------------------------------

def _run(proc: Procedure, data: dict):
    result = proc.handler(data)
    return jsonify({"result": _jsonable(result)}), 200


@require_auth
def _run_authenticated(proc: Procedure, data: dict):
    return _run(proc, data)


@rpc_bp.route("/rpc/<name>", methods=["GET", "POST"])
def call(name: str):
    proc = PROCEDURES.get(name)
    if proc is None:
        return {"error": "not_found", "message": f"unknown procedure {name}"}, 404
    if request.method == "GET" and proc.kind != "query":
        return {"error": "method_not_allowed", "message": f"{name} is a mutation; use POST"}, 405

    try:
        data = _read_input()
        if proc.auth:
            return _run_authenticated(proc, data)
        return _run(proc, data)
    except ServiceError as e:
        current_app.logger.info("%s rejected: %s (%s)", name, e.code, e.message)
        return jsonify(e.to_dict()), e.status
    except Exception:
        current_app.logger.exception("%s failed", name)
        return jsonify({"error": "server_error"}), 500


# --- procedures ----------------------------------------------

@procedure("healthcheck", auth=False)
def healthcheck(data):
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@procedure("registerUser", kind="mutation", auth=False)
def register_user(data):
    email = require_email(data)
    password = require_str(data, "password", min_len=MIN_PASSWORD_LEN)
    name = require_str(data, "name", min_len=1)
    return _auth_service().register(email, password, name)


@procedure("loginUser", kind="mutation", auth=False)
def login_user(data):
    email = require_email(data)
    password = require_str(data, "password")
    return _auth_service().login(email, password)


@procedure("createProject", kind="mutation")
def create_project(data):
    name = require_str(data, "name", min_len=1)
    description = _or_none(optional_str(data, "description", nullable=True))
    require_int(data, "user_id")
    user_id = _acting_user(data, key="user_id")
    metadata = _or_none(optional_object(data, "metadata"))
    return ProjectService(get_store()).create(name, user_id, description, metadata)


@procedure("getProjects")
def get_projects(data):
    return ProjectService(get_store()).list(_acting_user(data))


@procedure("getProjectById")
def get_project_by_id(data):
    project_id = require_int(data, "projectId")
    return ProjectService(get_store()).get(project_id, _acting_user(data))


@procedure("updateProject", kind="mutation")
def update_project(data):
    project_id = require_int(data, "id")
    changes = supplied(
        name=optional_str(data, "name", min_len=1),
        description=optional_str(data, "description", nullable=True),
        metadata=optional_object(data, "metadata"),
    )
    return ProjectService(get_store()).update(project_id, _acting_user(data), changes)


@procedure("deleteProject", kind="mutation")
def delete_project(data):
    project_id = require_int(data, "projectId")
    return ProjectService(get_store()).delete(project_id, _acting_user(data))


@procedure("getProjectWithFiles")
def get_project_with_files(data):
    project_id = require_int(data, "projectId")
    return ProjectService(get_store()).with_files(project_id, _acting_user(data))


@procedure("createProjectFile", kind="mutation")
def create_project_file(data):
    project_id = require_int(data, "project_id")
    path = require_str(data, "path", min_len=1)
    content = require_str(data, "content")
    file_type = require_choice(data, "file_type", FILE_TYPES)
    parent_id = _or_none(optional_int(data, "parent_id"))
    return FileTreeService(get_store()).create(
        _acting_user(data), project_id, path, content, file_type, parent_id
    )


@procedure("getProjectFiles")
def get_project_files(data):
    project_id = require_int(data, "projectId")
    return FileTreeService(get_store()).list(_acting_user(data), project_id)


@procedure("getProjectFileById")
def get_project_file_by_id(data):
    file_id = require_int(data, "fileId")
    return FileTreeService(get_store()).get(_acting_user(data), file_id)


@procedure("updateProjectFile", kind="mutation")
def update_project_file(data):
    file_id = require_int(data, "id")
    changes = supplied(
        path=optional_str(data, "path", min_len=1),
        content=optional_str(data, "content"),
        file_type=optional_choice(data, "file_type", FILE_TYPES),
        parent_id=optional_int(data, "parent_id"),
    )
    return FileTreeService(get_store()).update(_acting_user(data), file_id, changes)


@procedure("deleteProjectFile", kind="mutation")
def delete_project_file(data):
    file_id = require_int(data, "fileId")
    return FileTreeService(get_store()).delete(_acting_user(data), file_id)


@procedure("generateWithAi", kind="mutation")
def generate_with_ai(data):
    project_id = require_int(data, "project_id")
    prompt = require_str(data, "prompt")
    generation_type = require_str(data, "generation_type")
    file_path = _or_none(optional_str(data, "file_path", nullable=True))
    return _generation_service().generate_with_ai(
        _acting_user(data), project_id, prompt, generation_type, file_path
    )


@procedure("deployProject", kind="mutation")
def deploy_project(data):
    project_id = require_int(data, "project_id")
    environment = require_choice(data, "environment", ENVIRONMENTS)
    config = _or_none(optional_object(data, "deployment_config"))
    return _deployment_service().deploy_project(
        _acting_user(data), project_id, environment, config
    )
