# aibuilder/auth/guards.py
from __future__ import annotations
from functools import wraps
from typing import Optional
from flask import request, jsonify, current_app, g

from ..db.store import Store
from ..services.auth import decode_token
from ..services.errors import NotFoundOrUnauthorized

# ---------- helpers ----------
def _json(status: int, payload: dict):
    return jsonify(payload), status

def _unauth(msg="unauthorized"):
    return _json(401, {"error": msg})

def _decode_jwt_from_auth_header() -> Optional[dict]:
    auth = request.headers.get("Authorization", "")
    if not auth.lower().startswith("bearer "):
        return None
    parts = auth.split(None, 1)
    if len(parts) != 2:
        return None
    return decode_token(parts[1], current_app.config["JWT_SECRET"])

# ---------- top-level auth ----------
def require_auth(fn):
    """Require a valid JWT; sets g.user_id / g.user_email from its claims."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        payload = _decode_jwt_from_auth_header()
        if not payload:
            return _unauth()
        try:
            g.user_id = int(payload.get("sub") or 0)
        except (TypeError, ValueError):
            return _unauth()
        g.user_email = payload.get("email")
        if not g.user_id:
            return _unauth()
        return fn(*args, **kwargs)
    return wrapper

# ---------- project ownership ----------
# Missing and not-yours raise the same error.
def require_owned_project(store: Store, project_id: int, user_id: int) -> dict:
    project = store.get_owned_project(project_id, user_id)
    if project is None:
        raise NotFoundOrUnauthorized("Project not found or access denied")
    return project

def require_owned_file(store: Store, file_id: int, user_id: int) -> dict:
    row = store.get_owned_file(file_id, user_id)
    if row is None:
        raise NotFoundOrUnauthorized("File not found or access denied")
    return row
