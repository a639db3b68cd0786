# aibuilder/services/validation.py
"""
Input checks for RPC procedure payloads.

Each helper reads one key from a decoded JSON object and either returns a
clean value or raises InvalidInput naming the field. Optional helpers return
UNSET when the key is absent so partial updates can tell "not supplied"
apart from an explicit null.
"""
import re
from typing import Any, Iterable, Optional

from .errors import InvalidInput

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]{2,}$", re.I)

MIN_PASSWORD_LEN = 8


class _Unset:
    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET: Any = _Unset()


def norm_email(v: Optional[str]) -> str:
    return (v or "").strip().lower()


def _is_int(v) -> bool:
    # bool is an int subclass; JSON true/false are not ids
    return isinstance(v, int) and not isinstance(v, bool)


def require_object(data) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidInput("input", "expected a JSON object")
    return data


def require_int(data: dict, key: str) -> int:
    v = data.get(key)
    if not _is_int(v):
        raise InvalidInput(key, "integer required")
    return v


def optional_int(data: dict, key: str, nullable: bool = True):
    if key not in data:
        return UNSET
    v = data[key]
    if v is None and nullable:
        return None
    if not _is_int(v):
        raise InvalidInput(key, "integer required")
    return v


def require_str(data: dict, key: str, min_len: int = 0) -> str:
    v = data.get(key)
    if not isinstance(v, str):
        raise InvalidInput(key, "string required")
    if len(v) < min_len:
        raise InvalidInput(key, f"must be at least {min_len} characters")
    return v


def optional_str(data: dict, key: str, nullable: bool = False, min_len: int = 0):
    if key not in data:
        return UNSET
    v = data[key]
    if v is None:
        if nullable:
            return None
        raise InvalidInput(key, "may not be null")
    if not isinstance(v, str):
        raise InvalidInput(key, "string required")
    if len(v) < min_len:
        raise InvalidInput(key, f"must be at least {min_len} characters")
    return v


def optional_object(data: dict, key: str, nullable: bool = True):
    if key not in data:
        return UNSET
    v = data[key]
    if v is None and nullable:
        return None
    if not isinstance(v, dict):
        raise InvalidInput(key, "object required")
    return v


def require_choice(data: dict, key: str, choices: Iterable[str]) -> str:
    allowed = sorted(choices)
    v = data.get(key)
    if v not in allowed:
        raise InvalidInput(key, f"must be one of {', '.join(allowed)}")
    return v


def optional_choice(data: dict, key: str, choices: Iterable[str]):
    if key not in data:
        return UNSET
    return require_choice(data, key, choices)


def require_email(data: dict, key: str = "email") -> str:
    email = norm_email(require_str(data, key))
    if not EMAIL_RE.fullmatch(email):
        raise InvalidInput(key, "invalid email")
    return email


def supplied(**fields) -> dict:
    """Drop UNSET values, keeping explicit None."""
    return {k: v for k, v in fields.items() if v is not UNSET}
