# aibuilder/services/auth.py
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from ..db.store import Store, DuplicateKey
from .errors import EmailAlreadyExists, InvalidCredentials

log = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")


def decode_token(token: str, secret: str) -> Optional[Dict[str, Any]]:
    """Return the token payload, or None if it is expired or malformed."""
    if not token:
        return None
    if token.startswith("Bearer "):
        token = token[7:]
    try:
        return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


class AuthService:
    def __init__(self, store: Store, jwt_secret: str, expires_hours: int = 24):
        if not jwt_secret:
            raise RuntimeError("JWT_SECRET not configured")
        self.store = store
        self.jwt_secret = jwt_secret
        self.expires_hours = expires_hours

    # ---------- password helpers ----------
    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_ctx.hash(password)

    @staticmethod
    def verify_password(password: str, stored_hash: str) -> bool:
        if not stored_hash:
            return False
        try:
            return pwd_ctx.verify(password, stored_hash)
        except ValueError:
            # unrecognised hash format
            return False

    # ---------- JWT helpers ----------
    def generate_token(self, user_id: int, email: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "userId": user_id,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=self.expires_hours)).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.jwt_secret, algorithm=JWT_ALGORITHM)

    # ---------- user flows ----------
    def register(self, email: str, password: str, name: str) -> Dict[str, Any]:
        """Create the account and return ``{user, token}``. Email is expected pre-normalised."""
        with self.store.atomic():
            if self.store.get_user_credentials(email):
                raise EmailAlreadyExists()
            try:
                user = self.store.insert_user(email, self.hash_password(password), name)
            except DuplicateKey:
                raise EmailAlreadyExists()

        log.info("registered user %s", user["id"])
        return {"user": user, "token": self.generate_token(user["id"], user["email"])}

    def login(self, email: str, password: str) -> Dict[str, Any]:
        row = self.store.get_user_credentials(email)
        if row is None:
            # keep timing similar to a real hash check
            pwd_ctx.dummy_verify()
            raise InvalidCredentials()
        if not self.verify_password(password, row.pop("password_hash")):
            raise InvalidCredentials()
        return {"user": row, "token": self.generate_token(row["id"], row["email"])}
