# tests_routes/base.py
import json
import unittest

import jwt

from aibuilder import create_app


class RpcTestCase(unittest.TestCase):
    """Boots the real app against a fresh in-memory SQLite database."""

    def setUp(self):
        self.app = create_app({
            "DATABASE_URL": "sqlite://",
            "JWT_SECRET": "test-secret-key",
            "TESTING": True,
            "STUB_DELAY_MS": 0,
        })
        self.client = self.app.test_client()

    def tearDown(self):
        self.app.config["DB_ENGINE"].dispose()

    def mutate(self, name, payload=None, token=None):
        return self.client.post(f"/api/rpc/{name}", json=payload or {}, headers=self._headers(token))

    def query(self, name, payload=None, token=None):
        params = {"input": json.dumps(payload)} if payload is not None else None
        return self.client.get(f"/api/rpc/{name}", query_string=params, headers=self._headers(token))

    @staticmethod
    def _headers(token):
        return {"Authorization": f"Bearer {token}"} if token else {}

    def register(self, email="test@example.com", password="password123", name="Test User"):
        """Register through the API; returns (user, token)."""
        resp = self.mutate("registerUser", {"email": email, "password": password, "name": name})
        self.assertEqual(resp.status_code, 200, resp.get_json())
        result = resp.get_json()["result"]
        return result["user"], result["token"]

    def create_project(self, user, token, name="Test Project", **extra):
        payload = {"name": name, "user_id": user["id"], **extra}
        resp = self.mutate("createProject", payload, token)
        self.assertEqual(resp.status_code, 200, resp.get_json())
        return resp.get_json()["result"]

    def token_for(self, user_id, email="someone@example.com", secret=None):
        return jwt.encode(
            {"sub": str(user_id), "userId": user_id, "email": email},
            secret or self.app.config["JWT_SECRET"],
            algorithm="HS256",
        )
