# student_dashboard/services/auth_service.py
"""
Mock authentication backed by the key-value store.

Registered users live in a single JSON list. Passwords are stored as Werkzeug
hashes, never in plaintext.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flask import current_app, has_app_context
from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from .kv_store import KeyValueStore

USERS_KEY = "student_dashboard_users"


class AuthError(Exception):
    """Authentication failure carrying a stable error code"""

    def __init__(self, code: str, message: Optional[str] = None) -> None:
        super().__init__(message or code)
        self.code = code


@dataclass(frozen=True)
class AuthUser(UserMixin):
    uid: str
    email: str
    display_name: str
    created_at: str

    def get_id(self):
        return self.uid

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "displayName": self.display_name,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_entry(cls, entry: Dict[str, Any]) -> "AuthUser":
        return cls(
            uid=entry["uid"],
            email=entry["email"],
            display_name=entry.get("displayName") or entry["email"].split("@")[0],
            created_at=entry.get("createdAt", ""),
        )


class MockAuthService:
    """Registers and authenticates users against the stored user list"""

    def __init__(self, kv_store: KeyValueStore) -> None:
        self.kv_store = kv_store

    def _load_users(self) -> List[Dict[str, Any]]:
        users = self.kv_store.get(USERS_KEY, default=[])
        return users if isinstance(users, list) else []

    def _find_entry(self, email: str) -> Optional[Dict[str, Any]]:
        needle = email.strip().lower()
        for entry in self._load_users():
            if str(entry.get("email", "")).lower() == needle:
                return entry
        return None

    def register(self, email: str, password: str) -> AuthUser:
        email = (email or "").strip()
        if not email or not password:
            raise AuthError("auth/invalid-credential")
        if self._find_entry(email) is not None:
            raise AuthError("auth/email-already-in-use")

        entry = {
            "uid": f"user_{secrets.token_hex(5)}",
            "email": email,
            "passwordHash": generate_password_hash(password),
            "displayName": email.split("@")[0],
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        users = self._load_users()
        users.append(entry)
        self.kv_store.set(USERS_KEY, users)
        if has_app_context():
            current_app.logger.info(f"Registered user {entry['uid']}")
        return AuthUser.from_entry(entry)

    def authenticate(self, email: str, password: str) -> AuthUser:
        if not email or not password:
            raise AuthError("auth/invalid-credential")
        entry = self._find_entry(email)
        if entry is None:
            raise AuthError("auth/user-not-found")
        if not check_password_hash(entry.get("passwordHash", ""), password):
            raise AuthError("auth/wrong-password")
        return AuthUser.from_entry(entry)

    def get_user(self, uid: str) -> Optional[AuthUser]:
        for entry in self._load_users():
            if entry.get("uid") == uid:
                return AuthUser.from_entry(entry)
        return None
