from __future__ import annotations

from typing import Any

import bcrypt

ADMIN_ROLES = frozenset({"admin", "super_admin"})

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def register_user(username: str, password: str, role: str = "client") -> None:
    _users[username] = {"password_hash": _hash_password(password), "role": role}


def _seed_users() -> None:
    """Pre-seed demo accounts on import."""
    register_user("client", "client123", "client")
    register_user("admin", "admin123", "admin")
    register_user("owner", "owner123", "super_admin")


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, role}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username, "role": record["role"]}
    return None


def is_admin(user: dict[str, Any] | None) -> bool:
    return bool(user) and user.get("role") in ADMIN_ROLES


_seed_users()
