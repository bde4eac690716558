"""
Directory accounts.

Two demo accounts are registered at import: a regular member who can
bookmark, review and add listings, and an admin who can read analytics.
Passwords can be overridden through the environment.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import bcrypt

ROLE_MEMBER = "user"
ROLE_ADMIN = "admin"


@dataclass(frozen=True)
class Account:
    id: str
    username: str
    nickname: str
    role: str
    password_hash: str

    def session_payload(self) -> dict[str, Any]:
        """What is stored in the session cookie; never includes the hash."""
        return {
            "id": self.id,
            "username": self.username,
            "nickname": self.nickname,
            "role": self.role,
        }


_accounts: dict[str, Account] = {}


def register_account(
    username: str, password: str, *, account_id: str, nickname: str, role: str = ROLE_MEMBER,
) -> Account:
    hashed = bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()
    account = Account(
        id=account_id,
        username=username,
        nickname=nickname,
        role=role,
        password_hash=hashed,
    )
    _accounts[username] = account
    return account


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Check *password* for *username*; returns the session payload or ``None``."""
    account = _accounts.get(username)
    if account is None:
        return None
    if not bcrypt.checkpw(password.encode(), account.password_hash.encode()):
        return None
    return account.session_payload()


register_account(
    "user",
    os.getenv("LOCALINK_MEMBER_PASSWORD", "user123"),
    account_id="user-1",
    nickname="Local Explorer",
)
register_account(
    "admin",
    os.getenv("LOCALINK_ADMIN_PASSWORD", "admin123"),
    account_id="admin-1",
    nickname="Directory Admin",
    role=ROLE_ADMIN,
)
