"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in sales/models.py -- dataclasses own domain shape; stores and services do
the work.

Layer rule: no imports from api/ or sales/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered identity.

    password_hash is the 64-byte HMAC-SHA-512 digest of the UTF-8 password,
    keyed with password_salt (128 random bytes, unique per record). Neither
    value ever leaves the auth package.

    email is unique across all users and stored exactly as submitted -- no
    case folding, so lookups are exact-match.

    id is None before the record is written to the database.
    """

    username: str
    email: str
    password_hash: bytes
    password_salt: bytes
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful register or login: the bearer token plus identity echo."""

    token: str
    email: str
    username: str
