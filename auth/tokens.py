"""
auth/tokens.py -- Password hashing, JWT issue/verify, and the auth cookie.

Security design decisions:
  Passwords: HMAC-SHA-512 keyed with a per-user 128-byte random salt drawn
       from secrets.token_bytes(). The salt is the HMAC key, so two users with
       the same password never share a hash. verify_password() recomputes the
       digest with the stored salt and compares with hmac.compare_digest(),
       which always walks the full sequence.

  Timing equalization: authenticate_user() runs a verify against _DUMMY_HASH
       when the email is unknown, so "no such user" costs the same as "wrong
       password" and response time does not reveal which emails exist.

  JWT: python-jose with HS512. Claims are sub (user id as str), email,
       username, iat and exp. exp is always iat + 7 days; the lifetime is not
       configurable. No aud / iss claims are set, and decode() does not check
       them either. Adding both is a hardening opportunity, not a default.

  Signing secret: TokenIssuer receives it at construction (from
       core.config.get_settings().secret_key in api/main.py). A missing secret
       raises ConfigurationError right there, at startup -- never per request.

Layer rule: no imports from api/ or sales/. Import from core/ is allowed.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from jose import JWTError, jwt

from core.errors import ConfigurationError

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("orderdesk.auth")

ALGORITHM = "HS512"
TOKEN_LIFETIME = timedelta(days=7)
SALT_BYTES = 128

# ---------------------------------------------------------------------------
# Password hashing (HMAC-SHA-512, per-user random key)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> tuple[bytes, bytes]:
    """Return (hash, salt) for the given plaintext password.

    Length rules (6-100 chars) are enforced at the API layer; this function
    accepts any string.
    """
    salt = secrets.token_bytes(SALT_BYTES)
    digest = hmac.new(salt, plain.encode("utf-8"), hashlib.sha512).digest()
    return digest, salt


def verify_password(plain: str, password_hash: bytes, salt: bytes) -> bool:
    """Return True if the plaintext password matches the stored hash."""
    computed = hmac.new(salt, plain.encode("utf-8"), hashlib.sha512).digest()
    return hmac.compare_digest(computed, password_hash)


# Computed once at module load so the first unknown-email login costs the same
# as every later one.
_DUMMY_HASH, _DUMMY_SALT = hash_password("orderdesk_timing_dummy")


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Authenticate an email/password pair with timing equalization.

    Always runs one HMAC whether or not the email exists:
    - Unknown email: verify against _DUMMY_HASH (same cost as a real check)
    - Wrong password: verify against the stored hash

    Returns the User on success, None on any failure. Callers must not
    distinguish the two failure cases in anything they return.
    """
    user = store.get_by_email(email)
    if user is None:
        verify_password(password, _DUMMY_HASH, _DUMMY_SALT)
        return None
    if not verify_password(password, user.password_hash, user.password_salt):
        return None
    return user


# ---------------------------------------------------------------------------
# JWT issue / verify
# ---------------------------------------------------------------------------


class TokenIssuer:
    """Mints and verifies self-contained bearer tokens.

    Any holder of the signing secret can validate a token's signature and
    expiry without a database lookup. There is no revocation list.
    """

    def __init__(self, secret_key: str) -> None:
        if not secret_key:
            raise ConfigurationError("JWT signing secret is not configured (SECRET_KEY).")
        self._secret_key = secret_key

    def issue(self, user: User, now: datetime | None = None) -> str:
        """Encode a signed JWT for the user, valid for TOKEN_LIFETIME from now.

        Args:
            user: A persisted User (id must be set).
            now:  Issue time. Defaults to the current UTC time; tests pass a
                  fixed value to check expiry behaviour.
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "username": user.username,
            "iat": issued_at,
            "exp": issued_at + TOKEN_LIFETIME,
        }
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    def decode(self, token: str) -> dict | None:
        """Verify signature and expiry. Returns the claims dict or None on any failure.

        Returning None (rather than raising) keeps the caller simple: any
        invalid token is treated as unauthenticated. Route dependencies turn
        None into 401.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"verify_aud": False},
            )
        except JWTError:
            return None
        if "sub" not in payload or "email" not in payload:
            return None
        return payload


# ---------------------------------------------------------------------------
# Cookie helper
# ---------------------------------------------------------------------------


def set_auth_cookie(response, token: str, secure: bool = False) -> None:
    """Write the JWT as an httpOnly cookie on the response.

    httponly=True: JS cannot read the cookie (XSS mitigation).
    samesite="strict": cookie is never sent on cross-site requests.
    secure: only sent over HTTPS when SECURE_COOKIES=true (set in production).
    max_age: matches the token lifetime so both expire together.
    """
    response.set_cookie(
        "access_token",
        value=token,
        httponly=True,
        samesite="strict",
        secure=secure,
        max_age=int(TOKEN_LIFETIME.total_seconds()),
    )
