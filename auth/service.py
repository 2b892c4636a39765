"""
auth/service.py -- Register and login flows.

AuthService composes the credential store (auth/store.py), the password
verifier and the token issuer (auth/tokens.py). Both flows are one-shot and
request-scoped: no session state, no retries.

Failures are raised as core.errors.DomainError subclasses; the API layer
maps them to HTTP statuses.

  register -> DuplicateEmailError if the email is already present
  login    -> InvalidCredentialsError for unknown email AND wrong password,
              with an identical message either way

Layer rule: no imports from api/ or sales/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import AuthResult, User
from auth.store import UserStore
from auth.tokens import TokenIssuer, authenticate_user, hash_password
from core.errors import DuplicateEmailError, InvalidCredentialsError

logger = logging.getLogger("orderdesk.auth")


class AuthService:
    def __init__(self, store: UserStore, issuer: TokenIssuer) -> None:
        self._store = store
        self._issuer = issuer

    def register(self, username: str, email: str, password: str) -> AuthResult:
        """Create an identity record and return a token for it.

        Email is compared exactly as submitted. If two registrations for the
        same email race past email_exists(), the UNIQUE constraint rejects the
        second insert and it is reported as DuplicateEmailError as well.
        """
        if self._store.email_exists(email):
            logger.warning("Registration rejected, email already registered: %s", email)
            raise DuplicateEmailError()

        password_hash, password_salt = hash_password(password)
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            password_salt=password_salt,
        )
        try:
            user.id = self._store.create_user(user)
        except IntegrityError as exc:
            logger.warning("Registration lost a race on email: %s", email)
            raise DuplicateEmailError() from exc

        logger.info("Registered user id=%s", user.id)
        return AuthResult(token=self._issuer.issue(user), email=user.email, username=user.username)

    def login(self, email: str, password: str) -> AuthResult:
        """Verify credentials and return a fresh token.

        Uses authenticate_user(), which equalizes timing between the unknown
        email and wrong password cases. Do NOT inline get_by_email() +
        verify_password() here.
        """
        user = authenticate_user(self._store, email, password)
        if user is None:
            logger.warning("Login failed for email: %s", email)
            raise InvalidCredentialsError()
        return AuthResult(token=self._issuer.issue(user), email=user.email, username=user.username)
