"""
core/errors.py -- Exception taxonomy for OrderDesk.

Two families:
  DomainError         -- recoverable. Raised by services and the auth flow
                         when a business rule or credential check fails.
                         Each subclass carries a machine-readable code and the
                         HTTP status the API layer should answer with.
  ConfigurationError  -- fatal. Raised at startup only (e.g. missing signing
                         secret). Never mapped to a per-request response.

Services raise; api/main.py registers a single DomainError handler that
renders the error envelope. Nothing below imports FastAPI.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or sales/.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for every recoverable business or auth failure."""

    code: str = "domain_error"
    http_status: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """An entity addressed by id does not exist (update/delete/read paths)."""

    code = "not_found"
    http_status = 404

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity} with id {key} was not found.")
        self.entity = entity
        self.key = key


class BusinessRuleError(DomainError):
    """A domain invariant was violated. Mapped to 400."""

    code = "business_rule"
    http_status = 400


class DuplicateEmailError(BusinessRuleError):
    code = "duplicate_email"

    def __init__(self) -> None:
        super().__init__("Email already exists.")


class InvalidCredentialsError(BusinessRuleError):
    """Login failed.

    The message is fixed. Unknown email and wrong password produce the same
    error so the response never reveals which check failed.
    """

    code = "invalid_credentials"
    http_status = 401

    def __init__(self) -> None:
        super().__init__("Invalid email or password.")


class ReferencedEntityNotFoundError(BusinessRuleError):
    """A mutation references an entity (e.g. an order's client) that does not exist."""

    code = "referenced_entity_not_found"

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity} {key} not found.")
        self.entity = entity
        self.key = key


class DependencyConflictError(BusinessRuleError):
    """A delete would orphan dependent records."""

    code = "dependency_conflict"


class InvalidAmountError(BusinessRuleError):
    code = "invalid_amount"


class ConfigurationError(Exception):
    """Fatal startup misconfiguration (e.g. missing signing secret)."""
