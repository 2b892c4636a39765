"""
sales/rules.py -- Business-rule guards for client and order mutations.

Each guard is a plain function that either returns None or raises a
core.errors.BusinessRuleError subclass. Services call them before the
corresponding store mutation, so a failing guard means nothing is written.

  validate_order_amount      -- total must be strictly greater than zero
  validate_client_reference  -- the referenced client must exist
  validate_no_dependents     -- a client with orders cannot be deleted

The guards read through the store but never write.
"""

import logging
from decimal import Decimal

from core.errors import DependencyConflictError, InvalidAmountError, ReferencedEntityNotFoundError
from sales.store import SalesStore

logger = logging.getLogger("orderdesk.sales")


def validate_order_amount(amount: Decimal) -> None:
    """Reject order totals that are zero or negative.

    The same rule applies on create and on update.
    """
    if amount <= 0:
        logger.info("Rejected order amount %s", amount)
        raise InvalidAmountError("Order total must be greater than zero.")


def validate_client_reference(store: SalesStore, client_id: int) -> None:
    """Reject an order whose client_id does not name an existing client."""
    if not store.client_exists(client_id):
        logger.info("Rejected order for unknown client id=%s", client_id)
        raise ReferencedEntityNotFoundError("Client", client_id)


def validate_no_dependents(store: SalesStore, client_id: int) -> None:
    """Reject deleting a client that still owns at least one order."""
    count = store.count_orders_for_client(client_id)
    if count > 0:
        logger.info("Rejected delete of client id=%s with %d order(s)", client_id, count)
        raise DependencyConflictError("Cannot delete a client that has associated orders.")
