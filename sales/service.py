"""
sales/service.py -- Client and order use cases.

ClientService and OrderService sit between the routers and SalesStore.
They stamp timestamps, run the guards from sales/rules.py before every
mutation, and turn "row not found" into core.errors.NotFoundError.

Guard order on order create: amount first, then client reference. Both run
before the insert, so a rejected order never leaves a partial row behind.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError

from core.errors import DependencyConflictError, NotFoundError, ReferencedEntityNotFoundError
from sales.models import Client, Order
from sales.rules import validate_client_reference, validate_no_dependents, validate_order_amount
from sales.store import SalesStore

logger = logging.getLogger("orderdesk.sales")

# Storage scale of orders.total_amount (Numeric(10, 2)).
CENTS = Decimal("0.01")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ClientService:
    def __init__(self, store: SalesStore) -> None:
        self._store = store

    def list_clients(self) -> list[Client]:
        return self._store.list_clients()

    def get_client(self, client_id: int) -> Optional[Client]:
        return self._store.get_client(client_id)

    def create_client(self, name: str, email: str) -> Client:
        client = Client(name=name, email=email, registered_at=_now_iso())
        client.id = self._store.create_client(client)
        logger.info("Created client id=%s", client.id)
        return client

    def update_client(self, client_id: int, name: str, email: str) -> None:
        """Replace a client's name and email. Raises NotFoundError if absent."""
        if not self._store.update_client(client_id, name=name, email=email):
            raise NotFoundError("Client", client_id)

    def delete_client(self, client_id: int) -> None:
        """Delete a client that owns no orders.

        Raises NotFoundError if the client does not exist and
        DependencyConflictError if it still has orders. The existence check
        runs first so a missing client is always reported as 404.
        """
        if not self._store.client_exists(client_id):
            raise NotFoundError("Client", client_id)
        validate_no_dependents(self._store, client_id)
        try:
            self._store.delete_client(client_id)
        except IntegrityError as exc:
            # An order was inserted between the check and the delete; the
            # foreign key refused the delete.
            raise DependencyConflictError("Cannot delete a client that has associated orders.") from exc
        logger.info("Deleted client id=%s", client_id)


class OrderService:
    def __init__(self, store: SalesStore) -> None:
        self._store = store

    def list_orders(self) -> list[Order]:
        return self._store.list_orders()

    def get_order(self, order_id: int) -> Optional[Order]:
        return self._store.get_order(order_id)

    def list_orders_for_client(self, client_id: int) -> list[Order]:
        return self._store.list_orders_for_client(client_id)

    def create_order(self, client_id: int, total_amount: Decimal) -> Order:
        validate_order_amount(total_amount)
        validate_client_reference(self._store, client_id)
        order = Order(client_id=client_id, total_amount=total_amount.quantize(CENTS), ordered_at=_now_iso())
        try:
            order.id = self._store.create_order(order)
        except IntegrityError as exc:
            # Client deleted between the reference check and the insert.
            raise ReferencedEntityNotFoundError("Client", client_id) from exc
        logger.info("Created order id=%s for client id=%s", order.id, client_id)
        return order

    def update_order(self, order_id: int, total_amount: Decimal) -> None:
        """Change an order's total. Raises InvalidAmountError or NotFoundError."""
        validate_order_amount(total_amount)
        if not self._store.update_order(order_id, total_amount=total_amount.quantize(CENTS)):
            raise NotFoundError("Order", order_id)

    def delete_order(self, order_id: int) -> None:
        if not self._store.delete_order(order_id):
            raise NotFoundError("Order", order_id)
        logger.info("Deleted order id=%s", order_id)
