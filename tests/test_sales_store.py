"""Unit tests for sales/store.py -- client and order persistence.

Covers:
- client CRUD round trip, updated_at stamping, missing ids
- client_exists / count_orders_for_client
- order CRUD, Decimal totals, per-client listing
- ON DELETE RESTRICT and the client_id foreign key are enforced by SQLite
- ping() on a healthy store
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from sales.models import Client, Order
from sales.store import SalesStore

# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def seeded(sales_store: SalesStore) -> tuple[SalesStore, int, int]:
    """Store with two clients; only the first owns orders (two of them).

    Returns (store, client_with_orders_id, client_without_orders_id).
    """
    acme = sales_store.create_client(Client(name="Acme", email="ops@acme.test"))
    globex = sales_store.create_client(Client(name="Globex", email="ap@globex.test"))
    sales_store.create_order(Order(client_id=acme, total_amount=Decimal("50.00")))
    sales_store.create_order(Order(client_id=acme, total_amount=Decimal("12.34")))
    return sales_store, acme, globex


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


class TestClients:
    def test_create_and_get(self, sales_store: SalesStore) -> None:
        client_id = sales_store.create_client(Client(name="Acme", email="ops@acme.test"))
        client = sales_store.get_client(client_id)
        assert client is not None
        assert client.id == client_id
        assert client.name == "Acme"
        assert client.email == "ops@acme.test"
        assert client.registered_at, "registered_at must be stamped on insert"
        assert client.updated_at is None

    def test_get_missing_client_returns_none(self, sales_store: SalesStore) -> None:
        assert sales_store.get_client(999) is None

    def test_list_is_ordered_by_id(self, seeded) -> None:
        store, acme, globex = seeded
        assert [c.id for c in store.list_clients()] == [acme, globex]

    def test_list_empty_store(self, sales_store: SalesStore) -> None:
        assert sales_store.list_clients() == []

    def test_update_changes_fields_and_stamps_updated_at(self, seeded) -> None:
        store, acme, _ = seeded
        assert store.update_client(acme, name="Acme Corp", email="billing@acme.test") is True
        client = store.get_client(acme)
        assert client.name == "Acme Corp"
        assert client.email == "billing@acme.test"
        assert client.updated_at is not None

    def test_update_missing_client_returns_false(self, sales_store: SalesStore) -> None:
        assert sales_store.update_client(999, name="x", email="x@y.z") is False

    def test_delete_client_without_orders(self, seeded) -> None:
        store, _, globex = seeded
        assert store.delete_client(globex) is True
        assert store.get_client(globex) is None
        assert store.client_exists(globex) is False

    def test_delete_missing_client_returns_false(self, sales_store: SalesStore) -> None:
        assert sales_store.delete_client(999) is False

    def test_duplicate_client_emails_are_allowed(self, sales_store: SalesStore) -> None:
        first = sales_store.create_client(Client(name="A", email="same@x.test"))
        second = sales_store.create_client(Client(name="B", email="same@x.test"))
        assert first != second


class TestDependencyQueries:
    def test_client_exists(self, seeded) -> None:
        store, acme, _ = seeded
        assert store.client_exists(acme) is True
        assert store.client_exists(999) is False

    def test_count_orders_for_client(self, seeded) -> None:
        store, acme, globex = seeded
        assert store.count_orders_for_client(acme) == 2
        assert store.count_orders_for_client(globex) == 0
        assert store.count_orders_for_client(999) == 0


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class TestOrders:
    def test_create_and_get_preserves_decimal_total(self, seeded) -> None:
        store, _, globex = seeded
        order_id = store.create_order(Order(client_id=globex, total_amount=Decimal("1234.56")))
        order = store.get_order(order_id)
        assert order is not None
        assert order.client_id == globex
        assert order.total_amount == Decimal("1234.56")
        assert order.ordered_at

    def test_get_missing_order_returns_none(self, sales_store: SalesStore) -> None:
        assert sales_store.get_order(999) is None

    def test_list_orders(self, seeded) -> None:
        store, acme, _ = seeded
        orders = store.list_orders()
        assert len(orders) == 2
        assert all(o.client_id == acme for o in orders)

    def test_list_orders_for_client(self, seeded) -> None:
        store, acme, globex = seeded
        totals = [o.total_amount for o in store.list_orders_for_client(acme)]
        assert totals == [Decimal("50.00"), Decimal("12.34")]
        assert store.list_orders_for_client(globex) == []
        assert store.list_orders_for_client(999) == []

    def test_update_order_total(self, seeded) -> None:
        store, acme, _ = seeded
        order_id = store.list_orders_for_client(acme)[0].id
        assert store.update_order(order_id, total_amount=Decimal("75.00")) is True
        order = store.get_order(order_id)
        assert order.total_amount == Decimal("75.00")
        assert order.updated_at is not None

    def test_update_missing_order_returns_false(self, sales_store: SalesStore) -> None:
        assert sales_store.update_order(999, total_amount=Decimal("1.00")) is False

    def test_delete_order(self, seeded) -> None:
        store, acme, _ = seeded
        order_id = store.list_orders_for_client(acme)[0].id
        assert store.delete_order(order_id) is True
        assert store.get_order(order_id) is None
        assert store.count_orders_for_client(acme) == 1

    def test_delete_missing_order_returns_false(self, sales_store: SalesStore) -> None:
        assert sales_store.delete_order(999) is False


# ---------------------------------------------------------------------------
# Foreign key enforcement
# ---------------------------------------------------------------------------


class TestReferentialIntegrity:
    def test_delete_client_with_orders_is_restricted(self, seeded) -> None:
        store, acme, _ = seeded
        with pytest.raises(IntegrityError):
            store.delete_client(acme)
        assert store.client_exists(acme)
        assert store.count_orders_for_client(acme) == 2

    def test_order_for_unknown_client_is_rejected(self, sales_store: SalesStore) -> None:
        with pytest.raises(IntegrityError):
            sales_store.create_order(Order(client_id=999, total_amount=Decimal("10.00")))
        assert sales_store.list_orders() == []


def test_ping_healthy_store(sales_store: SalesStore) -> None:
    assert sales_store.ping() is True
