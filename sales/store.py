"""
sales/store.py -- SQLAlchemy-backed persistence layer for clients and orders.

Uses SQLAlchemy Core (not ORM) so the dataclasses in sales/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. SalesStore is the repository; the
_row_to_* functions are the mappers. Services never touch SQL directly.

Referential integrity:
  orders.client_id is a FOREIGN KEY to clients.id with ON DELETE RESTRICT.
  ClientService counts dependent orders before deleting; the constraint is the
  backstop for a concurrent order insert between that check and the delete.
  SQLite only enforces foreign keys with PRAGMA foreign_keys=ON, which must
  be set on every new connection.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = SalesStore("sqlite:///:memory:")
    client_id = store.create_client(Client(name="Acme", email="ops@acme.test", registered_at=now))
    store.create_order(Order(client_id=client_id, total_amount=Decimal("50.00"), ordered_at=now))
    store.count_orders_for_client(client_id)   # 1
    store.close()
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    create_engine,
    event,
    func,
    select,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from sales.models import Client, Order

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_clients = Table(
    "clients",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("email", String(100), nullable=False),
    Column("registered_at", String(32), nullable=False),
    Column("updated_at", String(32)),
)

_orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "client_id",
        Integer,
        ForeignKey("clients.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    ),
    Column("total_amount", Numeric(10, 2), nullable=False),
    Column("ordered_at", String(32), nullable=False),
    Column("updated_at", String(32)),
)


# ---------------------------------------------------------------------------
# Connection setup
# ---------------------------------------------------------------------------


def _configure_sqlite(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement on each new connection.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class SalesStore:
    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # FastAPI runs sync handlers in a thread pool, so the same pooled
            # connection may be used from more than one thread.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _configure_sqlite)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def create_client(self, client: Client) -> int:
        """Insert a new client and return its assigned database ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _clients.insert().values(
                    name=client.name,
                    email=client.email,
                    registered_at=client.registered_at or _now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_client(self, client_id: int) -> Optional[Client]:
        """Fetch a single client by ID. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_clients.select().where(_clients.c.id == client_id)).fetchone()
        return _row_to_client(row) if row is not None else None

    def list_clients(self) -> list[Client]:
        """Return all clients ordered by ID."""
        with self.engine.connect() as conn:
            rows = conn.execute(_clients.select().order_by(_clients.c.id)).fetchall()
        return [_row_to_client(r) for r in rows]

    def update_client(self, client_id: int, **fields) -> bool:
        """Update mutable fields (name, email) on an existing client.

        Stamps updated_at. Returns True if a row was updated, False if
        client_id was not found.
        """
        fields["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_clients.update().where(_clients.c.id == client_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_client(self, client_id: int) -> bool:
        """Permanently delete a client. Returns True if deleted, False if not found.

        Raises sqlalchemy.exc.IntegrityError if orders still reference the
        client. Callers run validate_no_dependents() first.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_clients.delete().where(_clients.c.id == client_id))
            conn.commit()
        return result.rowcount > 0

    def client_exists(self, client_id: int) -> bool:
        with self.engine.connect() as conn:
            found = conn.execute(select(_clients.c.id).where(_clients.c.id == client_id).limit(1)).first()
        return found is not None

    def count_orders_for_client(self, client_id: int) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(
                select(func.count()).select_from(_orders).where(_orders.c.client_id == client_id)
            ).scalar()
        return result or 0

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def create_order(self, order: Order) -> int:
        """Insert a new order and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if client_id does not reference
        an existing client. OrderService checks client_exists() first.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _orders.insert().values(
                    client_id=order.client_id,
                    total_amount=order.total_amount,
                    ordered_at=order.ordered_at or _now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_order(self, order_id: int) -> Optional[Order]:
        """Fetch a single order by ID. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_orders.select().where(_orders.c.id == order_id)).fetchone()
        return _row_to_order(row) if row is not None else None

    def list_orders(self) -> list[Order]:
        """Return all orders ordered by ID."""
        with self.engine.connect() as conn:
            rows = conn.execute(_orders.select().order_by(_orders.c.id)).fetchall()
        return [_row_to_order(r) for r in rows]

    def list_orders_for_client(self, client_id: int) -> list[Order]:
        """Return the client's orders, oldest first. Empty list for unknown clients."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _orders.select().where(_orders.c.client_id == client_id).order_by(_orders.c.id)
            ).fetchall()
        return [_row_to_order(r) for r in rows]

    def update_order(self, order_id: int, **fields) -> bool:
        """Update mutable fields (total_amount) on an existing order.

        Returns True if a row was updated, False if order_id was not found.
        """
        fields["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_orders.update().where(_orders.c.id == order_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_order(self, order_id: int) -> bool:
        """Permanently delete an order. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_orders.delete().where(_orders.c.id == order_id))
            conn.commit()
        return result.rowcount > 0

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_client(row) -> Client:
    return Client(
        id=row.id,
        name=row.name,
        email=row.email,
        registered_at=row.registered_at,
        updated_at=row.updated_at,
    )


def _row_to_order(row) -> Order:
    return Order(
        id=row.id,
        client_id=row.client_id,
        total_amount=row.total_amount,
        ordered_at=row.ordered_at,
        updated_at=row.updated_at,
    )
