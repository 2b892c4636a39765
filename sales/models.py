"""
sales/models.py -- Domain dataclasses for clients and their orders.

These are pure data containers with zero logic. Business rules live in
sales/rules.py; persistence lives in sales/store.py.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass
class Client:
    """A customer that can own orders.

    id is None before the record is written to the database.
    """

    name: str
    email: str
    id: Optional[int] = None
    registered_at: str = ""  # ISO 8601, set by the service on create
    updated_at: Optional[str] = None


@dataclass
class Order:
    """An order placed by exactly one client.

    total_amount is stored with two decimal places (precision 10, scale 2).
    """

    client_id: int
    total_amount: Decimal
    id: Optional[int] = None
    ordered_at: str = ""  # ISO 8601, set by the service on create
    updated_at: Optional[str] = None
