"""
Order entity models.

An order records a cash-on-delivery purchase of one or more copies of a
listing, together with the shipping details of the buyer.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from sqlmodel import Field

from ..base import Base, utc_now

PAYMENT_METHOD_COD = "cod"
ORDER_STATUS_PENDING = "pending"


class Order(Base, table=True):
    """Entity for a purchase record.

    Visible only to its buyer and seller; created only by the buyer.

    Table: orders
    """

    __tablename__ = "orders"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=36)
    book_id: str = Field(foreign_key="books.id", ondelete="CASCADE", index=True, max_length=36)
    buyer_id: str = Field(index=True, max_length=36)
    seller_id: str = Field(index=True, max_length=36)

    quantity: int
    total_price: Decimal = Field(max_digits=12, decimal_places=2)

    # Shipping details
    full_name: str
    phone: str
    email: Optional[str] = Field(default=None)
    address_line1: str
    address_line2: Optional[str] = Field(default=None)
    city: str
    state: str
    pincode: str

    payment_method: str = Field(default=PAYMENT_METHOD_COD)
    status: str = Field(default=ORDER_STATUS_PENDING)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Order(id={self.id}, book_id={self.book_id}, quantity={self.quantity}, status={self.status})"
