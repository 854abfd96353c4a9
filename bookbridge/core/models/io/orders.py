"""
Order I/O models.

Shipping details are validated here so a bad checkout form never reaches the
inventory step.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class OrderRole(str, Enum):
    """Side of an order the caller is on."""

    buyer = "buyer"
    seller = "seller"


class OrderCreate(BaseModel):
    """Schema for placing a cash-on-delivery order."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    book_id: str = Field(min_length=1, max_length=36)
    quantity: int = Field(default=1, ge=1)
    full_name: str = Field(min_length=2, max_length=100)
    phone: str = Field(pattern=r"^[6-9]\d{9}$", description="Ten digit mobile number")
    email: Optional[EmailStr] = None
    address_line1: str = Field(min_length=5, max_length=200)
    address_line2: Optional[str] = Field(default=None, max_length=200)
    city: str = Field(min_length=2, max_length=50)
    state: str = Field(min_length=2, max_length=50)
    pincode: str = Field(pattern=r"^\d{6}$", description="Six digit postal code")

    @field_validator("email", "address_line2", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class OrderRead(BaseModel):
    """Schema for reading an order."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    book_id: str
    buyer_id: str
    seller_id: str
    quantity: int
    total_price: Decimal
    full_name: str
    phone: str
    email: Optional[str] = None
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    pincode: str
    payment_method: str
    status: str
    created_at: datetime
    updated_at: datetime
