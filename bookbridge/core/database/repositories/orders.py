"""
Order repository.

Data access for purchase records.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.orders import Order
from .base import AsyncBaseRepository, QueryBuilder


class OrderRepository(AsyncBaseRepository[Order]):
    """Repository for order data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Order)

    async def list_for_party(
        self,
        user_id: str,
        role: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Order]:
        """List orders where ``user_id`` is the buyer or the seller, newest first.

        Args:
            user_id: Party identifier
            role: ``"buyer"`` or ``"seller"`` to restrict to one side; both when None
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            List of orders
        """
        stmt = select(Order)
        if role == "buyer":
            stmt = stmt.where(Order.buyer_id == user_id)
        elif role == "seller":
            stmt = stmt.where(Order.seller_id == user_id)
        else:
            stmt = stmt.where(or_(Order.buyer_id == user_id, Order.seller_id == user_id))
        stmt = stmt.order_by(Order.created_at.desc(), Order.id)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
