"""
Order placement.

Placing an order reserves copies and records the purchase in one
transaction::

    UPDATE books SET available_copies = available_copies - q
     WHERE id = :book_id AND available_copies >= q
    INSERT INTO orders ...
    COMMIT

If the conditional update matches no row, the transaction is rolled back and
the buyer gets ``InsufficientCopiesError``; a failed insert rolls the
decrement back with it. Two buyers racing for the last copy therefore end up
with exactly one order.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bookbridge.core.database.entities.books import Book, BookMode
from bookbridge.core.database.entities.orders import ORDER_STATUS_PENDING, PAYMENT_METHOD_COD, Order
from bookbridge.core.database.repositories import BookRepository, OrderRepository
from bookbridge.core.errors import (
    AuthenticationError,
    InsufficientCopiesError,
    InvalidOperationError,
    NotFoundError,
)
from bookbridge.core.logging_config import get_logger
from bookbridge.core.models.io.orders import OrderCreate, OrderRole
from bookbridge.core.monitoring import log_order_placed
from bookbridge.core.policy import Caller, Operation, Resource, enforce, evaluate, visible

logger = get_logger(__name__)


class OrderService:
    """Service for placing and reading cash-on-delivery orders."""

    def __init__(self, session: AsyncSession, caller: Caller) -> None:
        self.session = session
        self.caller = caller
        self.books = BookRepository(session)
        self.orders = OrderRepository(session)

    async def place_order(self, payload: OrderCreate) -> Order:
        """Buy ``payload.quantity`` copies of a listing.

        Args:
            payload: Validated checkout form

        Returns:
            The stored order

        Raises:
            AuthenticationError: Anonymous caller.
            NotFoundError: The book does not exist.
            InvalidOperationError: The book is not for sale, or the caller owns it.
            InsufficientCopiesError: Fewer copies are left than requested.
        """
        if not self.caller.is_authenticated:
            raise AuthenticationError()

        book = await self.books.get_by_id(payload.book_id)
        if book is None:
            raise NotFoundError("book", payload.book_id)
        if book.mode is not BookMode.sell or book.price is None:
            raise InvalidOperationError(f"Book {book.id} is listed for {book.mode.value}, not for sale")
        if book.user_id == self.caller.user_id:
            raise InvalidOperationError("You cannot order your own book")
        if payload.quantity > book.available_copies:
            raise InsufficientCopiesError(book.id, payload.quantity, book.available_copies)

        order = Order(
            book_id=book.id,
            buyer_id=self.caller.user_id,
            seller_id=book.user_id,
            quantity=payload.quantity,
            total_price=book.price * payload.quantity,
            payment_method=PAYMENT_METHOD_COD,
            status=ORDER_STATUS_PENDING,
            **payload.model_dump(exclude={"book_id", "quantity"}),
        )
        enforce(Resource.orders, Operation.insert, self.caller, new=order)

        # A rollback expires ``book``; only ``book_id`` is read after one.
        book_id = book.id
        reserved = await self.books.decrement_available_copies(book_id, payload.quantity)
        if not reserved:
            await self.session.rollback()
            current = await self.session.get(Book, book_id, populate_existing=True)
            available = current.available_copies if current is not None else 0
            logger.info(f"Order for book {book_id} lost the race for copies (asked {payload.quantity}, left {available})")
            raise InsufficientCopiesError(book_id, payload.quantity, available)

        # Commits the decrement and the insert together.
        order = await self.orders.create(order)
        await self.session.refresh(book)

        logger.info(f"Order {order.id} placed by {order.buyer_id} for {order.quantity} x book {order.book_id}")
        log_order_placed(order.id, order.book_id, order.quantity, str(order.total_price))
        return order

    async def list_orders(
        self, role: Optional[OrderRole] = None, limit: int = 50, offset: int = 0
    ) -> List[Order]:
        if not self.caller.is_authenticated:
            raise AuthenticationError()
        rows = await self.orders.list_for_party(
            self.caller.user_id, role=role.value if role else None, limit=limit, offset=offset
        )
        return visible(Resource.orders, self.caller, rows)

    async def get_order(self, order_id: str) -> Order:
        if not self.caller.is_authenticated:
            raise AuthenticationError()
        order = await self.orders.get_by_id(order_id)
        if order is None or not evaluate(Resource.orders, Operation.select, self.caller, existing=order).allowed:
            raise NotFoundError("order", order_id)
        return order
