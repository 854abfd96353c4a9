"""
Order endpoints.

Orders are cash on delivery. Placing one reserves the copies atomically; the
buyer and the seller can read it afterwards, nobody can change it.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from bookbridge.core.models.io.orders import OrderCreate, OrderRead, OrderRole
from bookbridge.server.services.deps import OrderServiceDep

router = APIRouter()


@router.post(
    "",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Place Order",
    description="Buy copies of a book listed for sale, paying cash on delivery.",
    responses={
        400: {"description": "Book is not for sale or belongs to the caller"},
        401: {"description": "Sign in required"},
        404: {"description": "Book not found"},
        409: {"description": "Not enough copies left"},
        422: {"description": "Invalid shipping details"},
    },
)
async def place_order(payload: OrderCreate, orders: OrderServiceDep) -> OrderRead:
    return OrderRead.model_validate(await orders.place_order(payload))


@router.get(
    "",
    response_model=List[OrderRead],
    summary="List Orders",
    description="Orders where the caller is the buyer or the seller, newest first.",
)
async def list_orders(
    orders: OrderServiceDep,
    role: Optional[OrderRole] = Query(default=None, description="Only orders where the caller is this side"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> List[OrderRead]:
    return [OrderRead.model_validate(o) for o in await orders.list_orders(role=role, limit=limit, offset=offset)]


@router.get(
    "/{order_id}",
    response_model=OrderRead,
    summary="Get Order",
    responses={404: {"description": "Order not found"}},
)
async def get_order(order_id: str, orders: OrderServiceDep) -> OrderRead:
    return OrderRead.model_validate(await orders.get_order(order_id))
