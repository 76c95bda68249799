import logging

from fastapi import APIRouter, Depends, HTTPException

from storybook.dependencies import get_create_order, get_storage
from storybook.utils.errors import BadRequestError, NotFoundError
from storybook.utils.mem_storage import MemStorage
from storybook.utils.storage_schema import Order
from .create_order import CreateOrder
from .create_order_schema import CheckoutRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/orders", response_model=Order, status_code=201)
async def create_order(
    request: CheckoutRequest,
    create_order_service: CreateOrder = Depends(get_create_order),
):
    try:
        return create_order_service.create_order(request)
    except BadRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        logger.exception("Error creating order")
        raise HTTPException(status_code=500, detail="Failed to create order")


@router.get("/orders/{order_id}", response_model=Order)
async def get_order(order_id: int, storage: MemStorage = Depends(get_storage)):
    order = storage.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
