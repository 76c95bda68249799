import logging

from storybook.utils.errors import BadRequestError, NotFoundError
from storybook.utils.mem_storage import MemStorage
from storybook.utils.storage_schema import Order, OrderCreate
from .create_order_schema import CheckoutRequest

logger = logging.getLogger(__name__)


class CreateOrder:
    def __init__(self, storage: MemStorage):
        self.storage = storage

    def create_order(self, checkout: CheckoutRequest) -> Order:
        """Record the checkout: price the referenced book, then store a pending order"""
        if not checkout.book_id:
            raise BadRequestError("Book ID is required")
        if self.storage.get_book(checkout.book_id) is None:
            raise NotFoundError("Book not found")

        self.storage.update_book(checkout.book_id, {"format": checkout.format, "price": checkout.total})

        order = self.storage.create_order(
            OrderCreate(**checkout.model_dump(exclude={"book_id"}), book_id=checkout.book_id, status="pending")
        )
        logger.info(f"Order {order.id} created for book {order.book_id} ({order.format}, {order.total})")
        return order
