import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from storybook.utils.errors import DuplicateUserError, NotFoundError
from storybook.utils.storage_schema import Book, BookCreate, Order, OrderCreate, User, UserCreate

logger = logging.getLogger(__name__)


class MemStorage:
    """Process-scoped keyed collections for users, books and orders.

    Ids are allocated from per-collection counters starting at 1. Id allocation
    and insertion happen under one lock so concurrent requests never share an id.
    Every read and write hands back a copy; callers never hold the stored record.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._books: Dict[int, Book] = {}
        self._orders: Dict[int, Order] = {}
        self._next_user_id = 1
        self._next_book_id = 1
        self._next_order_id = 1

    # Users
    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy(deep=True) if user else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user.model_copy(deep=True)
            return None

    def create_user(self, data: UserCreate) -> User:
        with self._lock:
            if any(u.username == data.username for u in self._users.values()):
                raise DuplicateUserError(f"Username '{data.username}' is already taken")
            user = User(id=self._next_user_id, **data.model_dump())
            self._users[user.id] = user
            self._next_user_id += 1
            return user.model_copy(deep=True)

    # Books
    def get_book(self, book_id: int) -> Optional[Book]:
        with self._lock:
            book = self._books.get(book_id)
            return book.model_copy(deep=True) if book else None

    def create_book(self, data: BookCreate) -> Book:
        with self._lock:
            book = Book(
                id=self._next_book_id,
                created_at=datetime.now(timezone.utc),
                **data.model_dump(),
            )
            self._books[book.id] = book
            self._next_book_id += 1
        logger.info(f"Stored book {book.id} '{book.title}'")
        return book.model_copy(deep=True)

    def update_book(self, book_id: int, updates: Dict[str, Any]) -> Book:
        forbidden = (set(updates) - set(Book.model_fields)) | ({"id", "created_at"} & set(updates))
        if forbidden:
            raise ValueError(f"Cannot update book fields: {sorted(forbidden)}")
        with self._lock:
            book = self._books.get(book_id)
            if book is None:
                raise NotFoundError(f"Book with id {book_id} not found")
            updated = book.model_copy(update=updates, deep=True)
            self._books[book_id] = updated
            return updated.model_copy(deep=True)

    # Orders
    def get_order(self, order_id: int) -> Optional[Order]:
        with self._lock:
            order = self._orders.get(order_id)
            return order.model_copy(deep=True) if order else None

    def create_order(self, data: OrderCreate) -> Order:
        with self._lock:
            order = Order(
                id=self._next_order_id,
                created_at=datetime.now(timezone.utc),
                **data.model_dump(),
            )
            self._orders[order.id] = order
            self._next_order_id += 1
        logger.info(f"Stored order {order.id} for book {order.book_id}")
        return order.model_copy(deep=True)

    def count_orders(self) -> int:
        with self._lock:
            return len(self._orders)
