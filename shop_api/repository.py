import itertools
import math
import threading
from datetime import datetime, timezone
from typing import Dict, Generic, List, NamedTuple, Optional, Type, TypeVar

from pydantic import BaseModel

from . import models, schemas

T = TypeVar("T", bound=BaseModel)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Repository(Generic[T]):
    """In-memory collection keyed by id.

    Ids come from a monotonic counter, so an id is never handed out twice
    even after the newest record is deleted.
    """

    model: Type[T]

    def __init__(self):
        self._items: Dict[int, T] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    def get(self, item_id: int) -> Optional[T]:
        return self._items.get(item_id)

    def list(self) -> List[T]:
        with self._lock:
            return list(self._items.values())

    def count(self) -> int:
        return len(self._items)

    def create(self, **fields) -> T:
        fields.pop("id", None)
        fields.setdefault("created_at", utcnow())
        with self._lock:
            item = self.model(id=next(self._ids), **fields)
            self._items[item.id] = item
        return item

    def update(self, item_id: int, **fields) -> Optional[T]:
        # shallow merge; identity and creation time are fixed
        fields.pop("id", None)
        fields.pop("created_at", None)
        with self._lock:
            existing = self._items.get(item_id)
            if existing is None:
                return None
            updated = existing.model_copy(update=fields)
            self._items[item_id] = updated
        return updated

    def delete(self, item_id: int) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None


class UserRepository(Repository[models.User]):
    model = models.User

    def find_by_email(self, email: str) -> Optional[models.User]:
        email = email.strip().lower()
        return next((u for u in self.list() if u.email == email), None)

    def find_by_username(self, username: str) -> Optional[models.User]:
        username = username.lower()
        return next((u for u in self.list() if u.username.lower() == username), None)

    @staticmethod
    def public(user: models.User) -> schemas.UserRead:
        return schemas.UserRead.model_validate(user)

    def list_public(self) -> List[schemas.UserRead]:
        return [self.public(u) for u in self.list()]


class Page(NamedTuple):
    items: List[models.Product]
    total: int
    page: int
    total_pages: int
    has_next: bool
    has_prev: bool


SORTS = {
    "price_asc": (lambda p: p.price, False),
    "price_desc": (lambda p: p.price, True),
    "newest": (lambda p: p.created_at, True),
    "oldest": (lambda p: p.created_at, False),
}


class ProductRepository(Repository[models.Product]):
    model = models.Product

    def query(self, q: schemas.ProductQuery) -> Page:
        """Filter, then sort, then cut out one page."""
        products = self.list()

        if q.category:
            products = [p for p in products if p.category == q.category]
        if q.in_stock is not None:
            wanted = q.in_stock == "true"
            products = [p for p in products if p.in_stock == wanted]
        if q.search:
            term = q.search.lower()
            products = [
                p for p in products
                if term in p.name.lower() or term in p.description.lower()
            ]

        if q.sort in SORTS:
            key, reverse = SORTS[q.sort]
            products.sort(key=key, reverse=reverse)

        start = (q.page - 1) * q.limit
        end = q.page * q.limit
        total = len(products)
        return Page(
            items=products[start:end],
            total=total,
            page=q.page,
            total_pages=math.ceil(total / q.limit),
            has_next=end < total,
            has_prev=start > 0,
        )

    def by_owner(self, user_id: int) -> List[models.Product]:
        return [p for p in self.list() if p.created_by == user_id]
