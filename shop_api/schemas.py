from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserRead(ApiModel):
    id: int
    username: str
    email: str
    role: str = "user"
    created_at: datetime


class ProductRead(ApiModel):
    id: int
    name: str
    description: str
    price: float
    category: str
    in_stock: bool
    quantity: int
    created_by: int
    created_at: datetime


class ProductQuery(BaseModel):
    category: Optional[str] = None
    in_stock: Optional[str] = None
    search: Optional[str] = None
    sort: Optional[str] = None
    page: int = 1
    limit: int = 10

    @field_validator("page", "limit", mode="before")
    def positive_or_default(cls, v, info):
        # Anything that is not a positive integer falls back to the default
        default = 1 if info.field_name == "page" else 10
        try:
            number = int(v)
        except (TypeError, ValueError):
            return default
        return number if number > 0 else default


# -------------------- Envelopes --------------------

class AuthResponse(ApiModel):
    success: bool = True
    message: str
    token: str
    user: UserRead


class ProfileResponse(ApiModel):
    success: bool = True
    user: UserRead


class UserList(ApiModel):
    success: bool = True
    count: int
    users: List[UserRead]


class ProductResponse(ApiModel):
    success: bool = True
    data: ProductRead


class ProductWriteResponse(ProductResponse):
    message: str


class ProductList(ApiModel):
    success: bool = True
    count: int
    data: List[ProductRead]


class ProductPage(ProductList):
    total: int
    page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class MessageResponse(ApiModel):
    success: bool = True
    message: str
