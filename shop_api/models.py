from datetime import datetime

from pydantic import BaseModel

ROLES = ("admin", "user")
CATEGORIES = ("electronics", "clothing", "books", "food", "other")


class User(BaseModel):
    id: int
    username: str
    email: str
    # passlib hash; never leaves the repository except through verify_password
    password_hash: str
    role: str = "user"
    created_at: datetime


class Product(BaseModel):
    id: int
    name: str
    description: str
    price: float
    category: str
    # derived from quantity on create only; updates may set it independently
    in_stock: bool
    quantity: int = 0
    created_by: int
    created_at: datetime
