"""Demo records loaded into fresh repositories."""
from datetime import datetime, timezone

from .auth import hash_password
from .repository import ProductRepository, UserRepository


def _at(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


USERS = [
    {"username": "admin", "email": "admin@example.com", "password": "admin123", "role": "admin",
     "created_at": _at(2024, 1, 1, 10, 0)},
    {"username": "user1", "email": "user1@example.com", "password": "password123", "role": "user",
     "created_at": _at(2024, 1, 2, 11, 30)},
    {"username": "user2", "email": "user2@example.com", "password": "password456", "role": "user",
     "created_at": _at(2024, 1, 3, 14, 20)},
]

PRODUCTS = [
    {"name": "Dell XPS 13 laptop", "description": "Powerful ultrabook with a 13 inch display",
     "price": 45000, "category": "electronics", "in_stock": True, "quantity": 15, "created_by": 1,
     "created_at": _at(2024, 1, 5, 9, 0)},
    {"name": "iPhone 15 smartphone", "description": "Flagship smartphone from Apple",
     "price": 55000, "category": "electronics", "in_stock": True, "quantity": 25, "created_by": 2,
     "created_at": _at(2024, 1, 6, 10, 30)},
    {"name": "Black T-shirt", "description": "Classic cut cotton T-shirt",
     "price": 800, "category": "clothing", "in_stock": True, "quantity": 50, "created_by": 1,
     "created_at": _at(2024, 1, 7, 11, 45)},
    {"name": "JavaScript for Beginners", "description": "A complete guide to learning JavaScript",
     "price": 600, "category": "books", "in_stock": False, "quantity": 0, "created_by": 3,
     "created_at": _at(2024, 1, 8, 14, 20)},
    {"name": "Sony WH-1000XM4 headphones", "description": "Wireless noise cancelling headphones",
     "price": 12000, "category": "electronics", "in_stock": True, "quantity": 8, "created_by": 2,
     "created_at": _at(2024, 1, 9, 16, 10)},
]


def seed_users(repo: UserRepository) -> UserRepository:
    for user in USERS:
        fields = dict(user)
        repo.create(password_hash=hash_password(fields.pop("password")), **fields)
    return repo


def seed_products(repo: ProductRepository) -> ProductRepository:
    for product in PRODUCTS:
        repo.create(**product)
    return repo
