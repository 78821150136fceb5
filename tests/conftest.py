from typing import Generator

import pytest
from fastapi.testclient import TestClient

from shop_api.auth import TokenStore
from shop_api.deps import get_product_repository, get_token_store, get_user_repository
from shop_api.main import app
from shop_api.repository import ProductRepository, UserRepository
from shop_api.seed import seed_products, seed_users

ADMIN = ("admin@example.com", "admin123")
USER1 = ("user1@example.com", "password123")
USER2 = ("user2@example.com", "password456")


@pytest.fixture(scope="function")
def users() -> UserRepository:
    return seed_users(UserRepository())


@pytest.fixture(scope="function")
def products() -> ProductRepository:
    return seed_products(ProductRepository())


@pytest.fixture(scope="function")
def tokens() -> TokenStore:
    return TokenStore()


@pytest.fixture(scope="function")
def overrides(users, products, tokens) -> Generator:
    # Fresh seeded collections for every test
    app.dependency_overrides[get_user_repository] = lambda: users
    app.dependency_overrides[get_product_repository] = lambda: products
    app.dependency_overrides[get_token_store] = lambda: tokens
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(overrides) -> Generator:
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def login(client):
    def _login(credentials=USER1) -> str:
        email, password = credentials
        r = client.post("/api/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return r.json()["token"]
    return _login


@pytest.fixture(scope="function")
def auth_headers(login):
    def _headers(credentials=USER1) -> dict:
        return {"Authorization": f"Bearer {login(credentials)}"}
    return _headers
