"""FastAPI dependencies: shared state providers and the authenticator."""
import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, Header, Request

from . import models
from .auth import TokenStore
from .errors import BadRequest, Forbidden, Unauthenticated
from .repository import ProductRepository, UserRepository
from .seed import seed_products, seed_users
from .validation import FieldRule, validate

logger = logging.getLogger("shop_api.auth")


# Process-wide collections; tests swap them out through app.dependency_overrides

@lru_cache()
def get_user_repository() -> UserRepository:
    return seed_users(UserRepository())


@lru_cache()
def get_product_repository() -> ProductRepository:
    return seed_products(ProductRepository())


@lru_cache()
def get_token_store() -> TokenStore:
    return TokenStore()


def bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise Unauthenticated("No token provided")
    token = authorization[len("bearer "):].strip()
    if not token:
        raise Unauthenticated("No token provided")
    return token


def current_user(
    token: str = Depends(bearer_token),
    tokens: TokenStore = Depends(get_token_store),
    users: UserRepository = Depends(get_user_repository),
) -> models.User:
    user_id = tokens.resolve(token)
    user = users.get(user_id) if user_id is not None else None
    if user is None:
        raise Unauthenticated("Invalid token")
    return user


def require_admin(user: models.User = Depends(current_user)) -> models.User:
    if user.role != "admin":
        logger.warning("admin route refused user_id=%s", user.id)
        raise Forbidden()
    return user


async def read_payload(request: Request) -> dict:
    """Request body as a dict, from JSON or urlencoded form data."""
    content_type = request.headers.get("content-type", "")
    if "application/x-www-form-urlencoded" in content_type:
        form = await request.form()
        return dict(form)
    try:
        body = await request.json()
    except ValueError:
        raise BadRequest("Malformed JSON body")
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    return body


def validated(rules: List[FieldRule]):
    """Dependency returning the request payload after `rules` have passed."""

    async def dependency(payload: dict = Depends(read_payload)) -> dict:
        return validate(rules, payload)

    return dependency
