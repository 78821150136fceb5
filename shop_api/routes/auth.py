import logging

from fastapi import APIRouter, Depends

from .. import models, schemas
from ..auth import TokenStore, hash_password, verify_password
from ..deps import current_user, get_token_store, get_user_repository, read_payload, require_admin, validated
from ..errors import BadRequest, Conflict, Unauthenticated
from ..repository import UserRepository
from ..validation import REGISTER_RULES

logger = logging.getLogger("shop_api.auth")

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=schemas.AuthResponse, status_code=201)
def register(
    data: dict = Depends(validated(REGISTER_RULES)),
    users: UserRepository = Depends(get_user_repository),
    tokens: TokenStore = Depends(get_token_store),
):
    if users.find_by_email(data["email"]):
        raise Conflict("A user with this email already exists")
    if users.find_by_username(data["username"]):
        raise Conflict("A user with this username already exists")

    # role is never taken from the request
    user = users.create(
        username=data["username"],
        email=data["email"],
        password_hash=hash_password(data["password"]),
        role="user",
    )
    token = tokens.issue(user.id, user.role)
    logger.info("registered user_id=%s", user.id)
    return schemas.AuthResponse(
        message="User registered successfully", token=token, user=users.public(user)
    )


@router.post("/login", response_model=schemas.AuthResponse)
def login(
    payload: dict = Depends(read_payload),
    users: UserRepository = Depends(get_user_repository),
    tokens: TokenStore = Depends(get_token_store),
):
    email = payload.get("email")
    password = payload.get("password")
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        raise BadRequest("Please provide email and password")

    user = users.find_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("failed login email=%s", email)
        raise Unauthenticated("Invalid email or password")

    token = tokens.issue(user.id, user.role)
    return schemas.AuthResponse(message="Login successful", token=token, user=users.public(user))


@router.get("/profile", response_model=schemas.ProfileResponse)
async def profile(user: models.User = Depends(current_user)):
    return schemas.ProfileResponse(user=UserRepository.public(user))


@router.get("/users", response_model=schemas.UserList)
async def list_users(
    admin: models.User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    public = users.list_public()
    return schemas.UserList(count=len(public), users=public)
