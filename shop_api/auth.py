import itertools
import threading
import time
from typing import Dict, Optional

import jwt
from passlib.context import CryptContext

from . import config

# Use pbkdf2_sha256 as default to avoid bcrypt 72-byte limitation in some envs
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

ALGORITHM = "HS256"

_serial = itertools.count(1)


def create_access_token(user_id: int, role: str, expires_delta: Optional[int] = None) -> str:
    now = int(time.time())
    exp = now + (expires_delta or config.state.token_ttl)
    # jti keeps two tokens minted for the same user in the same second distinct
    jti = f"{user_id}-{time.time_ns()}-{next(_serial)}"
    payload = {"sub": str(user_id), "role": role, "iat": now, "exp": exp, "jti": jti}
    return jwt.encode(payload, config.state.jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.state.jwt_secret, algorithms=[ALGORITHM])


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


class TokenStore:
    """Live session tokens, at most one per user.

    A signed token is only honoured while it is the one stored for its user;
    issuing a new token silently retires the previous one.
    """

    def __init__(self):
        self._by_user: Dict[int, str] = {}
        self._by_token: Dict[str, int] = {}
        self._lock = threading.Lock()

    def issue(self, user_id: int, role: str) -> str:
        token = create_access_token(user_id, role)
        with self._lock:
            previous = self._by_user.get(user_id)
            if previous is not None:
                self._by_token.pop(previous, None)
            self._by_user[user_id] = token
            self._by_token[token] = user_id
        return token

    def resolve(self, token: str) -> Optional[int]:
        """Owning user id of a live, correctly signed, unexpired token."""
        with self._lock:
            user_id = self._by_token.get(token)
        if user_id is None:
            return None
        try:
            payload = decode_access_token(token)
        except jwt.PyJWTError:
            return None
        if payload.get("sub") != str(user_id):
            return None
        return user_id

    def revoke(self, user_id: int) -> bool:
        with self._lock:
            token = self._by_user.pop(user_id, None)
            if token is None:
                return False
            self._by_token.pop(token, None)
        return True

    def clear(self):
        with self._lock:
            self._by_user.clear()
            self._by_token.clear()

    def __len__(self) -> int:
        return len(self._by_user)
