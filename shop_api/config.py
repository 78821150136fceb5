"""Runtime configuration for the app (toggleable during tests/runtime)."""
import os
from typing import NamedTuple, Tuple


class ConfigState(NamedTuple):
    environment: str
    jwt_secret: str
    token_ttl: int
    log_level: str
    host: str
    port: int
    shutdown_timeout: int
    cors_origins: Tuple[str, ...]


def load_from_env() -> ConfigState:
    origins = os.getenv("CORS_ORIGINS", "*")
    return ConfigState(
        environment=os.getenv("APP_ENV", "production").lower(),
        jwt_secret=os.getenv("JWT_SECRET", "dev-secret-change-me-before-deploying"),
        token_ttl=int(os.getenv("TOKEN_TTL_SECONDS", str(60 * 60 * 24))),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        shutdown_timeout=int(os.getenv("SHUTDOWN_TIMEOUT_SECONDS", "10")),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )


state = load_from_env()


def set_environment(value: str):
    global state
    state = state._replace(environment=value.lower())


def is_development() -> bool:
    return state.environment == "development"
