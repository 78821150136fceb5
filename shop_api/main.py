import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .deps import get_token_store
from .errors import ApiError, error_body
from .log import RequestLoggingMiddleware, configure_logging
from .middleware import (
    ContentTypeMiddleware,
    RequestSanitizerMiddleware,
    SecurityHeadersMiddleware,
    apply_security_headers,
)
from .responses import SanitizedJSONResponse
from .routes import auth as auth_routes
from .routes import products as product_routes

logger = configure_logging(config.state.log_level)
error_logger = logging.getLogger("shop_api.errors")

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("shop api started environment=%s", config.state.environment)
    yield
    # sessions do not outlive the process
    get_token_store().clear()
    logger.info("shop api stopped")


app = FastAPI(title="Shop API", version="1.0.0", default_response_class=SanitizedJSONResponse, lifespan=lifespan)

# Added innermost first: requests pass logging, CORS, headers, content type,
# then sanitization before reaching a route.
app.add_middleware(RequestSanitizerMiddleware)
app.add_middleware(ContentTypeMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.state.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(auth_routes.router)
app.include_router(product_routes.router)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == 404 and not isinstance(exc, ApiError):
        message = "Route not found"
    return SanitizedJSONResponse(
        error_body(message, getattr(exc, "errors", None)),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    error_logger.exception("unhandled error method=%s path=%s", request.method, request.url.path)
    detail = str(exc) if config.is_development() else None
    response = SanitizedJSONResponse(
        error_body("Something went wrong on the server", error=detail), status_code=500
    )
    # rendered by ServerErrorMiddleware, outside the header middleware
    apply_security_headers(response.headers)
    return response


@app.get("/")
async def index():
    return {
        "message": "Simple REST API on FastAPI",
        "version": app.version,
        "endpoints": {
            "auth": {
                "register": "POST /api/auth/register",
                "login": "POST /api/auth/login",
                "profile": "GET /api/auth/profile (token required)",
                "users": "GET /api/auth/users (admin token required)",
            },
            "products": {
                "getAll": "GET /api/products",
                "getOne": "GET /api/products/:id",
                "create": "POST /api/products (token required)",
                "update": "PUT /api/products/:id (token required)",
                "delete": "DELETE /api/products/:id (token required)",
                "mine": "GET /api/products/user/my-products (token required)",
            },
        },
    }


@app.get("/api/status")
async def status():
    return {
        "status": "online",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
    }
