"""Request hardening that runs before routing.

SecurityHeadersMiddleware and ContentTypeMiddleware are Starlette
BaseHTTPMiddleware classes. RequestSanitizerMiddleware is plain ASGI because
it has to rebuild the request body and query string before FastAPI parses
them.
"""
import json
import logging
from typing import MutableMapping
from urllib.parse import parse_qsl, urlencode

from starlette.middleware.base import BaseHTTPMiddleware

from .errors import InjectionDetected, UnsupportedContentType, error_body
from .responses import SanitizedJSONResponse
from .sanitizer import filter_injection, sanitize_input

logger = logging.getLogger("shop_api.security")

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' 'unsafe-eval'; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data: https:; "
        "font-src 'self'; "
        "connect-src 'self'; "
        "frame-ancestors 'none'; "
        "form-action 'self';"
    ),
    "X-XSS-Protection": "1; mode=block",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}

ALLOWED_CONTENT_TYPES = ("application/json", "application/x-www-form-urlencoded")
BODY_METHODS = ("POST", "PUT", "PATCH")


def apply_security_headers(headers: MutableMapping[str, str]) -> MutableMapping[str, str]:
    for name, value in SECURITY_HEADERS.items():
        headers[name] = value
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        apply_security_headers(response.headers)
        return response


class ContentTypeMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        if request.method in BODY_METHODS:
            content_type = request.headers.get("content-type", "")
            if not any(allowed in content_type for allowed in ALLOWED_CONTENT_TYPES):
                logger.warning(
                    "content type rejected method=%s path=%s content_type=%r",
                    request.method, request.url.path, content_type,
                )
                exc = UnsupportedContentType()
                return SanitizedJSONResponse(error_body(exc.detail), status_code=exc.status_code)
        return await call_next(request)


def clean(value):
    return sanitize_input(filter_injection(value))


def clean_pairs(raw: str) -> str:
    pairs = parse_qsl(raw, keep_blank_values=True)
    return urlencode([(key, clean(value)) for key, value in pairs])


async def read_body(receive) -> bytes:
    chunks = []
    more_body = True
    while more_body:
        message = await receive()
        if message["type"] != "http.request":
            break
        chunks.append(message.get("body", b""))
        more_body = message.get("more_body", False)
    return b"".join(chunks)


class RequestSanitizerMiddleware:
    """Run the injection filter and input sanitizer over query and body."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            scope = dict(scope, query_string=clean_pairs(scope["query_string"].decode("latin-1")).encode())
            scope, receive = await self.clean_body(scope, receive)
        except InjectionDetected as exc:
            logger.warning("injection rejected method=%s path=%s", scope["method"], scope["path"])
            response = SanitizedJSONResponse(error_body(exc.detail), status_code=exc.status_code)
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)

    async def clean_body(self, scope, receive):
        headers = dict(scope["headers"])
        content_type = headers.get(b"content-type", b"").decode("latin-1")
        is_json = "application/json" in content_type
        is_form = "application/x-www-form-urlencoded" in content_type
        if not (is_json or is_form):
            return scope, receive

        body = await read_body(receive)
        if is_form:
            body = clean_pairs(body.decode("utf-8", errors="replace")).encode()
        else:
            try:
                payload = json.loads(body) if body else None
            except ValueError:
                # left for the route to reject as malformed
                payload = None
            if payload is not None:
                body = json.dumps(clean(payload)).encode()

        scope = dict(scope, headers=[
            (name, value) for name, value in scope["headers"] if name != b"content-length"
        ] + [(b"content-length", str(len(body)).encode())])

        replayed = False

        async def replay():
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        return scope, replay
