import re
from typing import Any

import bleach
from markupsafe import escape

from .errors import InjectionDetected

SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
UNSAFE_CHARS_RE = re.compile(r"[$\[\]{}]")

# Query operators rejected outright when they appear anywhere in a string value
MONGO_OPERATORS = (
    "$where", "$ne", "$gt", "$gte", "$lt", "$lte", "$in", "$nin",
    "$and", "$or", "$not", "$nor", "$exists", "$type", "$mod", "$regex",
    "$text", "$expr", "$jsonSchema", "$all", "$elemMatch", "$size",
)


def _walk(value: Any, fn) -> Any:
    """Return a copy of `value` with `fn` applied to every string leaf."""
    if isinstance(value, str):
        return fn(value)
    if isinstance(value, dict):
        return {key: _walk(item, fn) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_walk(item, fn) for item in value]
    return value


def clean_text(value: str) -> str:
    """Drop <script> blocks, then HTML-escape what is left."""
    return str(escape(SCRIPT_RE.sub("", value)))


def strip_tags(value: str) -> str:
    return bleach.clean(value, tags=[], attributes={}, strip=True)


def guard_text(value: str) -> str:
    for op in MONGO_OPERATORS:
        if op in value:
            raise InjectionDetected()
    return UNSAFE_CHARS_RE.sub("", value)


def sanitize_input(value: Any) -> Any:
    """Escape markup in every string of inbound request data.

    Mapping keys and sequence order are preserved; numbers, booleans and
    None pass through. The argument is never modified.
    """
    return _walk(value, clean_text)


def sanitize_output(value: Any) -> Any:
    """Strip all tags from every string of an outbound payload."""
    return _walk(value, strip_tags)


def filter_injection(value: Any) -> Any:
    """Reject query-operator payloads, strip `$[]{}` from everything else.

    Raises InjectionDetected on the first string holding a deny-listed
    operator.
    """
    return _walk(value, guard_text)
