"""Declarative field rules for request payloads.

A rule is a chain of steps run in declaration order. Validators record a
violation and let the chain continue, so one field can report several
problems at once; sanitizers rewrite the value for the steps after them.
"""
import math
import re
from typing import Any, Callable, Dict, Iterable, List, Optional

from email_validator import EmailNotValidError, validate_email

from .errors import ValidationFailed
from .models import CATEGORIES

MISSING = object()


def as_text(value: Any) -> str:
    if value is MISSING or value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_float(text: str) -> bool:
    try:
        number = float(text)
    except ValueError:
        return False
    return math.isfinite(number)


def _is_int(text: str) -> bool:
    return re.fullmatch(r"[+-]?\d+", text.strip()) is not None


class FieldRule:
    def __init__(self, name: str, location: str = "body"):
        self.name = name
        self.location = location
        self.is_optional = False
        self.steps: List[tuple] = []

    def optional(self) -> "FieldRule":
        self.is_optional = True
        return self

    def check(self, predicate: Callable[[Any], bool], message: str) -> "FieldRule":
        self.steps.append(("check", predicate, message))
        return self

    def apply(self, transform: Callable[[Any], Any]) -> "FieldRule":
        self.steps.append(("apply", transform, None))
        return self

    # sanitizers

    def trim(self) -> "FieldRule":
        return self.apply(lambda v: as_text(v).strip())

    def lower(self) -> "FieldRule":
        return self.apply(lambda v: as_text(v).lower())

    def to_float(self) -> "FieldRule":
        return self.apply(lambda v: float(as_text(v)) if _is_float(as_text(v)) else v)

    def to_int(self) -> "FieldRule":
        return self.apply(lambda v: int(as_text(v)) if _is_int(as_text(v)) else v)

    def to_boolean(self) -> "FieldRule":
        return self.apply(lambda v: as_text(v).lower() in ("true", "1"))

    # validators

    def is_string(self, message: str) -> "FieldRule":
        # absent values are reported by not_empty/length instead
        return self.check(lambda v: v is MISSING or v is None or isinstance(v, str), message)

    def not_empty(self, message: str) -> "FieldRule":
        return self.check(lambda v: as_text(v) != "", message)

    def length(self, message: str, min: int = 0, max: Optional[int] = None) -> "FieldRule":
        def within(v):
            size = len(as_text(v))
            return size >= min and (max is None or size <= max)
        return self.check(within, message)

    def matches(self, pattern: str, message: str) -> "FieldRule":
        compiled = re.compile(pattern)
        return self.check(lambda v: compiled.search(as_text(v)) is not None, message)

    def is_email(self, message: str) -> "FieldRule":
        def valid(v):
            try:
                validate_email(as_text(v), check_deliverability=False)
            except EmailNotValidError:
                return False
            return True
        return self.check(valid, message)

    def is_float(self, message: str, min: Optional[float] = None) -> "FieldRule":
        def valid(v):
            text = as_text(v)
            if isinstance(v, bool) or not _is_float(text):
                return False
            return min is None or float(text) >= min
        return self.check(valid, message)

    def is_int(self, message: str, min: Optional[int] = None) -> "FieldRule":
        def valid(v):
            text = as_text(v)
            if isinstance(v, bool) or not _is_int(text):
                return False
            return min is None or int(text) >= min
        return self.check(valid, message)

    def is_in(self, choices: Iterable[str], message: str) -> "FieldRule":
        allowed = frozenset(choices)
        return self.check(lambda v: as_text(v) in allowed, message)

    def is_boolean(self, message: str) -> "FieldRule":
        return self.check(lambda v: as_text(v).lower() in ("true", "false", "1", "0"), message)

    def run(self, data: Dict[str, Any]):
        """Return (value, violations); value is MISSING when the field is absent."""
        value = data.get(self.name, MISSING)
        if value is MISSING and self.is_optional:
            return MISSING, []

        violations = []
        for kind, fn, message in self.steps:
            if kind == "apply":
                value = fn(value)
            elif not fn(value):
                violations.append({"field": self.name, "message": message, "location": self.location})
        return value, violations


def validate(rules: List[FieldRule], data: Dict[str, Any]) -> Dict[str, Any]:
    """Run every rule against `data`.

    Returns a copy of `data` with transformed values; raises ValidationFailed
    listing all violations in rule order.
    """
    result = dict(data)
    violations = []
    for rule in rules:
        value, errors = rule.run(data)
        violations.extend(errors)
        if value is not MISSING:
            result[rule.name] = value
    if violations:
        raise ValidationFailed(violations)
    return result


PASSWORD_SYMBOLS = r"[!@#$%^&*(),.?\":{}|<>]"

REGISTER_RULES = [
    FieldRule("username")
    .is_string("Username must be a string")
    .trim()
    .not_empty("Username is required")
    .length("Username must be between 3 and 30 characters", min=3, max=30)
    .matches(r"^[a-zA-Z0-9_]+$", "Only letters, digits and underscores are allowed"),
    FieldRule("email")
    .is_string("Email must be a string")
    .trim()
    .lower()
    .is_email("Enter a valid email"),
    FieldRule("password")
    .is_string("Password must be a string")
    .length("Password must be at least 8 characters long", min=8)
    .matches(r"[A-Z]", "Password must contain at least one uppercase letter")
    .matches(r"[a-z]", "Password must contain at least one lowercase letter")
    .matches(r"[0-9]", "Password must contain at least one digit")
    .matches(PASSWORD_SYMBOLS, "Password must contain at least one special character"),
]


def product_rules(partial: bool = False) -> List[FieldRule]:
    def field(name):
        rule = FieldRule(name)
        return rule.optional() if partial else rule

    rules = [
        field("name")
        .is_string("Product name must be a string")
        .trim()
        .not_empty("Product name is required")
        .length("Name must not exceed 100 characters", max=100),
        field("description")
        .is_string("Product description must be a string")
        .trim()
        .not_empty("Product description is required")
        .length("Description must not exceed 500 characters", max=500),
        field("price")
        .is_float("Price must be a non-negative number", min=0)
        .to_float(),
        field("category")
        .is_in(CATEGORIES, "Invalid category"),
        FieldRule("quantity")
        .optional()
        .is_int("Quantity cannot be negative", min=0)
        .to_int(),
    ]
    if partial:
        rules.append(
            FieldRule("inStock").optional().is_boolean("inStock must be a boolean").to_boolean()
        )
    return rules


PRODUCT_RULES = product_rules()
PRODUCT_UPDATE_RULES = product_rules(partial=True)
