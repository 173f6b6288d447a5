from __future__ import annotations
from typing import Any, Dict, Optional


class ODataError(Exception):
    """
    Base error for everything the query layer raises.
    Carries a human message plus a details dict for the HTTP layer.
    """
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ---------------------------------------------------------------------------
# Validation errors (raised before any parsing)
# ---------------------------------------------------------------------------

class ValidationError(ODataError):
    pass


class OrderingRequiredError(ValidationError):
    pass


# ---------------------------------------------------------------------------
# Translation errors (raised while compiling a request)
# ---------------------------------------------------------------------------

class TranslationError(ODataError):
    pass


class FilterParseError(TranslationError):
    def __init__(self, message: str, token: Optional[str] = None, position: Optional[int] = None):
        self.token = token
        self.position = position
        details: Dict[str, Any] = {}
        if token is not None:
            details["token"] = token
        if position is not None:
            details["position"] = position
        super().__init__(message, details)


class InvalidPropertyError(FilterParseError):
    def __init__(self, path: str, entity_type_name: str):
        self.path = path
        self.entity_type_name = entity_type_name
        super().__init__(f"Invalid property ({path}) on ({entity_type_name})", token=path)
        self.details["entity"] = entity_type_name


class UnsupportedFieldExpression(TranslationError):
    def __init__(self, expression: Any):
        self.expression = expression
        super().__init__(
            f"Unsupported field expression: {type(expression).__name__}",
            {"expression": repr(expression)},
        )


__all__ = [
    "ODataError",
    "ValidationError",
    "OrderingRequiredError",
    "TranslationError",
    "FilterParseError",
    "InvalidPropertyError",
    "UnsupportedFieldExpression",
]
