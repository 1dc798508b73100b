"""
services/errors.py
------------------
Error taxonomy of the finance core and the boundary that turns it into
structured results.

Services raise the exceptions below anywhere in their call chain. Public
operations are decorated with `operation`, which converts a FinanceError
into a failure dict. Anything else is unanticipated and propagates to the
application's error handler untouched.
"""

from functools import wraps
from typing import Any, Callable

from utils.logger import get_logger

logger = get_logger(__name__)


class FinanceError(Exception):
    """Base class for expected, user-facing failures."""
    kind = "FinanceError"
    status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(FinanceError):
    kind = "NotFound"
    status = 404


class Forbidden(FinanceError):
    kind = "Forbidden"
    status = 403


class ValidationFailed(FinanceError):
    kind = "ValidationFailed"


class CategoryMismatch(FinanceError):
    kind = "CategoryMismatch"


class DuplicateCategory(FinanceError):
    kind = "DuplicateCategory"


class OverlappingBudget(FinanceError):
    kind = "OverlappingBudget"


class InsufficientFunds(FinanceError):
    kind = "InsufficientFunds"


class InvalidTransfer(FinanceError):
    kind = "InvalidTransfer"


class RateUnavailable(FinanceError):
    kind = "RateUnavailable"
    status = 502


def ok(data: Any = None, **extra) -> dict:
    """Build a success result."""
    result = {"success": True, "data": data}
    result.update(extra)
    return result


def failure(error: FinanceError) -> dict:
    """Build a failure result from a taxonomy error."""
    return {
        "success": False,
        "error": error.kind,
        "status": error.status,
        "message": error.message,
    }


def operation(func: Callable) -> Callable:
    """
    Decorator for public service operations.

    Returns the wrapped function's result unchanged on success and a
    failure dict when a FinanceError escapes.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except FinanceError as e:
            logger.warning(f"{func.__qualname__} failed: {e.kind}: {e.message}")
            return failure(e)

    return wrapper
