"""Error handling utilities for solchat."""

import asyncio
import functools
import inspect
import logging
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorCategory(Enum):
    """Categories of errors, one per recovery strategy."""

    USER_INPUT = "user_input"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    COLLABORATOR = "collaborator"
    ROUTER = "router"
    UNKNOWN = "unknown"


class CollaboratorKind(str, Enum):
    """Structured failure kinds reported by external collaborators."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    UNAVAILABLE = "unavailable"
    INVALID_RESPONSE = "invalid_response"


class SolchatError(Exception):
    """Base exception for solchat errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        suggestions: Optional[list[str]] = None,
        original: Optional[Exception] = None,
    ):
        self.message = message
        self.category = category
        self.suggestions = suggestions or []
        self.original = original
        super().__init__(message)
        if original is not None:
            self.__cause__ = original


class UserInputError(SolchatError):
    """Unparseable amount, missing or invalid address, unsupported token."""

    def __init__(self, message: str, suggestions: Optional[list[str]] = None):
        super().__init__(message, category=ErrorCategory.USER_INPUT, suggestions=suggestions)


class InsufficientFundsError(SolchatError):
    """Balance or fee shortfall for a requested transfer."""

    def __init__(
        self,
        message: str,
        suggestions: Optional[list[str]] = None,
        shortfall: Optional[Any] = None,
        suggested_amount: Optional[Any] = None,
    ):
        super().__init__(
            message, category=ErrorCategory.INSUFFICIENT_FUNDS, suggestions=suggestions
        )
        self.shortfall = shortfall
        self.suggested_amount = suggested_amount


class CollaboratorError(SolchatError):
    """A price, history, wallet or model call failed."""

    def __init__(
        self,
        message: str,
        kind: CollaboratorKind = CollaboratorKind.UNAVAILABLE,
        source: str = "unknown",
        original: Optional[Exception] = None,
    ):
        super().__init__(message, category=ErrorCategory.COLLABORATOR, original=original)
        self.kind = kind
        self.source = source


class RouterError(SolchatError):
    """Unexpected failure while matching or running a handler."""

    def __init__(self, message: str, original: Optional[Exception] = None):
        super().__init__(message, category=ErrorCategory.ROUTER, original=original)


def classify_error(error: Exception, source: str = "unknown") -> SolchatError:
    """Classify an exception into a SolchatError by its type.

    Args:
        error: The original exception
        source: Name of the collaborator that raised it

    Returns:
        A SolchatError with a structured category (and kind, for collaborators)
    """
    if isinstance(error, SolchatError):
        return error

    if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException)):
        return CollaboratorError(
            "Request timed out", kind=CollaboratorKind.TIMEOUT, source=source, original=error
        )

    if isinstance(error, (httpx.ConnectError, httpx.NetworkError, ConnectionError)):
        return CollaboratorError(
            "Unable to reach the service",
            kind=CollaboratorKind.NETWORK,
            source=source,
            original=error,
        )

    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 429:
            kind = CollaboratorKind.RATE_LIMIT
        elif status >= 500:
            kind = CollaboratorKind.UNAVAILABLE
        else:
            kind = CollaboratorKind.INVALID_RESPONSE
        return CollaboratorError(
            f"Service returned HTTP {status}", kind=kind, source=source, original=error
        )

    if isinstance(error, (ValueError, KeyError, TypeError)) and source != "unknown":
        return CollaboratorError(
            "Unexpected response from service",
            kind=CollaboratorKind.INVALID_RESPONSE,
            source=source,
            original=error,
        )

    return SolchatError(str(error), category=ErrorCategory.UNKNOWN, original=error)


def handle_errors(fallback: Optional[T] = None, source: str = "unknown") -> Callable:
    """Decorator that turns collaborator failures into a fallback value.

    Args:
        fallback: Value to return on error (default None)
        source: Collaborator name used for classification and logging

    Returns:
        Decorated function
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                classified = classify_error(e, source=source)
                logger.warning(f"{source} unavailable ({classified.category.value}): {e}")
                return fallback

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                classified = classify_error(e, source=source)
                logger.warning(f"{source} unavailable ({classified.category.value}): {e}")
                return fallback

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
