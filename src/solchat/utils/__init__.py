"""Utility modules for solchat."""

from solchat.utils.errors import (
    CollaboratorError,
    CollaboratorKind,
    ErrorCategory,
    InsufficientFundsError,
    RouterError,
    SolchatError,
    UserInputError,
    classify_error,
    handle_errors,
)

__all__ = [
    "SolchatError",
    "UserInputError",
    "InsufficientFundsError",
    "CollaboratorError",
    "CollaboratorKind",
    "RouterError",
    "ErrorCategory",
    "classify_error",
    "handle_errors",
]
