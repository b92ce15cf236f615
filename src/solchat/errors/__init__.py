"""Error handling for solchat.

Provides error translation and human-friendly error messages.
"""

from solchat.errors.translator import (
    TranslatedError,
    format_error_for_display,
    translate_error,
)

__all__ = [
    "TranslatedError",
    "translate_error",
    "format_error_for_display",
]
