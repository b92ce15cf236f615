"""Security utilities for solchat - log redaction."""

from solchat.security.logging import SensitiveDataFilter, setup_secure_logging

__all__ = ["SensitiveDataFilter", "setup_secure_logging"]
