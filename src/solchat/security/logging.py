"""Secure logging for solchat.

User messages pass through logs at debug level, so anything that looks
like key material is redacted before a record is emitted.
"""

import logging
import re

# 64-byte secret keys encode to 86-88 base58 characters
_SECRET_KEY_PATTERN = re.compile(r"\b[1-9A-HJ-NP-Za-km-z]{80,90}\b")


class SensitiveDataFilter(logging.Filter):
    """Filter to prevent logging of sensitive data."""

    SENSITIVE_KEYWORDS = [
        "private_key",
        "private key",
        "mnemonic",
        "seed phrase",
        "secret",
        "api_key",
        "password",
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact log records containing sensitive data."""
        msg = str(record.msg)
        args = str(record.args) if record.args else ""
        combined = (msg + args).lower()

        if any(keyword in combined for keyword in self.SENSITIVE_KEYWORDS):
            record.msg = "[REDACTED - sensitive data]"
            record.args = None
        elif _SECRET_KEY_PATTERN.search(msg + args):
            record.msg = _SECRET_KEY_PATTERN.sub("[REDACTED]", record.getMessage())
            record.args = None
        return True


def setup_secure_logging(level: int = logging.WARNING) -> None:
    """Configure logging to filter sensitive data.

    Args:
        level: Level for the solchat logger
    """
    sensitive_filter = SensitiveDataFilter()

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Handler filters also cover records propagated from child loggers
    root_logger = logging.getLogger()
    root_logger.addFilter(sensitive_filter)
    for handler in root_logger.handlers:
        handler.addFilter(sensitive_filter)

    solchat_logger = logging.getLogger("solchat")
    solchat_logger.setLevel(level)
    solchat_logger.addFilter(sensitive_filter)
