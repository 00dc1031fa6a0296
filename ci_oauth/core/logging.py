"""
Logging utilities for the command-line tools.

Provides a consistent logging format and configuration.
"""

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    # CleanupWarning and friends end up in the same stream as everything else.
    logging.captureWarnings(True)


def redact_secret(secret: str | None, keep: int = 4) -> str:
    """Mask all but the last ``keep`` characters of a token for log lines."""
    if not secret:
        return ""
    if len(secret) <= keep:
        return "*" * len(secret)
    return f"{'*' * (len(secret) - keep)}{secret[-keep:]}"


__all__ = ["configure_logging", "redact_secret"]
