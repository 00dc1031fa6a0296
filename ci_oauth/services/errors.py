"""Failures surfaced by the token lifecycle services."""

from __future__ import annotations

from typing import Optional


class OAuthFlowError(Exception):
    """Base class for failures that abort a command with exit code 1."""


class StateInvalidError(OAuthFlowError):
    """The PKCE state file is missing, unreadable, or expired."""


class NoCredentialsError(OAuthFlowError):
    """The credential file is missing, unreadable, or lacks an OAuth record."""


class _TokenRequestError(OAuthFlowError):
    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ExchangeFailedError(_TokenRequestError):
    """The authorization code could not be exchanged for tokens."""


class RefreshFailedError(_TokenRequestError):
    """The refresh token could not be exchanged for new tokens."""


class CleanupWarning(UserWarning):
    """The state file survived a successful exchange."""


__all__ = [
    "CleanupWarning",
    "ExchangeFailedError",
    "NoCredentialsError",
    "OAuthFlowError",
    "RefreshFailedError",
    "StateInvalidError",
]
