"""
Helpers for checking and refreshing the stored OAuth credential.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable

from ci_oauth.clients.token_endpoint import AnthropicOAuthClient, TokenEndpointError
from ci_oauth.core.config import OAuthSettings
from ci_oauth.core.logging import redact_secret
from ci_oauth.models.oauth import OAuthCredential
from ci_oauth.services.credential_store import CredentialStore
from ci_oauth.services.errors import RefreshFailedError

logger = logging.getLogger(__name__)


class RefreshOutcome(enum.Enum):
    VALID = "valid"
    REFRESHED = "refreshed"


@dataclass(frozen=True)
class RefreshResult:
    outcome: RefreshOutcome
    credential: OAuthCredential

    @property
    def refreshed(self) -> bool:
        return self.outcome is RefreshOutcome.REFRESHED


class TokenRefresher:
    """Refreshes the stored credential once it is inside the safety buffer."""

    def __init__(
        self,
        oauth_client: AnthropicOAuthClient,
        credential_store: CredentialStore,
        oauth_settings: OAuthSettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._oauth = oauth_client
        self._credentials = credential_store
        self._settings = oauth_settings
        self._clock = clock

    def is_due(self, credential: OAuthCredential) -> bool:
        now_ms = int(self._clock() * 1000)
        return credential.is_expired(now_ms, self._settings.refresh_buffer_ms)

    def refresh(self, *, force: bool = False) -> RefreshResult:
        """
        Refresh the credential when it is due or ``force`` is set.

        The file is only rewritten after a complete, valid response; every
        failure leaves it exactly as it was.
        """
        document = self._credentials.read_document()
        current = self._credentials.load(document)

        if not self.is_due(current) and not force:
            logger.debug("Token valid beyond the refresh buffer; skipping refresh")
            return RefreshResult(RefreshOutcome.VALID, current)

        logger.info(
            "Refreshing token (refresh token %s)...",
            redact_secret(current.refresh_token),
        )
        try:
            payload = self._oauth.refresh_token(current.refresh_token)
            refreshed = OAuthCredential.from_token_response(
                payload,
                now=int(self._clock()),
                default_scopes=self._settings.default_scopes,
            )
        except TokenEndpointError as exc:
            raise RefreshFailedError(
                str(exc), status_code=exc.status_code, body=exc.body
            ) from exc
        except ValueError as exc:
            raise RefreshFailedError(f"Unusable token response: {exc}") from exc

        try:
            self._credentials.save(refreshed, document)
        except OSError as exc:
            raise RefreshFailedError(f"Error updating credentials file: {exc}") from exc

        return RefreshResult(RefreshOutcome.REFRESHED, refreshed)


__all__ = ["RefreshOutcome", "RefreshResult", "TokenRefresher"]
