"""
Authorization-code grant.

Turns a pasted authorization code and the stored PKCE state into a
persisted credential record.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from ci_oauth.clients.token_endpoint import AnthropicOAuthClient, TokenEndpointError
from ci_oauth.core.config import OAuthSettings
from ci_oauth.models.oauth import OAuthCredential
from ci_oauth.services.credential_store import CredentialStore
from ci_oauth.services.errors import ExchangeFailedError
from ci_oauth.services.state_store import PKCEStateStore

logger = logging.getLogger(__name__)


def normalize_authorization_code(code: str) -> str:
    """Drop anything after the first ``#`` or ``&`` copied along with the code."""
    return code.split("#", 1)[0].split("&", 1)[0]


class TokenExchanger:
    """Exchange an authorization code for tokens and store them."""

    def __init__(
        self,
        oauth_client: AnthropicOAuthClient,
        state_store: PKCEStateStore,
        credential_store: CredentialStore,
        oauth_settings: OAuthSettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._oauth = oauth_client
        self._states = state_store
        self._credentials = credential_store
        self._settings = oauth_settings
        self._clock = clock

    def exchange(self, authorization_code: str) -> OAuthCredential:
        code = normalize_authorization_code(authorization_code)
        state = self._states.load(now=self._clock())

        logger.info("Exchanging authorization code for tokens...")
        try:
            payload = self._oauth.exchange_authorization_code(
                code,
                code_verifier=state.code_verifier,
                state=state.state,
            )
            credential = OAuthCredential.from_token_response(
                payload,
                now=int(self._clock()),
                default_scopes=self._settings.default_scopes,
            )
        except TokenEndpointError as exc:
            raise ExchangeFailedError(
                str(exc), status_code=exc.status_code, body=exc.body
            ) from exc
        except ValueError as exc:
            raise ExchangeFailedError(f"Unusable token response: {exc}") from exc

        logger.info("Received scopes: %s", ", ".join(credential.scopes))

        try:
            self._credentials.save(credential)
        except OSError as exc:
            raise ExchangeFailedError(f"Error saving credentials: {exc}") from exc

        self._states.delete()
        return credential


__all__ = ["TokenExchanger", "normalize_authorization_code"]
