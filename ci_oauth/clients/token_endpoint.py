"""
Anthropic console OAuth token endpoint.

The endpoint is the one the browser login page talks to, so the
authorization-code grant carries the headers a browser would send.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Dict, Optional

import httpx

from ci_oauth.core.config import OAuthSettings

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "Content-Type": "application/json",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://claude.ai/",
    "Origin": "https://claude.ai",
}

_BODY_LIMIT = 1000


def safe_body(response: httpx.Response, limit: int = _BODY_LIMIT) -> str:
    """Return a safe, truncated response body for diagnostics."""
    try:
        return (response.text or "")[:limit]
    except Exception:  # pylint: disable=broad-except
        return "<unreadable>"


class TokenEndpointError(Exception):
    """Raised when the token endpoint cannot produce a usable payload."""

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


class AnthropicOAuthClient:
    """Exchange authorization codes and refresh tokens against the console."""

    def __init__(
        self,
        oauth_settings: OAuthSettings,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._oauth = oauth_settings
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client()

    def __enter__(self) -> AnthropicOAuthClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def exchange_authorization_code(
        self, code: str, *, code_verifier: str, state: str
    ) -> Dict[str, Any]:
        """Exchange an authorization code and PKCE verifier for a token payload."""
        payload = {
            "grant_type": "authorization_code",
            "client_id": self._oauth.client_id,
            "code": code,
            "redirect_uri": self._oauth.redirect_uri,
            "code_verifier": code_verifier,
            "state": state,
        }
        return self._post(payload, headers=BROWSER_HEADERS)

    def refresh_token(self, refresh_token: str) -> Dict[str, Any]:
        """Exchange a refresh token for a new token payload."""
        payload = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self._oauth.client_id,
        }
        return self._post(payload, headers={"Content-Type": "application/json"})

    def _post(self, payload: Dict[str, Any], *, headers: Dict[str, str]) -> Dict[str, Any]:
        logger.debug(
            "POST %s grant_type=%s", self._oauth.token_url, payload["grant_type"]
        )
        try:
            response = self._http.post(self._oauth.token_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise TokenEndpointError(f"Error making token request: {exc}") from exc

        if response.status_code != HTTPStatus.OK:
            body = safe_body(response)
            raise TokenEndpointError(
                f"Error response: {response.status_code} - {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise TokenEndpointError(
                f"Token endpoint returned invalid JSON: {exc}",
                status_code=response.status_code,
                body=safe_body(response),
            ) from exc

        if not isinstance(data, dict):
            raise TokenEndpointError(
                "Token endpoint returned a non-object JSON payload.",
                status_code=response.status_code,
                body=safe_body(response),
            )
        return data


__all__ = ["AnthropicOAuthClient", "BROWSER_HEADERS", "TokenEndpointError", "safe_body"]
