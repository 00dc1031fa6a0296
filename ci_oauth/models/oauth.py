"""
Domain models for OAuth state and credential persistence.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

CREDENTIALS_KEY = "claudeAiOauth"


class PKCEState(BaseModel):
    """State left behind by the login start step, valid for a few minutes."""

    state: str
    code_verifier: str
    expires_at: int = Field(..., description="Epoch seconds.")

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class OAuthCredential(BaseModel):
    """Represents the token record stored under ``claudeAiOauth``."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")
    expires_at: int = Field(..., alias="expiresAt", description="Epoch milliseconds.")
    scopes: list[str] = Field(default_factory=list)
    is_max: bool = Field(True, alias="isMax")

    def is_expired(self, now_ms: int, buffer_ms: int = 0) -> bool:
        """True once ``now_ms`` is inside the buffer before expiry."""
        return now_ms >= self.expires_at - buffer_ms

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_token_response(
        cls,
        payload: Mapping[str, Any],
        *,
        now: int,
        default_scopes: Iterable[str],
    ) -> OAuthCredential:
        """
        Build a credential from a token endpoint response.

        ``now`` is in epoch seconds. Raises ``ValueError`` when the payload
        lacks the fields required to build a usable record.
        """
        missing = [
            key
            for key in ("access_token", "refresh_token", "expires_in")
            if payload.get(key) in (None, "")
        ]
        if missing:
            raise ValueError(f"Token response is missing {', '.join(missing)}.")

        try:
            expires_in = int(payload["expires_in"])
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Token response has a non-numeric expires_in: {payload['expires_in']!r}"
            ) from exc

        scope = payload.get("scope")
        scopes = str(scope).split() if scope is not None else list(default_scopes)

        return cls(
            access_token=str(payload["access_token"]),
            refresh_token=str(payload["refresh_token"]),
            expires_at=(now + expires_in) * 1000,
            scopes=scopes,
            is_max=True,
        )


__all__ = ["CREDENTIALS_KEY", "OAuthCredential", "PKCEState"]
