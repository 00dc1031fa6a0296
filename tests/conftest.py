"""Pytest configuration shared across the suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from ci_oauth.core.config import (
    AppSettings,
    CIOutputSettings,
    OAuthSettings,
    StorageSettings,
    get_settings,
)


class TokenEndpointStub:
    """Stands in for the token endpoint and records every request."""

    def __init__(self) -> None:
        self.status_code = 200
        self.payload: Any = {
            "access_token": "new-access-token",
            "refresh_token": "new-refresh-token",
            "expires_in": 28800,
        }
        self.text: Optional[str] = None
        self.error: Optional[Exception] = None
        self.requests: list[httpx.Request] = []
        self.client = httpx.Client(transport=httpx.MockTransport(self._handle))

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep stray .env files and default relative paths inside tmp_path."""
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def token_endpoint():
    stub = TokenEndpointStub()
    yield stub
    stub.client.close()


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        oauth=OAuthSettings(token_url="https://oauth.example.com/v1/oauth/token"),
        storage=StorageSettings(
            state_file=tmp_path / "claude_oauth_state.json",
            credentials_file=tmp_path / "credentials.json",
        ),
        ci_output=CIOutputSettings(github_output=tmp_path / "github_output"),
    )
