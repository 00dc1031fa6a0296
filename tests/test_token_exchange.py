try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
from pathlib import Path

import pytest

from ci_oauth.clients import AnthropicOAuthClient
from ci_oauth.services import (
    CleanupWarning,
    CredentialStore,
    ExchangeFailedError,
    PKCEStateStore,
    StateInvalidError,
    TokenExchanger,
    normalize_authorization_code,
)

NOW = 1_700_000_000.0


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("abc123", "abc123"),
        ("abc123#state=xyz", "abc123"),
        ("abc123&state=xyz", "abc123"),
        ("abc&def#ghi", "abc"),
        ("abc#def&ghi", "abc"),
        ("#leading", ""),
    ],
)
def test_normalize_authorization_code(raw: str, expected: str) -> None:
    assert normalize_authorization_code(raw) == expected


@pytest.fixture
def exchanger_factory(settings, token_endpoint):
    def build(clock=lambda: NOW) -> TokenExchanger:
        return TokenExchanger(
            AnthropicOAuthClient(settings.oauth, http_client=token_endpoint.client),
            PKCEStateStore(settings.storage.state_file),
            CredentialStore(settings.storage.credentials_file),
            settings.oauth,
            clock=clock,
        )

    return build


def _write_state(settings, expires_at: float = NOW + 600) -> None:
    settings.storage.state_file.write_text(
        json.dumps(
            {"state": "state-abc", "code_verifier": "verifier-abc", "expires_at": int(expires_at)}
        )
    )


def test_exchange_persists_credentials_and_consumes_state(
    settings, token_endpoint, exchanger_factory
) -> None:
    _write_state(settings)

    credential = exchanger_factory().exchange("the-code#fragment")

    assert token_endpoint.calls == 1
    body = token_endpoint.last_body()
    assert body["code"] == "the-code"
    assert body["code_verifier"] == "verifier-abc"
    assert body["state"] == "state-abc"

    assert credential.expires_at == (int(NOW) + 28800) * 1000
    assert credential.scopes == ["user:inference", "user:profile"]
    stored = json.loads(settings.storage.credentials_file.read_text())
    assert stored == {"claudeAiOauth": credential.to_record()}
    assert not settings.storage.state_file.exists()


def test_exchange_overwrites_existing_credentials_file(
    settings, exchanger_factory
) -> None:
    settings.storage.credentials_file.write_text(json.dumps({"stale": True}))
    _write_state(settings)

    exchanger_factory().exchange("code")

    stored = json.loads(settings.storage.credentials_file.read_text())
    assert list(stored) == ["claudeAiOauth"]


def test_expired_state_aborts_before_network(
    settings, token_endpoint, exchanger_factory
) -> None:
    _write_state(settings, expires_at=NOW - 1)

    with pytest.raises(StateInvalidError):
        exchanger_factory().exchange("code")

    assert token_endpoint.calls == 0
    assert not settings.storage.credentials_file.exists()


def test_missing_state_aborts_before_network(token_endpoint, exchanger_factory) -> None:
    with pytest.raises(StateInvalidError):
        exchanger_factory().exchange("code")

    assert token_endpoint.calls == 0


def test_rejected_code_writes_nothing_and_keeps_state(
    settings, token_endpoint, exchanger_factory
) -> None:
    _write_state(settings)
    token_endpoint.status_code = 401
    token_endpoint.text = "invalid code"

    with pytest.raises(ExchangeFailedError) as excinfo:
        exchanger_factory().exchange("code")

    assert excinfo.value.status_code == 401
    assert excinfo.value.body == "invalid code"
    assert not settings.storage.credentials_file.exists()
    assert settings.storage.state_file.exists()


def test_incomplete_payload_is_an_exchange_failure(
    settings, token_endpoint, exchanger_factory
) -> None:
    _write_state(settings)
    token_endpoint.payload = {"access_token": "only-access"}

    with pytest.raises(ExchangeFailedError, match="refresh_token"):
        exchanger_factory().exchange("code")

    assert not settings.storage.credentials_file.exists()


def test_returned_scope_is_recorded(settings, token_endpoint, exchanger_factory) -> None:
    _write_state(settings)
    token_endpoint.payload = {**token_endpoint.payload, "scope": "org:create_api_key user:inference"}

    credential = exchanger_factory().exchange("code")

    assert credential.scopes == ["org:create_api_key", "user:inference"]


def test_state_cleanup_failure_is_only_a_warning(
    settings, exchanger_factory, monkeypatch: pytest.MonkeyPatch
) -> None:
    _write_state(settings)

    def refuse(self, missing_ok=False):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(Path, "unlink", refuse)

    with pytest.warns(CleanupWarning, match="read-only filesystem"):
        credential = exchanger_factory().exchange("code")

    stored = json.loads(settings.storage.credentials_file.read_text())
    assert stored == {"claudeAiOauth": credential.to_record()}
    assert settings.storage.state_file.exists()
