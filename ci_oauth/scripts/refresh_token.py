"""Refresh the stored OAuth credential when it is close to expiry.

Intended to run at the start of every workflow that needs a token::

    python -m ci_oauth.scripts.refresh_token            # refresh only when due
    python -m ci_oauth.scripts.refresh_token --force    # always refresh
    python -m ci_oauth.scripts.refresh_token --path /secrets/credentials.json

Whether or not a refresh happened, the current tokens are masked in the log
and published as ``access_token``, ``refresh_token`` and ``expires_at``
step outputs.
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import httpx

from ci_oauth.clients import AnthropicOAuthClient
from ci_oauth.core.cli import EXIT_FAILURE, EXIT_OK, ArgumentParser, parse_or_exit_code
from ci_oauth.core.config import AppSettings, get_settings
from ci_oauth.core.logging import configure_logging
from ci_oauth.services import (
    CredentialStore,
    GitHubActionsEmitter,
    OAuthFlowError,
    TokenRefresher,
)


def _build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        description="Refresh the stored OAuth token before it expires.",
    )
    parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Force refresh even if token is still valid.",
    )
    parser.add_argument(
        "--path",
        type=Path,
        default=None,
        help="Custom path to the credentials.json file.",
    )
    return parser


def _format_expiry(expires_at_ms: int) -> str:
    return datetime.fromtimestamp(expires_at_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def main(
    argv: list[str] | None = None,
    *,
    settings: Optional[AppSettings] = None,
    http_client: Optional[httpx.Client] = None,
) -> int:
    parsed = parse_or_exit_code(_build_parser(), argv)
    if isinstance(parsed, int):
        return parsed

    settings = settings or get_settings()
    configure_logging(settings.log_level)
    emitter = GitHubActionsEmitter(settings.ci_output.github_output)
    credential_store = CredentialStore(parsed.path or settings.storage.credentials_file)

    try:
        with AnthropicOAuthClient(settings.oauth, http_client=http_client) as client:
            refresher = TokenRefresher(client, credential_store, settings.oauth)
            current = credential_store.load()
            print(f"Current token expires at: {_format_expiry(current.expires_at)}")
            print(f"Token expired: {'true' if refresher.is_due(current) else 'false'}")
            result = refresher.refresh(force=parsed.force)
    except OAuthFlowError as exc:
        print(f"Error: {exc}")
        print("Failed to refresh token")
        return EXIT_FAILURE

    if result.refreshed:
        print("Token refreshed successfully!")
        print(f"New token expires at: {_format_expiry(result.credential.expires_at)}")
    else:
        print("Token is still valid. Use --force to refresh anyway.")

    emitter.emit_credential(result.credential)
    emitter.set_output("refreshed", result.refreshed)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
