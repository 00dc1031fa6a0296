"""Complete the OAuth login by exchanging an authorization code for tokens.

Run after the login start step has written the PKCE state file and the
operator has pasted back the code shown on the callback page::

    python -m ci_oauth.scripts.exchange_code 'abc123#state=...'

The resulting credentials are written to ``credentials.json`` (override with
``CREDENTIALS_FILE``) and the step publishes ``success`` and ``expires_at``
outputs for later workflow steps.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import Optional

import httpx

from ci_oauth.clients import AnthropicOAuthClient
from ci_oauth.core.cli import EXIT_FAILURE, EXIT_OK, ArgumentParser
from ci_oauth.core.config import AppSettings, get_settings
from ci_oauth.core.logging import configure_logging
from ci_oauth.services import (
    CredentialStore,
    GitHubActionsEmitter,
    OAuthFlowError,
    PKCEStateStore,
    TokenExchanger,
)


def _build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        description="Completes OAuth login and exchanges code for tokens.",
    )
    parser.add_argument(
        "authorization_code",
        help="The code received from the OAuth callback.",
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
    parser = _build_parser()
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        parser.print_help()
        return EXIT_FAILURE
    if "-h" in argv or "--help" in argv:
        parser.print_help()
        return EXIT_OK

    # Codes are base64url and may start with "-", so argparse never sees them.
    authorization_code = argv[0]

    settings = settings or get_settings()
    configure_logging(settings.log_level)
    emitter = GitHubActionsEmitter(settings.ci_output.github_output)
    credential_store = CredentialStore(settings.storage.credentials_file)

    try:
        with AnthropicOAuthClient(settings.oauth, http_client=http_client) as client:
            exchanger = TokenExchanger(
                client,
                PKCEStateStore(settings.storage.state_file),
                credential_store,
                settings.oauth,
            )
            credential = exchanger.exchange(authorization_code)
    except OAuthFlowError as exc:
        print(f"Error: {exc}")
        print("Login failed!")
        emitter.set_output("success", False)
        return EXIT_FAILURE

    print("\n=== SUCCESS ===")
    print("OAuth login successful!")
    print(f"Credentials saved to: {credential_store.path}")
    print(f"Token expires at: {_format_expiry(credential.expires_at)}")
    print("===============")

    emitter.set_output("success", True)
    emitter.set_output("expires_at", credential.expires_at)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
