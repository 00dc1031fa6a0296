"""Service layer exports."""

from .ci_output import GitHubActionsEmitter
from .credential_store import CredentialStore
from .errors import (
    CleanupWarning,
    ExchangeFailedError,
    NoCredentialsError,
    OAuthFlowError,
    RefreshFailedError,
    StateInvalidError,
)
from .state_store import PKCEStateStore
from .token_exchange import TokenExchanger, normalize_authorization_code
from .token_refresh import RefreshOutcome, RefreshResult, TokenRefresher

__all__ = [
    "CleanupWarning",
    "CredentialStore",
    "ExchangeFailedError",
    "GitHubActionsEmitter",
    "NoCredentialsError",
    "OAuthFlowError",
    "PKCEStateStore",
    "RefreshFailedError",
    "RefreshOutcome",
    "RefreshResult",
    "StateInvalidError",
    "TokenExchanger",
    "TokenRefresher",
    "normalize_authorization_code",
]
