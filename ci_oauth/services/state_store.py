"""Read and discard the PKCE state written by the login start step."""

from __future__ import annotations

import json
import logging
import time
import warnings
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ci_oauth.models.oauth import PKCEState
from ci_oauth.services.errors import CleanupWarning, StateInvalidError

logger = logging.getLogger(__name__)


class PKCEStateStore:
    """File-backed, single-use PKCE state."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self, now: Optional[float] = None) -> PKCEState:
        """Return the stored state, rejecting missing, corrupt, or stale files."""
        if not self.path.exists():
            raise StateInvalidError(
                f"No login state found at {self.path}. Please run the login process again."
            )

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            state = PKCEState.model_validate(raw)
        except (OSError, ValueError, ValidationError) as exc:
            raise StateInvalidError(f"Error reading state file: {exc}") from exc

        current = int(time.time() if now is None else now)
        if state.is_expired(current):
            raise StateInvalidError(
                "State has expired (older than 10 minutes). "
                "Please run the login process again."
            )
        return state

    def delete(self) -> None:
        """Remove the state file; failures are reported but never raised."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            warnings.warn(
                f"Could not clean up state file {self.path}: {exc}",
                CleanupWarning,
                stacklevel=2,
            )
            return
        logger.debug("Removed state file %s", self.path)


__all__ = ["PKCEStateStore"]
