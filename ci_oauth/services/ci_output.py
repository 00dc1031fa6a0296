"""GitHub Actions step outputs and log masking."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO, Union

from ci_oauth.models.oauth import OAuthCredential

logger = logging.getLogger(__name__)

OutputValue = Union[str, int, bool]


def _render(value: OutputValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class GitHubActionsEmitter:
    """
    Publish values to the surrounding workflow.

    Outputs go to the ``GITHUB_OUTPUT`` file when the runner provides one and
    fall back to the ``::set-output`` workflow command otherwise, except for
    secrets, which are only ever written to the file. Mask directives always
    go to the console stream, since that is what the runner scans.
    """

    def __init__(
        self,
        output_file: Optional[Path] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.output_file = Path(output_file) if output_file else None
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def set_output(self, name: str, value: OutputValue, *, secret: bool = False) -> None:
        rendered = _render(value)
        if self.output_file is None:
            if secret:
                logger.debug("No GITHUB_OUTPUT file; not echoing secret output %s", name)
                return
            print(f"::set-output name={name}::{rendered}", file=self.stream)
            return
        with self.output_file.open("a", encoding="utf-8") as handle:
            handle.write(f"{name}={rendered}\n")

    def add_mask(self, value: Optional[str]) -> None:
        if not value:
            return
        print(f"::add-mask::{value}", file=self.stream)

    def emit_credential(self, credential: OAuthCredential) -> None:
        """Mask both tokens, then expose them as step outputs."""
        self.add_mask(credential.access_token)
        self.add_mask(credential.refresh_token)
        self.set_output("access_token", credential.access_token, secret=True)
        self.set_output("refresh_token", credential.refresh_token, secret=True)
        self.set_output("expires_at", credential.expires_at)


__all__ = ["GitHubActionsEmitter"]
