"""JSON credential file shared by the exchange and refresh commands."""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from ci_oauth.models.oauth import CREDENTIALS_KEY, OAuthCredential
from ci_oauth.services.errors import NoCredentialsError

logger = logging.getLogger(__name__)


class CredentialStore:
    """Reads and atomically rewrites ``{"claudeAiOauth": {...}}`` documents."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read_document(self) -> Dict[str, Any]:
        """Return the full JSON document, including keys we do not own."""
        if not self.path.exists():
            raise NoCredentialsError(f"No valid credentials found in {self.path}")
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise NoCredentialsError(
                f"Error parsing credentials file {self.path}: {exc}"
            ) from exc
        if not isinstance(document, dict):
            raise NoCredentialsError(
                f"Credentials file {self.path} does not contain a JSON object"
            )
        return document

    def load(self, document: Optional[Mapping[str, Any]] = None) -> OAuthCredential:
        """Return the OAuth record, reading the file unless a document is given."""
        if document is None:
            document = self.read_document()
        record = document.get(CREDENTIALS_KEY)
        if not isinstance(record, dict):
            raise NoCredentialsError(f"No valid credentials found in {self.path}")
        try:
            return OAuthCredential.model_validate(record)
        except ValidationError as exc:
            raise NoCredentialsError(
                f"Credentials in {self.path} are incomplete: {exc}"
            ) from exc

    def save(
        self,
        credential: OAuthCredential,
        document: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Replace the OAuth record and write the document back.

        Sibling keys in ``document`` are preserved. The file is swapped in
        with ``os.replace`` so readers see either the old or the new content.
        """
        payload = dict(document or {})
        payload[CREDENTIALS_KEY] = credential.to_record()
        serialized = json.dumps(payload, indent=2) + "\n"

        # Write through symlinks, so a linked secrets file stays linked.
        target = Path(os.path.realpath(self.path))
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(serialized)
            if target.exists():
                os.chmod(tmp_name, stat.S_IMODE(target.stat().st_mode))
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Credentials saved to %s", self.path)


__all__ = ["CredentialStore"]
