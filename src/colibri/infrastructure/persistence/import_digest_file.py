"""Keeps the digest of the last imported file next to the order store."""

from __future__ import annotations

import logging
from pathlib import Path

from colibri.domain.exceptions import BackendError

logger = logging.getLogger(__name__)


class ImportDigestFile:

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    def load(self) -> str | None:
        if not self._file_path.exists():
            return None
        try:
            digest = self._file_path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise BackendError(f"Could not read the last import digest: {exc}") from exc
        return digest or None

    def save(self, digest: str | None) -> None:
        if digest is None:
            return
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(digest + "\n", encoding="utf-8")
        except OSError as exc:
            raise BackendError(f"Could not save the last import digest: {exc}") from exc
        logger.debug("Import digest saved to %s", self._file_path)
