"""Runtime settings, read from the environment.

A ``.env`` file at the repository root is loaded first when present;
real environment variables win over it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parents[3]

DEFAULT_TIMEZONE = "America/Bogota"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    timezone: str = DEFAULT_TIMEZONE
    user: str | None = None
    log_level: str = "WARNING"

    @property
    def store_path(self) -> Path:
        return self.data_dir / "colibri.json"

    @property
    def import_digest_path(self) -> Path:
        return self.data_dir / "last_import.sha256"

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> Settings:
        if env is None:
            load_dotenv(_PROJECT_ROOT / ".env", override=False)
            env = os.environ
        return Settings(
            data_dir=Path(env.get("COLIBRI_DATA_DIR") or _PROJECT_ROOT / "data"),
            timezone=env.get("COLIBRI_TIMEZONE") or DEFAULT_TIMEZONE,
            user=env.get("COLIBRI_USER") or None,
            log_level=(env.get("COLIBRI_LOG_LEVEL") or "WARNING").upper(),
        )
