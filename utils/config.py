"""Environment-driven application configuration.

All settings come from environment variables (a `.env` file is loaded first
when present). `DATABASE_DIR` is the only required value; upload and media
directories default to subfolders of it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _require_dir(name: str, value: str) -> Path:
    path = Path(value).expanduser()
    if path.exists() and not path.is_dir():
        raise RuntimeError(f"{name}={value!r} points to a file, not a directory ({path}).")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except Exception as exc:
        raise RuntimeError(f"Failed to create or access {name} at {path}") from exc
    return path.resolve()


def _optional(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass
class AppConfig:
    """Resolved runtime settings.

    Attributes:
        database_dir: Directory holding the SQLite file.
        upload_dir: Directory where `POST /uploads` writes client files.
        media_dir: Durable storage for relocated uploads, served at `/media`.
        public_base_url: Base URL used to build durable media URLs.
        storage_service_url: Optional remote storage service; replaces media_dir when set.
        storage_timeout: Timeout in seconds for storage service calls.
        openai_api_key: Enables object detection when present.
        openai_model: Model used for object detection.
        log_level: Root logging level name.
    """

    database_dir: Path
    upload_dir: Path
    media_dir: Path
    public_base_url: str = "http://localhost:8000"
    storage_service_url: Optional[str] = None
    storage_timeout: float = 30.0
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-5"
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.database_dir / "images.db"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "AppConfig":
        """Build the configuration from the process environment.

        Raises:
            RuntimeError: If DATABASE_DIR is missing or a directory is unusable.
        """
        if load_env_file:
            load_dotenv()

        env_dir = _optional("DATABASE_DIR")
        if env_dir is None:
            raise RuntimeError(
                "DATABASE_DIR environment variable must be set to a writable "
                "directory path where the SQLite database file will be stored."
            )
        database_dir = _require_dir("DATABASE_DIR", env_dir)
        upload_dir = _require_dir("UPLOAD_DIR", _optional("UPLOAD_DIR") or str(database_dir / "uploads"))
        media_dir = _require_dir("MEDIA_DIR", _optional("MEDIA_DIR") or str(database_dir / "media"))

        timeout_raw = _optional("STORAGE_TIMEOUT_SECONDS") or "30"
        try:
            storage_timeout = float(timeout_raw)
        except ValueError as exc:
            raise RuntimeError(f"STORAGE_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}") from exc

        storage_url = _optional("STORAGE_SERVICE_URL")
        return cls(
            database_dir=database_dir,
            upload_dir=upload_dir,
            media_dir=media_dir,
            public_base_url=(_optional("PUBLIC_BASE_URL") or "http://localhost:8000").rstrip("/"),
            storage_service_url=storage_url.rstrip("/") if storage_url else None,
            storage_timeout=storage_timeout,
            openai_api_key=_optional("OPENAI_API_KEY"),
            openai_model=_optional("OPENAI_MODEL") or "gpt-5",
            log_level=(_optional("LOG_LEVEL") or "INFO").upper(),
        )
