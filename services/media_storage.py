"""Durable storage for client uploads.

Uploads land in the upload directory first (via `save_upload`). Ingestion
then relocates them with `store`, which returns a durable URL:

- `LocalMediaStorage` moves the file into the media directory served at
  `/media` and builds the URL from the public base URL.
- `RemoteMediaStorage` posts the file to an external storage service with the
  caller's authorization header forwarded, then removes the local copy.
"""

from __future__ import annotations

import abc
import asyncio
import logging
import mimetypes
import shutil
import uuid
from pathlib import Path

import aiofiles
import httpx

from services.errors import ImageFileNotFound

logger = logging.getLogger(__name__)


class MediaStorage(abc.ABC):
    """Shared upload handling; subclasses implement `store`."""

    def __init__(self, upload_dir: Path | str) -> None:
        self.upload_dir = Path(upload_dir).resolve()

    def locate_upload(self, path: str) -> Path:
        """Return the resolved upload path, or raise ImageFileNotFound.

        Only regular files inside the upload directory are accessible.
        """
        candidate = Path(path).expanduser().resolve()
        if not candidate.is_relative_to(self.upload_dir) or not candidate.is_file():
            logger.warning("Upload %s is missing or outside %s", path, self.upload_dir)
            raise ImageFileNotFound()
        return candidate

    async def save_upload(self, filename: str, data: bytes) -> Path:
        """Write upload bytes under a fresh name in the upload directory and return its path."""
        ext = Path(filename).suffix.lower()
        target = self.upload_dir / f"{uuid.uuid4().hex}{ext}"
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(target, "wb") as f:
            await f.write(data)
        return target

    @abc.abstractmethod
    async def store(self, path: str, authorization: str) -> str:
        """Relocate the upload at `path` and return its durable URL.

        Raises:
            ImageFileNotFound: If the upload is missing, outside the upload
                directory, or disappears before it can be relocated.
        """


class LocalMediaStorage(MediaStorage):
    """Relocate uploads into a directory served by the app itself."""

    def __init__(self, upload_dir: Path | str, media_dir: Path | str, public_base_url: str) -> None:
        super().__init__(upload_dir)
        self.media_dir = Path(media_dir).resolve()
        self.public_base_url = public_base_url.rstrip("/")

    async def store(self, path: str, authorization: str) -> str:
        source = self.locate_upload(path)
        self.media_dir.mkdir(parents=True, exist_ok=True)
        target = self.media_dir / f"{uuid.uuid4().hex}{source.suffix.lower()}"

        # shutil.move is blocking -> run in thread
        try:
            await asyncio.to_thread(shutil.move, str(source), str(target))
        except FileNotFoundError as exc:
            # Another request relocated the same upload first.
            logger.warning("Upload %s vanished before it could be moved", source)
            raise ImageFileNotFound() from exc
        logger.info("Moved upload %s to %s", source.name, target)
        return f"{self.public_base_url}/media/{target.name}"


class RemoteMediaStorage(MediaStorage):
    """Upload files to an external storage service that authorizes the caller."""

    def __init__(self, upload_dir: Path | str, service_url: str, client: httpx.AsyncClient) -> None:
        super().__init__(upload_dir)
        self.service_url = service_url.rstrip("/")
        self.client = client

    async def store(self, path: str, authorization: str) -> str:
        source = self.locate_upload(path)
        try:
            async with aiofiles.open(source, "rb") as f:
                data = await f.read()
        except FileNotFoundError as exc:
            logger.warning("Upload %s vanished before it could be read", source)
            raise ImageFileNotFound() from exc

        mime_type = mimetypes.guess_type(source.name)[0] or "application/octet-stream"
        response = await self.client.post(
            f"{self.service_url}/files",
            files={"file": (source.name, data, mime_type)},
            headers={"Authorization": authorization},
        )
        if response.status_code == 404:
            raise ImageFileNotFound()
        response.raise_for_status()

        url = response.json().get("url")
        if not url:
            raise RuntimeError("Storage service response did not include a url.")

        await asyncio.to_thread(source.unlink, True)
        logger.info("Uploaded %s to storage service as %s", source.name, url)
        return url
