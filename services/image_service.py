"""Detection/storage service used by the ingestion pipeline.

`ImageService` is the contract the pipeline depends on. Tests substitute
their own implementation; the app wires up `DetectionStorageService`, which
relocates uploads through a `MediaStorage`, labels images with an optional
`ObjectDetector`, and persists records through `ImageDAL`.
"""

from __future__ import annotations

import abc
import logging
from typing import Any, Dict, Optional

from dal.image_dal import ImageDAL
from models.image_record import ImageRecord
from services.media_storage import MediaStorage
from services.openai.object_detector import ObjectDetector

logger = logging.getLogger(__name__)

# Keys owned by the service; caller-supplied values for these are dropped.
RESERVED_FIELDS = ("id", "imgUrl", "objects", "isUploadedFile", "createdAt", "detectObjects")


class ImageService(abc.ABC):
    """Resolve local uploads and create image records."""

    @abc.abstractmethod
    async def resolve_local_file(self, path: str, authorization: str) -> str:
        """Relocate the upload at `path` and return its durable URL.

        Raises:
            ImageFileNotFound: If the file is missing or not accessible.
        """

    @abc.abstractmethod
    async def create_image(self, record: Dict[str, Any], is_uploaded_file: bool, authorization: str) -> Dict[str, Any]:
        """Enrich and persist `record`, returning the stored record."""


def _wants_detection(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "")
    return True if value is None else bool(value)


class DetectionStorageService(ImageService):
    """Production service backed by media storage, OpenAI and SQLite."""

    def __init__(self, dal: ImageDAL, storage: MediaStorage, detector: Optional[ObjectDetector] = None) -> None:
        self.dal = dal
        self.storage = storage
        self.detector = detector

    async def resolve_local_file(self, path: str, authorization: str) -> str:
        return await self.storage.store(path, authorization)

    async def create_image(self, record: Dict[str, Any], is_uploaded_file: bool, authorization: str) -> Dict[str, Any]:
        img_url = record["imgUrl"]
        attributes = {k: v for k, v in record.items() if k not in RESERVED_FIELDS}

        objects = []
        if _wants_detection(record.get("detectObjects")):
            if self.detector is None:
                logger.info("Object detection requested but no detector is configured; skipping")
            else:
                objects = await self.detector.detect_objects(img_url, authorization=authorization)

        stored = await self.dal.create_image(
            ImageRecord(
                id=None,
                img_url=img_url,
                objects=objects,
                is_uploaded_file=is_uploaded_file,
                attributes=attributes,
            )
        )
        logger.info("Stored image %s with %d objects", stored.id, len(stored.objects))
        return stored.to_dict()
