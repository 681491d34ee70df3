"""Error taxonomy for image ingestion and retrieval.

Every failure the API surfaces is one of these classes. Each carries the HTTP
status it maps to and the fixed message clients see. `wrapped` controls the
body shape: `{"message": ...}` when True, the bare message string otherwise.
"""

from __future__ import annotations

from typing import Any

MISSING_AUTH = "missing authorization header"
IMAGE_FILE_TYPE_UNSUPPORTED = "unsupported image file type"
IMAGE_FILE_NOT_FOUND = "image file not found"
IMAGE_NOT_FOUND = "image not found"
IMAGE_PROCESSING_FAILED = "image processing failed"
INVALID_IMAGE_ID = "invalid image id"
INVALID_OBJECTS_PARAMETER = "invalid objects parameter"
IMAGE_FILE_TOO_LARGE = "image file too large"


class ImageServiceError(Exception):
    """Base class for errors rendered directly to API clients."""

    status_code: int = 500
    message: str = IMAGE_PROCESSING_FAILED
    wrapped: bool = False

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def body(self) -> Any:
        return {"message": self.message} if self.wrapped else self.message


class MissingAuth(ImageServiceError):
    status_code = 401
    message = MISSING_AUTH


class ImageFileTypeUnsupported(ImageServiceError):
    status_code = 400
    message = IMAGE_FILE_TYPE_UNSUPPORTED
    wrapped = True


class ImageFileNotFound(ImageServiceError):
    status_code = 400
    message = IMAGE_FILE_NOT_FOUND


class ImageNotFound(ImageServiceError):
    status_code = 400
    message = IMAGE_NOT_FOUND
    wrapped = True


class ImageProcessingFailed(ImageServiceError):
    status_code = 500
    message = IMAGE_PROCESSING_FAILED


class ImageFileTooLarge(ImageServiceError):
    status_code = 413
    message = IMAGE_FILE_TOO_LARGE
    wrapped = True


class InvalidRequestParameter(ImageServiceError):
    status_code = 400
    wrapped = True
