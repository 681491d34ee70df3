"""Validation helpers for uploaded image content."""

import io

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from services.errors import ImageFileTooLarge, ImageFileTypeUnsupported, InvalidRequestParameter
from utils.image_reference import has_image_extension

ALLOWED_IMAGE_FORMATS = {"JPEG", "PNG", "GIF", "WEBP", "BMP", "TIFF"}
MAX_UPLOAD_BYTES = 20 * 1024 * 1024  # 20 MB


def verify_image_bytes(data: bytes) -> str:
    """Return the Pillow format name of `data`, raising if it is not a supported image."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ImageFileTypeUnsupported() from exc
    if fmt not in ALLOWED_IMAGE_FORMATS:
        raise ImageFileTypeUnsupported()
    return fmt


async def read_image_upload(image_file: UploadFile, max_bytes: int = MAX_UPLOAD_BYTES) -> bytes:
    """Read and validate an uploaded image, ensuring it is non-empty, within `max_bytes` and decodable."""
    if not image_file.filename or not has_image_extension(image_file.filename):
        raise ImageFileTypeUnsupported()
    data = await image_file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ImageFileTooLarge()
    if not data:
        raise InvalidRequestParameter("uploaded image file is empty")
    verify_image_bytes(data)
    return data
