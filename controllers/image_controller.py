import logging
from typing import Any, Dict, Optional

from models.image_reference import LocalReference
from services.errors import (
    ImageFileNotFound,
    ImageFileTypeUnsupported,
    ImageProcessingFailed,
    MissingAuth,
)
from services.image_service import ImageService
from utils.image_reference import classify_reference, is_valid_image

logger = logging.getLogger(__name__)


def require_authorization(authorization: Optional[str]) -> str:
    """Return the caller token, or raise MissingAuth when it is absent or blank."""
    if not authorization or not authorization.strip():
        raise MissingAuth()
    return authorization


async def resolve_local_upload(service: ImageService, reference: LocalReference, authorization: str) -> str:
    """Turn a local upload into a durable URL via the detection/storage service.

    Raises:
        ImageFileNotFound: The service could not find or access the file.
        ImageProcessingFailed: Any other failure during resolution.
    """
    token = require_authorization(authorization)
    try:
        return await service.resolve_local_file(reference.path, token)
    except ImageFileNotFound:
        raise
    except Exception as exc:
        logger.exception("Failed to resolve local upload %s", reference.raw)
        raise ImageProcessingFailed() from exc


async def ingest_image(
    service: ImageService,
    payload: Dict[str, Any],
    authorization: Optional[str],
) -> Dict[str, Any]:
    """Validate, resolve and persist an image reference.

    Args:
        service: Detection/storage service that resolves uploads and creates records.
        payload: Request body; `imgUrl` holds the reference, other fields pass through.
        authorization: Caller identity token forwarded to the service.

    Returns:
        The created record as returned by the service.

    Raises:
        MissingAuth: No identity token was supplied.
        ImageFileTypeUnsupported: `imgUrl` is not a supported image reference.
        ImageFileNotFound: A local upload could not be resolved.
        ImageProcessingFailed: Resolution or creation failed for any other reason.
    """
    token = require_authorization(authorization)

    img_url = payload.get("imgUrl")
    if not is_valid_image(img_url):
        raise ImageFileTypeUnsupported()

    reference = classify_reference(img_url)
    is_uploaded_file = isinstance(reference, LocalReference)
    if is_uploaded_file:
        img_url = await resolve_local_upload(service, reference, token)
        logger.info("Resolved local upload %s to %s", reference.raw, img_url)

    try:
        return await service.create_image({**payload, "imgUrl": img_url}, is_uploaded_file, token)
    except ImageFileNotFound:
        raise
    except Exception as exc:
        logger.exception("Failed to create image record for %s", img_url)
        raise ImageProcessingFailed() from exc
