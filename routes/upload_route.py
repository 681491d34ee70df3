"""FastAPI routes for client image uploads."""

from typing import Optional

from fastapi import APIRouter, File, Header, HTTPException, Request, UploadFile

from controllers.image_controller import require_authorization
from controllers.upload_controller import save_upload
from services.errors import ImageServiceError

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("", summary="Upload an image for later ingestion")
async def upload_image(
    request: Request,
    file: UploadFile = File(...),
    authorization: Optional[str] = Header(None),
):
    """Save an uploaded image and return the `file://` reference to post to `/images`."""
    require_authorization(authorization)
    storage = getattr(request.app.state, "media_storage", None)
    if storage is None:
        raise HTTPException(status_code=500, detail="Media storage not initialized.")
    try:
        return await save_upload(storage, file)
    except (HTTPException, ImageServiceError):
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise HTTPException(status_code=500, detail="Failed to save upload.") from exc
