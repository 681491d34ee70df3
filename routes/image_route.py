"""FastAPI routes for image metadata."""

import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, HTTPException, Request

from controllers.image_controller import ingest_image
from controllers.image_query_controller import get_image, list_images, validate_image_id
from dal.image_dal import ImageDAL
from services.errors import ImageServiceError
from services.image_service import ImageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["images"])


def _get_image_dal(request: Request) -> ImageDAL:
	"""Build a DAL over the shared database initializer."""
	db_initializer = getattr(request.app.state, "db_initializer", None)
	if db_initializer is None:
		raise HTTPException(status_code=500, detail="Database not initialized.")
	return ImageDAL(db_initializer)


def _get_image_service(request: Request) -> ImageService:
	"""Retrieve the shared detection/storage service from the app state."""
	service = getattr(request.app.state, "image_service", None)
	if service is None:
		raise HTTPException(status_code=500, detail="Image service not initialized.")
	return service


async def _read_json_object(request: Request) -> Dict[str, Any]:
	"""Return the JSON body when it is an object, otherwise an empty dict."""
	try:
		body = await request.json()
	except (json.JSONDecodeError, UnicodeDecodeError):
		return {}
	return body if isinstance(body, dict) else {}


@router.get("")
async def list_images_route(request: Request, objects: Optional[str] = None):
	"""Return all images, or those containing any of the comma-separated `objects`."""
	try:
		return await list_images(_get_image_dal(request), objects)
	except (HTTPException, ImageServiceError):
		raise
	except Exception as exc:
		logger.exception("Failed to list images")
		raise HTTPException(status_code=500, detail="Failed to list images.") from exc


@router.get("/{image_id}")
async def get_image_route(request: Request, image_id: str):
	"""Return the image stored under `image_id`."""
	canonical_id = validate_image_id(image_id)
	try:
		return await get_image(_get_image_dal(request), canonical_id)
	except (HTTPException, ImageServiceError):
		raise
	except Exception as exc:
		logger.exception("Failed to fetch image %s", canonical_id)
		raise HTTPException(status_code=500, detail="Failed to fetch image.") from exc


@router.post("")
async def create_image_route(request: Request, authorization: Optional[str] = Header(None)):
	"""Create an image record, resolving local uploads and detecting objects if requested.

	The body is parsed leniently so that a missing token is reported
	regardless of body content.
	"""
	payload = await _read_json_object(request)
	return await ingest_image(_get_image_service(request), payload, authorization)
