"""Read-side helpers for stored image metadata."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from dal.image_dal import ImageDAL
from services.errors import INVALID_IMAGE_ID, INVALID_OBJECTS_PARAMETER, ImageNotFound, InvalidRequestParameter


def parse_objects_param(objects: Optional[str]) -> Optional[List[str]]:
	"""Split the comma-separated `objects` query value into labels.

	Returns None when the parameter is absent. A value holding no labels
	(e.g. "" or ",,") is rejected.
	"""
	if objects is None:
		return None
	labels = [label.strip() for label in objects.split(",") if label.strip()]
	if not labels:
		raise InvalidRequestParameter(INVALID_OBJECTS_PARAMETER)
	return labels


def validate_image_id(image_id: str) -> str:
	"""Return the canonical hex form of a UUID image id, or reject it."""
	try:
		return uuid.UUID(image_id).hex
	except (ValueError, AttributeError, TypeError) as exc:
		raise InvalidRequestParameter(INVALID_IMAGE_ID) from exc


async def list_images(dal: ImageDAL, objects: Optional[str] = None) -> List[Dict[str, Any]]:
	"""Return every record, or those whose objects intersect the requested labels."""
	labels = parse_objects_param(objects)
	records = await dal.list_images(labels)
	return [record.to_dict() for record in records]


async def get_image(dal: ImageDAL, image_id: str) -> Dict[str, Any]:
	"""Return the record stored under `image_id`."""
	record = await dal.get_image_by_id(image_id)
	if record is None:
		raise ImageNotFound()
	return record.to_dict()
