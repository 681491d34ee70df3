from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ImageRecord:
    """In-memory representation of a row in the IMAGE table.

    Attributes:
        id: Primary key (None for new records, UUID hex once stored).
        img_url: Durable location of the image.
        objects: Detected-object labels, empty when detection was skipped.
        is_uploaded_file: True when the image came from a local upload.
        attributes: Caller-supplied descriptive fields, stored opaquely.
        created_at: Unix timestamp (seconds) when the row was inserted.
    """

    id: Optional[str]
    img_url: str
    objects: List[str] = field(default_factory=list)
    is_uploaded_file: bool = False
    attributes: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the wire representation: attributes spread, core fields on top."""
        return {
            **self.attributes,
            "id": self.id,
            "imgUrl": self.img_url,
            "objects": list(self.objects),
            "isUploadedFile": self.is_uploaded_file,
            "createdAt": self.created_at,
        }
