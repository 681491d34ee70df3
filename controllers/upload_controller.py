from typing import Dict

from fastapi import UploadFile

from services.media_storage import MediaStorage
from utils.image_reference import to_file_reference
from utils.media_validation import read_image_upload


async def save_upload(storage: MediaStorage, file: UploadFile) -> Dict[str, str]:
    """Store an uploaded image and return the local reference to ingest it with.

    Args:
        storage: Media storage owning the upload directory.
        file: Uploaded image file.

    Returns:
        A dict with `imgUrl` set to the `file://` reference of the saved upload.
    """
    data = await read_image_upload(file)
    path = await storage.save_upload(file.filename, data)
    return {"imgUrl": to_file_reference(str(path))}
