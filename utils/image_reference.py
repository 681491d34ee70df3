"""Validation and classification helpers for image references."""

from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from models.image_reference import ImageReference, LocalReference, RemoteReference

ALLOWED_IMAGE_EXTENSIONS = {
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
    ".bmp",
    ".tif",
    ".tiff",
}

REMOTE_SCHEMES = {"http", "https"}
LOCAL_SCHEME = "file"


def has_image_extension(filename: str) -> bool:
    """Return True if `filename` ends in a supported image extension."""
    return PurePosixPath(filename).suffix.lower() in ALLOWED_IMAGE_EXTENSIONS


def is_valid_image(reference: object) -> bool:
    """Return True if `reference` names a supported image by scheme and extension.

    Remote references need an http(s) scheme and a host; local uploads use the
    `file` scheme. Query strings and fragments are ignored when reading the
    extension. Never touches the network or filesystem.
    """
    if not isinstance(reference, str) or not reference.strip():
        return False

    parsed = urlparse(reference.strip())
    scheme = parsed.scheme.lower()
    if scheme in REMOTE_SCHEMES:
        if not parsed.netloc:
            return False
    elif scheme != LOCAL_SCHEME:
        return False

    path = unquote(parsed.path)
    if not path or path.endswith("/"):
        return False
    return has_image_extension(path)


def classify_reference(reference: str) -> ImageReference:
    """Split an accepted reference into a local upload or a remote URL."""
    parsed = urlparse(reference.strip())
    if parsed.scheme.lower() == LOCAL_SCHEME:
        return LocalReference(raw=reference, path=unquote(parsed.path))
    return RemoteReference(url=reference)


def is_local_file(reference: str) -> bool:
    """Return True if the reference designates a local upload."""
    return isinstance(classify_reference(reference), LocalReference)


def to_file_reference(path: str) -> str:
    """Build the `file://` reference clients post back for a saved upload."""
    return PurePosixPath(path).as_uri()
