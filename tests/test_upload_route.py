import asyncio
import io
import os

import pytest
from fastapi import UploadFile
from PIL import Image

from services.errors import ImageFileTooLarge
from services.image_service import DetectionStorageService
from services.media_storage import LocalMediaStorage
from utils.image_reference import classify_reference, is_valid_image
from utils.media_validation import read_image_upload


def _png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def storage(tmp_path):
    return LocalMediaStorage(tmp_path / "uploads", tmp_path / "media", "http://testserver")


def test_upload_returns_ingestable_file_reference(make_client, storage):
    client = make_client(media_storage=storage)

    resp = client.post("/uploads", files={"file": ("photo.png", _png_bytes(), "image/png")}, headers={"authorization": "t"})

    assert resp.status_code == 200
    reference = resp.json()["imgUrl"]
    assert reference.startswith("file://")
    assert is_valid_image(reference)
    saved = classify_reference(reference).path
    with open(saved, "rb") as f:
        assert f.read() == _png_bytes()


def test_upload_rejects_non_image_bytes(make_client, storage):
    client = make_client(media_storage=storage)
    resp = client.post("/uploads", files={"file": ("photo.png", b"definitely not a png", "image/png")}, headers={"authorization": "t"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "unsupported image file type"}


def test_upload_rejects_unsupported_extension(make_client, storage):
    client = make_client(media_storage=storage)
    resp = client.post("/uploads", files={"file": ("notes.txt", _png_bytes(), "text/plain")}, headers={"authorization": "t"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "unsupported image file type"}


def test_uploaded_file_can_be_ingested(make_client, storage, image_dal):
    client = make_client(DetectionStorageService(image_dal, storage, None), media_storage=storage)
    reference = client.post("/uploads", files={"file": ("photo.png", _png_bytes(), "image/png")}, headers={"authorization": "t"}).json()["imgUrl"]

    resp = client.post("/images", json={"imgUrl": reference, "title": "red"}, headers={"authorization": "t"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["isUploadedFile"] is True
    assert body["imgUrl"].startswith("http://testserver/media/")
    assert body["title"] == "red"
    assert not os.path.exists(classify_reference(reference).path)


def test_upload_requires_authorization(make_client, storage):
    client = make_client(media_storage=storage)
    resp = client.post("/uploads", files={"file": ("photo.png", _png_bytes(), "image/png")})
    assert resp.status_code == 401
    assert resp.json() == "missing authorization header"
    assert not storage.upload_dir.exists() or list(storage.upload_dir.iterdir()) == []


def test_oversized_upload_is_rejected():
    data = _png_bytes()
    upload = UploadFile(file=io.BytesIO(data), filename="photo.png")

    with pytest.raises(ImageFileTooLarge):
        asyncio.run(read_image_upload(upload, max_bytes=len(data) - 1))


def test_upload_at_size_limit_is_accepted():
    data = _png_bytes()
    upload = UploadFile(file=io.BytesIO(data), filename="photo.png")
    assert asyncio.run(read_image_upload(upload, max_bytes=len(data))) == data
