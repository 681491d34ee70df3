from unittest.mock import AsyncMock

import pytest

from conftest import FakeImageService, not_found_service, run
from controllers.image_controller import ingest_image, resolve_local_upload
from models.image_reference import LocalReference
from services.errors import (
    ImageFileNotFound,
    ImageFileTypeUnsupported,
    ImageProcessingFailed,
    MissingAuth,
)


@pytest.mark.parametrize("token", [None, "", "   "])
@pytest.mark.parametrize(
    "payload",
    [{}, {"imgUrl": "https://example.com/cat.jpg"}, {"imgUrl": "not an image"}],
)
def test_missing_auth_wins_regardless_of_body(token, payload):
    service = FakeImageService()
    with pytest.raises(MissingAuth):
        run(ingest_image(service, payload, token))
    assert service.call_count == 0


@pytest.mark.parametrize(
    "img_url",
    [None, "", "https://example.com/cat.pdf", "cat.jpg", "file:///srv/uploads/notes.txt"],
)
def test_unsupported_type_makes_no_external_calls(img_url):
    service = FakeImageService()
    with pytest.raises(ImageFileTypeUnsupported):
        run(ingest_image(service, {"imgUrl": img_url}, "token"))
    assert service.call_count == 0


def test_remote_reference_passes_through_unchanged():
    service = FakeImageService()
    payload = {"imgUrl": "https://example.com/cat.jpg", "title": "my cat"}

    result = run(ingest_image(service, payload, "token"))

    assert service.resolve_calls == []
    assert len(service.create_calls) == 1
    record, is_uploaded_file, token = service.create_calls[0]
    assert record == payload
    assert is_uploaded_file is False
    assert token == "token"
    assert result["imgUrl"] == "https://example.com/cat.jpg"
    assert result["isUploadedFile"] is False
    assert result["title"] == "my cat"


def test_local_reference_is_resolved_before_creation():
    service = FakeImageService(durable_url="https://cdn.example.com/abc.png")

    result = run(ingest_image(service, {"imgUrl": "file:///srv/uploads/abc.png"}, "token"))

    assert service.resolve_calls == [("/srv/uploads/abc.png", "token")]
    assert len(service.create_calls) == 1
    record, is_uploaded_file, _ = service.create_calls[0]
    assert record["imgUrl"] == "https://cdn.example.com/abc.png"
    assert is_uploaded_file is True
    assert result["imgUrl"] == "https://cdn.example.com/abc.png"
    assert result["isUploadedFile"] is True


def test_local_file_not_found_skips_creation():
    service = not_found_service()
    with pytest.raises(ImageFileNotFound):
        run(ingest_image(service, {"imgUrl": "file:///srv/uploads/missing.png"}, "token"))
    assert len(service.resolve_calls) == 1
    assert service.create_calls == []


def test_other_resolution_failure_collapses_to_processing_failed():
    service = FakeImageService(resolve_error=ConnectionError("storage down"))
    with pytest.raises(ImageProcessingFailed):
        run(ingest_image(service, {"imgUrl": "file:///srv/uploads/abc.png"}, "token"))
    assert service.create_calls == []


def test_creation_failure_collapses_to_processing_failed():
    service = FakeImageService(create_error=RuntimeError("detector exploded"))
    with pytest.raises(ImageProcessingFailed) as excinfo:
        run(ingest_image(service, {"imgUrl": "https://example.com/cat.jpg"}, "token"))
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_repeated_remote_create_produces_distinct_records():
    # No deduplication of identical references is performed.
    service = FakeImageService()
    payload = {"imgUrl": "https://example.com/cat.jpg"}

    first = run(ingest_image(service, payload, "token"))
    second = run(ingest_image(service, payload, "token"))

    assert len(service.create_calls) == 2
    assert first["id"] != second["id"]


def test_resolver_requires_token_and_forwards_it():
    service = AsyncMock()
    service.resolve_local_file.return_value = "https://cdn.example.com/x.png"
    ref = LocalReference(raw="file:///srv/uploads/x.png", path="/srv/uploads/x.png")

    with pytest.raises(MissingAuth):
        run(resolve_local_upload(service, ref, ""))
    service.resolve_local_file.assert_not_called()

    url = run(resolve_local_upload(service, ref, "Bearer abc"))
    assert url == "https://cdn.example.com/x.png"
    service.resolve_local_file.assert_awaited_once_with("/srv/uploads/x.png", "Bearer abc")
