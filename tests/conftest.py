from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from dal.image_dal import ImageDAL
from main import create_app
from services.errors import ImageFileNotFound
from services.image_service import ImageService
from utils.database_init import AsyncDatabaseInitializer


class FakeImageService(ImageService):
    """Test double that records calls and simulates downstream outcomes."""

    def __init__(
        self,
        durable_url: str = "https://cdn.example.com/stored.png",
        resolve_error: Optional[Exception] = None,
        create_error: Optional[Exception] = None,
        objects: Optional[List[str]] = None,
    ) -> None:
        self.durable_url = durable_url
        self.resolve_error = resolve_error
        self.create_error = create_error
        self.objects = objects or []
        self.resolve_calls: List[tuple] = []
        self.create_calls: List[tuple] = []
        self._next_id = 0

    async def resolve_local_file(self, path: str, authorization: str) -> str:
        self.resolve_calls.append((path, authorization))
        if self.resolve_error is not None:
            raise self.resolve_error
        return self.durable_url

    async def create_image(self, record: Dict[str, Any], is_uploaded_file: bool, authorization: str) -> Dict[str, Any]:
        self.create_calls.append((dict(record), is_uploaded_file, authorization))
        if self.create_error is not None:
            raise self.create_error
        self._next_id += 1
        return {
            **record,
            "id": f"id-{self._next_id}",
            "objects": list(self.objects),
            "isUploadedFile": is_uploaded_file,
        }

    @property
    def call_count(self) -> int:
        return len(self.resolve_calls) + len(self.create_calls)


def not_found_service() -> FakeImageService:
    return FakeImageService(resolve_error=ImageFileNotFound())


@pytest.fixture
def fake_service():
    return FakeImageService()


@pytest.fixture
def db_initializer(tmp_path):
    return AsyncDatabaseInitializer(tmp_path / "images.db")


@pytest.fixture
def image_dal(db_initializer):
    return ImageDAL(db_initializer)


@pytest.fixture
def make_client(db_initializer):
    """Build a TestClient whose app state is wired without running the lifespan."""

    def _make(service: Optional[ImageService] = None, media_storage=None) -> TestClient:
        app = create_app()
        app.state.db_initializer = db_initializer
        app.state.image_service = service or FakeImageService()
        if media_storage is not None:
            app.state.media_storage = media_storage
        return TestClient(app)

    return _make


def run(coro):
    return asyncio.run(coro)
