"""
Pytest configuration for the QR menu backend.

The suite never talks to Supabase: the environment is pointed at the
in-memory blob store before ``main`` is imported, and every test builds its
own app around a fresh store.
"""
import asyncio
import io
import os
import sys
from pathlib import Path

import httpx
import pytest
from httpx import ASGITransport
from PIL import Image

os.environ["STORAGE_BACKEND"] = "memory"
os.environ.setdefault("ADMIN_USERNAME", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "secret")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from qrmenu.core.blob_store import InMemoryBlobStore  # noqa: E402
from qrmenu.core.config import ImageUrlMode, MenuWriteMode, Settings, StorageBackend  # noqa: E402
from qrmenu.services.change_log import ChangeLog  # noqa: E402
from qrmenu.services.image_service import ImageService  # noqa: E402
from qrmenu.services.menu_repository import MENU_DOCUMENT_KEY, MenuRepository  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


class RecordingBlobStore(InMemoryBlobStore):
    """In-memory store that remembers every key written"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.puts = []

    async def put(self, key, body, content_type, cache_control=None):
        self.puts.append(key)
        await super().put(key, body, content_type, cache_control)

    def document_writes(self) -> int:
        return self.puts.count(MENU_DOCUMENT_KEY)


class YieldingBlobStore(RecordingBlobStore):
    """Takes its snapshot, then yields to the event loop before returning it.

    Two mutations started together both read the same document before either
    writes, unless something serializes them.
    """

    async def get(self, key):
        data = await super().get(key)
        await asyncio.sleep(0)
        return data


def make_png(color=(200, 60, 40)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage_backend=StorageBackend.MEMORY,
        image_url_mode=ImageUrlMode.SIGNED,
        menu_write_mode=MenuWriteMode.SERIALIZED,
        admin_username="admin",
        admin_password="secret",
        jwt_secret="test-jwt-secret",
    )


@pytest.fixture
def store() -> RecordingBlobStore:
    return RecordingBlobStore()


@pytest.fixture
def image_service(store) -> ImageService:
    return ImageService(store, url_mode=ImageUrlMode.SIGNED)


@pytest.fixture
def repository(store, image_service) -> MenuRepository:
    return MenuRepository(store, image_service, change_log=ChangeLog(store))


@pytest.fixture
def app(settings, store):
    from main import create_app

    return create_app(settings=settings, store=store)


@pytest.fixture
async def client(app):
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
async def auth_headers(client):
    response = await client.post("/api/auth/login", json={"username": "admin", "password": "secret"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
