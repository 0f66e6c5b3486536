"""
Image service: key derivation, URL modes and failure handling.
"""
import pytest

from conftest import RecordingBlobStore
from qrmenu.core.blob_store import BlobStoreError
from qrmenu.core.config import ImageUrlMode
from qrmenu.services.image_service import ImageService, image_filename, image_key


class BrokenStore(RecordingBlobStore):
    async def put(self, key, body, content_type, cache_control=None):
        raise BlobStoreError("bucket not writable")

    async def delete(self, key):
        raise BlobStoreError("bucket not writable")

    async def signed_url(self, key, expires_in):
        raise BlobStoreError("signing failed")


def test_image_filename_replaces_whitespace_with_hyphens():
    assert image_filename("Adana  Kebap\tAcılı", "jpg", now_ms=1700000000123) == "1700000000123-Adana-Kebap-Acılı.jpg"


def test_image_filename_cannot_escape_the_images_prefix():
    assert image_filename("../../menu-data", "json", now_ms=1) == "1-....menu-data.json"


@pytest.mark.parametrize("reference, expected", [
    ("1700-Urfa.jpg", "1700-Urfa.jpg"),
    ("1700-Urfa.jpg?v=2", "1700-Urfa.jpg"),
    ("images/1700-Urfa.jpg", "1700-Urfa.jpg"),
    ("https://x.supabase.co/storage/v1/object/sign/menu/images/1700-Urfa.jpg?token=t", "1700-Urfa.jpg"),
    ("https://bucket.s3.eu-north-1.amazonaws.com/images/1700-%C3%87i%C4%9F.jpg", "1700-Çiğ.jpg"),
    ("https://example.com/logo.png", None),
    ("", None),
    (None, None),
])
def test_image_key(reference, expected):
    assert image_key(reference) == expected


@pytest.mark.anyio
async def test_upload_stores_payload_and_returns_key_and_url(store):
    service = ImageService(store, url_mode=ImageUrlMode.SIGNED)

    uploaded = await service.upload(b"\xff\xd8data", "Ali Nazik", "jpg", "image/jpeg")

    assert uploaded.key.endswith("-Ali-Nazik.jpg")
    assert store.objects[f"images/{uploaded.key}"] == b"\xff\xd8data"
    assert store.content_types[f"images/{uploaded.key}"] == "image/jpeg"
    assert uploaded.url.startswith("https://storage.local/object/sign/menu/images/")


@pytest.mark.anyio
async def test_upload_failure_returns_none():
    service = ImageService(BrokenStore())

    assert await service.upload(b"data", "Ayran", "png", "image/png") is None


@pytest.mark.anyio
async def test_url_for_passes_full_urls_through(store):
    service = ImageService(store)
    url = "https://cdn.example.com/images/1700-Urfa.jpg?X-Amz-Signature=abc"

    assert await service.url_for(url) == url


@pytest.mark.anyio
async def test_url_for_signed_mode_strips_query_string(store):
    service = ImageService(store, url_mode=ImageUrlMode.SIGNED, signed_url_ttl=60)

    url = await service.url_for("1700-Urfa.jpg?old=1")

    assert url.startswith("https://storage.local/object/sign/menu/images/1700-Urfa.jpg?expires=")


@pytest.mark.anyio
async def test_url_for_public_mode_uses_store_public_url(store):
    service = ImageService(store, url_mode=ImageUrlMode.PUBLIC)

    assert await service.url_for("1700-Urfa.jpg") == "https://storage.local/object/public/menu/images/1700-Urfa.jpg"


@pytest.mark.anyio
async def test_url_for_public_mode_with_static_base(store):
    service = ImageService(store, url_mode=ImageUrlMode.PUBLIC, public_base_url="https://cdn.example.com/")

    assert await service.url_for("1700-Urfa.jpg") == "https://cdn.example.com/images/1700-Urfa.jpg"


@pytest.mark.anyio
async def test_url_for_empty_reference_and_store_errors_return_none():
    service = ImageService(BrokenStore(), url_mode=ImageUrlMode.SIGNED)

    assert await service.url_for(None) is None
    assert await service.url_for("1700-Urfa.jpg") is None


@pytest.mark.anyio
async def test_delete_removes_object(store):
    await store.put("images/1700-Urfa.jpg", b"x", "image/jpeg")
    service = ImageService(store)

    assert await service.delete("1700-Urfa.jpg") is True
    assert "images/1700-Urfa.jpg" not in store.objects


@pytest.mark.anyio
async def test_delete_failure_is_swallowed():
    service = ImageService(BrokenStore())

    assert await service.delete("1700-Urfa.jpg") is False
    assert await service.delete("https://example.com/logo.png") is False
