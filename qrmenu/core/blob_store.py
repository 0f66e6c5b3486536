# qrmenu/core/blob_store.py
"""
Object storage access for the menu document, images and change entries.

``BlobStore`` is the small async interface the services depend on. Two
implementations are provided:

- ``SupabaseBlobStore`` wraps a Supabase client. The storage SDK is
  synchronous, so every call runs in a worker thread.
- ``InMemoryBlobStore`` keeps objects in a dict. Used by the test suite and
  for ``STORAGE_BACKEND=memory`` local runs.

Both raise ``BlobNotFoundError`` for a missing key and ``BlobStoreError`` for
every other backend failure.
"""
import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import quote

from .config import Settings, StorageBackend

logger = logging.getLogger(__name__)


class BlobStoreError(Exception):
    """Storage backend failure (network, permissions, throttling, ...)"""


class BlobNotFoundError(BlobStoreError):
    """The requested key does not exist"""

    def __init__(self, key: str):
        super().__init__(f"No such key: {key}")
        self.key = key


class BlobStore(Protocol):
    async def get(self, key: str) -> bytes: ...

    async def put(self, key: str, body: bytes, content_type: str, cache_control: Optional[str] = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def list(self, prefix: str) -> List[str]: ...

    async def signed_url(self, key: str, expires_in: int) -> str: ...

    async def public_url(self, key: str) -> str: ...


def _is_not_found(error: Exception) -> bool:
    """Recognize the SDK's "object not found" errors across library versions"""
    payload = error.args[0] if error.args else None
    if isinstance(payload, dict):
        status_code = str(payload.get("statusCode") or payload.get("status") or "")
        code = str(payload.get("error") or payload.get("code") or "").lower()
        message = str(payload.get("message") or "").lower()
        if status_code == "404" or code in ("not_found", "nosuchkey") or ("not found" in message and "bucket" not in message):
            return True
    for attr in ("status", "status_code", "code"):
        if str(getattr(error, attr, "")) in ("404", "not_found", "NoSuchKey"):
            return True
    message = str(error).lower()
    return "object not found" in message or "nosuchkey" in message


def _first_key(data: Dict[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return None


class SupabaseBlobStore:
    """Blob store backed by a Supabase Storage bucket"""

    def __init__(self, client: Any, bucket: str):
        self._client = client
        self.bucket = bucket

    def _bucket(self):
        return self._client.storage.from_(self.bucket)

    async def get(self, key: str) -> bytes:
        def _download():
            return self._bucket().download(key)

        try:
            return await asyncio.to_thread(_download)
        except Exception as e:
            if _is_not_found(e):
                raise BlobNotFoundError(key) from e
            raise BlobStoreError(f"Failed to download {key}: {e}") from e

    async def put(self, key: str, body: bytes, content_type: str, cache_control: Optional[str] = None) -> None:
        options = {"content-type": content_type, "upsert": "true"}
        if cache_control:
            options["cache-control"] = cache_control

        def _upload():
            return self._bucket().upload(key, body, file_options=options)

        try:
            await asyncio.to_thread(_upload)
        except Exception as e:
            raise BlobStoreError(f"Failed to upload {key}: {e}") from e

    async def delete(self, key: str) -> None:
        def _remove():
            return self._bucket().remove([key])

        try:
            await asyncio.to_thread(_remove)
        except Exception as e:
            raise BlobStoreError(f"Failed to delete {key}: {e}") from e

    async def list(self, prefix: str) -> List[str]:
        folder = prefix.rstrip("/")
        page_size = 1000

        def _list_all():
            names = []
            offset = 0
            while True:
                page = self._bucket().list(folder, {"limit": page_size, "offset": offset})
                names.extend(
                    entry["name"] for entry in page
                    if entry.get("name") and entry["name"] != ".emptyFolderPlaceholder"
                )
                if len(page) < page_size:
                    return names
                offset += page_size

        try:
            names = await asyncio.to_thread(_list_all)
        except Exception as e:
            raise BlobStoreError(f"Failed to list {prefix}: {e}") from e
        return [f"{folder}/{name}" if folder else name for name in names]

    async def signed_url(self, key: str, expires_in: int) -> str:
        def _sign():
            return self._bucket().create_signed_url(key, expires_in)

        try:
            response = await asyncio.to_thread(_sign)
        except Exception as e:
            raise BlobStoreError(f"Failed to sign {key}: {e}") from e

        url = None
        if isinstance(response, dict):
            url = _first_key(response, "signedURL", "signedUrl", "signed_url", "url")
            data = response.get("data")
            if url is None and isinstance(data, dict):
                url = _first_key(data, "signedURL", "signedUrl", "signed_url", "url")
        if not url:
            raise BlobStoreError(f"Storage returned no signed URL for {key}")
        return str(url)

    async def public_url(self, key: str) -> str:
        def _get():
            return self._bucket().get_public_url(key)

        try:
            url = await asyncio.to_thread(_get)
        except Exception as e:
            raise BlobStoreError(f"Failed to build public URL for {key}: {e}") from e
        # Some SDK versions append an empty query string
        return str(url).rstrip("?")


class InMemoryBlobStore:
    """Dict-backed blob store"""

    def __init__(self, bucket: str = "menu", base_url: str = "https://storage.local"):
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}

    async def get(self, key: str) -> bytes:
        if key not in self.objects:
            raise BlobNotFoundError(key)
        return self.objects[key]

    async def put(self, key: str, body: bytes, content_type: str, cache_control: Optional[str] = None) -> None:
        self.objects[key] = bytes(body)
        self.content_types[key] = content_type

    async def delete(self, key: str) -> None:
        self.objects.pop(key, None)
        self.content_types.pop(key, None)

    async def list(self, prefix: str) -> List[str]:
        return sorted(key for key in self.objects if key.startswith(prefix))

    async def signed_url(self, key: str, expires_in: int) -> str:
        expires_at = int(time.time()) + expires_in
        return f"{self.base_url}/object/sign/{self.bucket}/{quote(key)}?expires={expires_at}"

    async def public_url(self, key: str) -> str:
        return f"{self.base_url}/object/public/{self.bucket}/{quote(key)}"


def build_blob_store(settings: Settings) -> BlobStore:
    """Create the blob store selected by ``STORAGE_BACKEND``"""
    if settings.storage_backend == StorageBackend.MEMORY:
        logger.warning("Using in-memory blob store, data is lost on restart")
        return InMemoryBlobStore(bucket=settings.storage_bucket)

    from .supabase_client import get_supabase_client

    return SupabaseBlobStore(get_supabase_client(settings), settings.storage_bucket)


__all__ = [
    "BlobStore",
    "BlobStoreError",
    "BlobNotFoundError",
    "SupabaseBlobStore",
    "InMemoryBlobStore",
    "build_blob_store",
]
