# qrmenu/services/image_service.py
import logging
import re
import time
from typing import Optional
from urllib.parse import unquote, urlparse

from pydantic import BaseModel

from qrmenu.core.blob_store import BlobStore
from qrmenu.core.config import ImageUrlMode

logger = logging.getLogger(__name__)

IMAGE_PREFIX = "images/"
IMAGE_CACHE_CONTROL = "31536000"  # 1 year

_URL_SCHEMES = ("https://", "http://")


class UploadedImage(BaseModel):
    key: str
    url: Optional[str] = None


def image_filename(display_name: str, extension: str, now_ms: Optional[int] = None) -> str:
    """
    Build ``<epochMillis>-<display name>.<extension>``

    Whitespace runs become hyphens. Path and query separators are dropped so
    the name can never escape the ``images/`` prefix.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    safe_name = re.sub(r"\s+", "-", display_name.strip())
    safe_name = re.sub(r"[/\\?#]", "", safe_name) or "image"
    return f"{now_ms}-{safe_name}.{extension}"


def image_key(reference: Optional[str]) -> Optional[str]:
    """
    Bare image key for a stored reference.

    Documents may hold either the key itself or a full (possibly signed) URL
    of the object. Query strings are dropped in both cases.
    """
    if not reference:
        return None
    if reference.startswith(_URL_SCHEMES):
        path = unquote(urlparse(reference).path)
        marker = f"/{IMAGE_PREFIX}"
        if marker not in path:
            return None
        return path.split(marker, 1)[1] or None
    key = reference.split("?")[0]
    if key.startswith(IMAGE_PREFIX):
        key = key[len(IMAGE_PREFIX):]
    return key or None


class ImageService:
    """Uploads, resolves and deletes menu item images"""

    def __init__(
        self,
        store: BlobStore,
        url_mode: ImageUrlMode = ImageUrlMode.SIGNED,
        signed_url_ttl: int = 604800,
        public_base_url: Optional[str] = None,
    ):
        self.store = store
        self.url_mode = url_mode
        self.signed_url_ttl = signed_url_ttl
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

    async def upload(self, payload: bytes, display_name: str, extension: str, content_type: str) -> Optional[UploadedImage]:
        """Store an image under ``images/`` and return its key and a fetchable URL"""
        filename = image_filename(display_name, extension)
        storage_key = f"{IMAGE_PREFIX}{filename}"
        logger.info(f"Uploading image for '{display_name}' to {storage_key}")

        try:
            await self.store.put(storage_key, payload, content_type, cache_control=IMAGE_CACHE_CONTROL)
        except Exception as e:
            logger.error(f"Error uploading image {storage_key}: {str(e)}")
            return None

        url = await self.url_for(filename)
        logger.info(f"Image uploaded successfully: {filename}")
        return UploadedImage(key=filename, url=url)

    async def url_for(self, reference: Optional[str]) -> Optional[str]:
        """Fetchable URL for an image key; full URLs are returned unchanged"""
        if not reference:
            return None

        if reference.startswith(_URL_SCHEMES):
            return reference

        key = image_key(reference)
        if not key:
            return None
        storage_key = f"{IMAGE_PREFIX}{key}"

        try:
            if self.url_mode == ImageUrlMode.SIGNED:
                return await self.store.signed_url(storage_key, self.signed_url_ttl)
            if self.public_base_url:
                return f"{self.public_base_url}/{storage_key}"
            return await self.store.public_url(storage_key)
        except Exception as e:
            logger.error(f"Error getting image URL for {storage_key}: {str(e)}")
            return None

    async def delete(self, reference: Optional[str]) -> bool:
        """Remove the image object; failures are logged and reported as False"""
        key = image_key(reference)
        if not key:
            logger.warning(f"Cannot derive an image key from {reference!r}")
            return False

        storage_key = f"{IMAGE_PREFIX}{key}"
        try:
            await self.store.delete(storage_key)
        except Exception as e:
            logger.error(f"Error deleting image {storage_key}: {str(e)}")
            return False

        logger.info(f"Image deleted successfully: {key}")
        return True
