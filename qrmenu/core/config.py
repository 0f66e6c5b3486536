# qrmenu/core/config.py
"""
Application configuration.

All settings come from environment variables (a local ``.env`` file is
loaded by ``main.py`` through python-dotenv). ``get_settings()`` builds the
settings once per process; tests construct ``Settings`` directly.
"""
import os
import logging
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class StorageBackend(str, Enum):
    SUPABASE = "supabase"
    MEMORY = "memory"


class ImageUrlMode(str, Enum):
    """How image keys are turned into fetchable URLs.

    SIGNED: time-limited signed URLs for a private bucket.
    PUBLIC: permanent URLs, the bucket must be public.
    """
    SIGNED = "signed"
    PUBLIC = "public"


class MenuWriteMode(str, Enum):
    """Concurrency strategy for menu document mutations.

    LAST_WRITE_WINS: every mutation reads and overwrites the whole document
        with no coordination, concurrent mutations can lose updates.
    SERIALIZED: mutations are queued behind a lock, so they never overlap
        inside one process.
    """
    LAST_WRITE_WINS = "last_write_wins"
    SERIALIZED = "serialized"


class Settings(BaseModel):
    storage_backend: StorageBackend = StorageBackend.SUPABASE
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    storage_bucket: str = "menu"

    image_url_mode: ImageUrlMode = ImageUrlMode.SIGNED
    signed_url_ttl: int = 604800  # 7 days
    public_base_url: Optional[str] = None
    max_image_size: int = 10 * 1024 * 1024

    menu_write_mode: MenuWriteMode = MenuWriteMode.SERIALIZED

    admin_username: Optional[str] = None
    admin_password: Optional[str] = None
    jwt_secret: Optional[str] = None
    jwt_expire_hours: int = 24

    currency_symbol: str = "₺"
    default_language: str = "tr"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment"""
        return cls(
            storage_backend=_enum_env("STORAGE_BACKEND", StorageBackend, StorageBackend.SUPABASE),
            supabase_url=os.getenv("SUPABASE_URL"),
            # Use service role key for backend operations
            supabase_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY"),
            storage_bucket=os.getenv("STORAGE_BUCKET", "menu"),
            image_url_mode=_enum_env("IMAGE_URL_MODE", ImageUrlMode, ImageUrlMode.SIGNED),
            signed_url_ttl=int(os.getenv("SIGNED_URL_TTL", "604800")),
            public_base_url=os.getenv("PUBLIC_BASE_URL") or None,
            max_image_size=int(os.getenv("MAX_IMAGE_SIZE", str(10 * 1024 * 1024))),
            menu_write_mode=_enum_env("MENU_WRITE_MODE", MenuWriteMode, MenuWriteMode.SERIALIZED),
            admin_username=os.getenv("ADMIN_USERNAME"),
            admin_password=os.getenv("ADMIN_PASSWORD"),
            jwt_secret=os.getenv("JWT_SECRET"),
            jwt_expire_hours=int(os.getenv("JWT_EXPIRE_HOURS", "24")),
            currency_symbol=os.getenv("CURRENCY_SYMBOL", "₺"),
            default_language=os.getenv("DEFAULT_LANGUAGE", "tr"),
            log_level=_log_level_env("LOG_LEVEL", "INFO"),
        )

    def missing_variables(self) -> list:
        """Names of required environment variables that are not set"""
        required = {
            "ADMIN_USERNAME": self.admin_username,
            "ADMIN_PASSWORD": self.admin_password,
            "JWT_SECRET": self.jwt_secret,
        }
        if self.storage_backend == StorageBackend.SUPABASE:
            required["SUPABASE_URL"] = self.supabase_url
            required["SUPABASE_SERVICE_ROLE_KEY"] = self.supabase_key
        return [name for name, value in required.items() if not value]


def _enum_env(name: str, enum_cls, default):
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"Invalid value for {name}: {raw!r} (expected one of: {allowed})")


def _log_level_env(name: str, default: str) -> str:
    raw = (os.getenv(name) or default).strip().upper()
    if not isinstance(logging.getLevelName(raw), int):
        raise ValueError(f"Invalid value for {name}: {raw!r} (expected DEBUG, INFO, WARNING, ERROR or CRITICAL)")
    return raw


@lru_cache()
def get_settings() -> Settings:
    settings = Settings.from_env()
    logger.info(
        f"Loaded settings: storage={settings.storage_backend.value}, "
        f"image_urls={settings.image_url_mode.value}, writes={settings.menu_write_mode.value}"
    )
    return settings


__all__ = ["Settings", "StorageBackend", "ImageUrlMode", "MenuWriteMode", "get_settings"]
