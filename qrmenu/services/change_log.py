# qrmenu/services/change_log.py
import json
import logging
import re
import time
from datetime import datetime, timezone

from qrmenu.core.blob_store import BlobStore
from qrmenu.models.menu import ChangeLogEntry

logger = logging.getLogger(__name__)

CHANGES_PREFIX = "changes/"


class ChangeLog:
    """Append-only audit trail, one object per change. Nothing reads it back."""

    def __init__(self, store: BlobStore):
        self.store = store

    async def record(self, change_type: str, item_name: str) -> bool:
        entry = ChangeLogEntry(
            type=change_type,
            item_name=item_name,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        safe_name = re.sub(r"[\s/\\?#]+", "-", item_name.strip()) or "unnamed"
        key = f"{CHANGES_PREFIX}{int(time.time() * 1000)}-{change_type}-{safe_name}.json"

        try:
            body = json.dumps(entry.model_dump(by_alias=True), ensure_ascii=False).encode("utf-8")
            await self.store.put(key, body, "application/json")
            return True
        except Exception as e:
            logger.error(f"Error saving change {key}: {str(e)}")
            return False
