# qrmenu/services/menu_repository.py
"""
Menu document store.

The whole menu lives in a single JSON object (``menu-data.json``). Every
mutation reads the full document, changes it in memory and overwrites the
stored object. There is no version check on the store side, so how
concurrent mutations interact depends on ``MenuWriteMode``:

- ``LAST_WRITE_WINS``: mutations run unguarded. Two mutations that both read
  before either writes lose one of the changes; the last write wins.
- ``SERIALIZED``: one asyncio lock per repository is held from the read to
  the write of every mutation. Mutations in this process never overlap.
  The first-time creation of the default document takes the same lock.
  Other processes writing the same bucket are not coordinated.

Every operation converts storage failures into ``None``/``False`` after
logging them. A missing category or item is reported the same way.
"""
import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Callable, Dict, Optional, Tuple

from qrmenu.core.blob_store import BlobNotFoundError, BlobStore
from qrmenu.core.config import MenuWriteMode
from qrmenu.models.menu import Category, MenuDocument, MenuItem
from qrmenu.services.change_log import ChangeLog
from qrmenu.services.image_service import ImageService, image_key

logger = logging.getLogger(__name__)

MENU_DOCUMENT_KEY = "menu-data.json"

DEFAULT_CATEGORIES = [
    "kebaplar",
    "salatalar",
    "pide cesitleri",
    "soguk icecekler",
    "ara sicaklar",
    "sicak icecekler",
    "tatlilar",
    "izgaralar",
    "tava cesitleri",
]


def default_document() -> MenuDocument:
    return MenuDocument({name: Category(items=[]) for name in DEFAULT_CATEGORIES})


class MenuRepository:
    def __init__(
        self,
        store: BlobStore,
        image_service: ImageService,
        change_log: Optional[ChangeLog] = None,
        write_mode: MenuWriteMode = MenuWriteMode.SERIALIZED,
    ):
        self.store = store
        self.image_service = image_service
        self.change_log = change_log
        self.write_mode = write_mode
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def _mutation(self):
        if self.write_mode == MenuWriteMode.SERIALIZED:
            async with self._lock:
                yield
        else:
            yield

    async def _record(self, change_type: str, name: str):
        if self.change_log is not None:
            await self.change_log.record(change_type, name)

    async def _fetch(self) -> Tuple[Optional[MenuDocument], bool]:
        """Load the stored document; the flag is True when it does not exist yet"""
        try:
            raw = await self.store.get(MENU_DOCUMENT_KEY)
        except BlobNotFoundError:
            return None, True
        except Exception as e:
            logger.error(f"Error getting menu data: {str(e)}")
            return None, False

        try:
            return MenuDocument.model_validate(json.loads(raw.decode("utf-8"))), False
        except Exception as e:
            logger.error(f"Stored menu data is not a valid menu document: {str(e)}")
            return None, False

    async def _read_locked(self) -> Optional[MenuDocument]:
        # Caller holds the mutation lock (in SERIALIZED mode)
        document, missing = await self._fetch()
        if missing:
            logger.info("Menu data not found, creating initial structure")
            document = default_document()
            await self.write(document)
        return document

    async def read(self) -> Optional[MenuDocument]:
        """Fetch the menu document, creating the default one when it does not exist yet"""
        document, missing = await self._fetch()
        if not missing:
            return document

        # A mutation may have created the document since the first fetch;
        # initialize under the lock so its write is never overwritten.
        async with self._mutation():
            return await self._read_locked()

    async def write(self, document: MenuDocument) -> bool:
        """Overwrite the stored document"""
        try:
            body = json.dumps(document.to_json_dict(), ensure_ascii=False, indent=2).encode("utf-8")
            await self.store.put(MENU_DOCUMENT_KEY, body, "application/json")
            logger.info("Menu data saved successfully")
            return True
        except Exception as e:
            logger.error(f"Error saving menu data: {str(e)}")
            return False

    async def get_item(self, category_name: str, item_id: str) -> Optional[MenuItem]:
        document = await self.read()
        if document is None or category_name not in document:
            return None
        category = document[category_name]
        index = category.find_item(item_id)
        return category.items[index] if index != -1 else None

    async def add_category(self, name: str, display_names: Optional[Dict[str, str]] = None) -> bool:
        logger.info(f"Adding new category: {name}")
        async with self._mutation():
            document = await self._read_locked()
            if document is None:
                logger.error("Menu data not available")
                return False

            if name in document:
                logger.error(f"Category already exists: {name}")
                return False

            document.root[name] = Category(items=[], display_names=display_names)
            if not await self.write(document):
                return False

        logger.info(f"Category added successfully: {name}")
        await self._record("category_added", name)
        return True

    async def delete_category(self, name: str) -> bool:
        logger.info(f"Deleting category: {name}")
        async with self._mutation():
            document = await self._read_locked()
            if document is None:
                logger.error("Menu data not available")
                return False

            if name not in document:
                logger.error(f"Category not found: {name}")
                return False

            category = document.root.pop(name)
            if not await self.write(document):
                return False

        # Best effort: a failed image delete leaves an orphaned object but
        # does not undo the category removal.
        for item in category.items:
            if item.image:
                await self.image_service.delete(item.image)

        logger.info(f"Category deleted successfully: {name}")
        await self._record("category_deleted", name)
        return True

    async def add_item(self, category_name: str, item: MenuItem) -> bool:
        logger.info(f"Adding new item to category: {category_name}")
        async with self._mutation():
            document = await self._read_locked()
            if document is None:
                logger.error("Menu data not available")
                return False

            if category_name not in document:
                logger.error(f"Category not found: {category_name}")
                return False

            document[category_name].items.append(item)
            if not await self.write(document):
                return False

        logger.info(f"Item added successfully: {item.name}")
        await self._record("item_added", item.name)
        return True

    async def update_item(self, category_name: str, item_id: str, updated_item: MenuItem) -> bool:
        """Replace the item's whole slot with ``updated_item``"""
        return await self.merge_item(category_name, item_id, lambda existing: updated_item) is not None

    async def merge_item(
        self,
        category_name: str,
        item_id: str,
        merge: Callable[[MenuItem], MenuItem],
    ) -> Optional[MenuItem]:
        """
        Replace an item with ``merge(stored item)`` and return the new item.

        ``merge`` sees the item as stored at write time, so fields it keeps
        from the stored item are never stale. When the new item points at a
        different image, the replaced image is deleted after the write.
        """
        logger.info(f"Updating item: {item_id}")
        async with self._mutation():
            document = await self._read_locked()
            if document is None:
                logger.error("Menu data not available")
                return None

            if category_name not in document:
                logger.error(f"Category not found: {category_name}")
                return None

            category = document[category_name]
            index = category.find_item(item_id)
            if index == -1:
                logger.error(f"Item not found: {item_id}")
                return None

            previous = category.items[index]
            updated_item = merge(previous)
            category.items[index] = updated_item
            if not await self.write(document):
                return None

        if previous.image and image_key(previous.image) != image_key(updated_item.image):
            await self.image_service.delete(previous.image)

        logger.info(f"Item updated successfully: {item_id}")
        await self._record("item_updated", updated_item.name)
        return updated_item

    async def delete_item(self, category_name: str, item_id: str) -> bool:
        logger.info(f"Deleting item: {item_id}")
        async with self._mutation():
            document = await self._read_locked()
            if document is None:
                logger.error("Menu data not available")
                return False

            if category_name not in document:
                logger.error(f"Category not found: {category_name}")
                return False

            category = document[category_name]
            index = category.find_item(item_id)
            if index == -1:
                logger.error(f"Item not found: {item_id}")
                return False

            item = category.items.pop(index)
            if not await self.write(document):
                return False

        if item.image:
            await self.image_service.delete(item.image)

        logger.info(f"Item deleted successfully: {item_id}")
        await self._record("item_deleted", item.name)
        return True
