#!/usr/bin/env python3
"""List (and optionally delete) stored images that no menu item references."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

from qrmenu.core.blob_store import BlobStore, build_blob_store
from qrmenu.core.config import get_settings
from qrmenu.services.image_service import IMAGE_PREFIX, ImageService, image_key
from qrmenu.services.menu_repository import MenuRepository

load_dotenv()


async def find_orphaned_images(store: BlobStore, repository: MenuRepository) -> List[str]:
    """Image keys under images/ that are not referenced by any item"""
    document = await repository.read()
    if document is None:
        raise RuntimeError("Menu data could not be loaded")

    referenced = {
        image_key(item.image)
        for _, category in document.categories()
        for item in category.items
        if item.image
    }
    stored = [key[len(IMAGE_PREFIX):] for key in await store.list(IMAGE_PREFIX)]
    return [key for key in stored if key not in referenced]


async def run(delete: bool) -> int:
    settings = get_settings()
    store = build_blob_store(settings)
    images = ImageService(store)
    repository = MenuRepository(store, images)

    orphaned = await find_orphaned_images(store, repository)
    print(f"Found {len(orphaned)} orphaned images")
    print("-" * 60)

    failed = 0
    for key in orphaned:
        if delete:
            ok = await images.delete(key)
            failed += 0 if ok else 1
            print(f"{'deleted' if ok else 'FAILED '} {key}")
        else:
            print(key)
    return failed


def main():
    parser = argparse.ArgumentParser(description="Find images no menu item references")
    parser.add_argument("--delete", action="store_true", help="Delete the orphaned images")
    args = parser.parse_args()

    failed = asyncio.run(run(args.delete))
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
