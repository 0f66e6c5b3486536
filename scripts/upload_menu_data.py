#!/usr/bin/env python3
"""
Upload a local menu document to storage, replacing the stored one.

The file is validated as a menu document before anything is written.

Usage:
    python scripts/upload_menu_data.py --file data/menu-data.json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from dotenv import load_dotenv

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from qrmenu.core.blob_store import build_blob_store
from qrmenu.core.config import get_settings
from qrmenu.models.menu import MenuDocument
from qrmenu.services.image_service import ImageService
from qrmenu.services.menu_repository import MenuRepository

# Load environment variables
load_dotenv()


async def upload_menu_data(menu_file: Path) -> bool:
    document = MenuDocument.model_validate(json.loads(menu_file.read_text(encoding="utf-8")))
    item_count = sum(len(category.items) for _, category in document.categories())
    print(f"Validated {len(document.root)} categories with {item_count} items")

    settings = get_settings()
    store = build_blob_store(settings)
    repository = MenuRepository(store, ImageService(store), write_mode=settings.menu_write_mode)
    return await repository.write(document)


def main():
    parser = argparse.ArgumentParser(description="Upload menu-data.json to storage")
    parser.add_argument("--file", type=Path, default=Path("data") / "menu-data.json",
                        help="Path of the menu document to upload")
    args = parser.parse_args()

    if not args.file.exists():
        print(f"ERROR: {args.file} does not exist")
        sys.exit(1)

    try:
        success = asyncio.run(upload_menu_data(args.file))
    except (ValueError, OSError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    if not success:
        print("ERROR: Failed to upload menu data")
        sys.exit(1)
    print("Menu data successfully uploaded")


if __name__ == "__main__":
    main()
