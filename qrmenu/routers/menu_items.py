# qrmenu/routers/menu_items.py
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from typing import Dict, Optional
import logging
import uuid

from qrmenu.core.auth import get_current_admin
from qrmenu.core.config import Settings
from qrmenu.core.dependencies import get_app_settings, get_image_service, get_menu_repository
from qrmenu.models.menu import ItemResponse, LocalizedFields, MenuItem
from qrmenu.services.image_processor import file_extension, validate_image_file
from qrmenu.services.image_service import ImageService
from qrmenu.services.menu_repository import MenuRepository
from qrmenu.utils.currency import format_price

router = APIRouter()
logger = logging.getLogger(__name__)


async def _store_image(image: UploadFile, display_name: str, settings: Settings, images: ImageService):
    """Validate an uploaded file and store it, returning the upload result"""
    if not image.content_type or not image.content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Please upload an image file."
        )

    contents = await image.read()
    if len(contents) > settings.max_image_size:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Maximum size is {settings.max_image_size // (1024 * 1024)}MB."
        )

    if not validate_image_file(contents):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid image file. Please upload a valid image format (JPEG, PNG, GIF, etc.)."
        )

    uploaded = await images.upload(
        contents,
        display_name,
        file_extension(image.filename, image.content_type),
        image.content_type,
    )
    if uploaded is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload image"
        )
    return uploaded


def _english_translation(
    name_en: Optional[str],
    short_description_en: Optional[str],
    long_description_en: Optional[str],
) -> Optional[Dict[str, LocalizedFields]]:
    if not any([name_en, short_description_en, long_description_en]):
        return None
    return {
        "en": LocalizedFields(
            name=name_en or None,
            short_description=short_description_en or None,
            long_description=long_description_en or None,
        )
    }


async def _item_payload(item: MenuItem, images: ImageService) -> dict:
    payload = item.model_dump(by_alias=True, exclude_none=True)
    payload["imageUrl"] = await images.url_for(item.image)
    return payload


@router.get("")
async def get_menu_data(repository: MenuRepository = Depends(get_menu_repository)):
    """Return the full menu document"""
    document = await repository.read()
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get menu data"
        )
    return document.to_json_dict()


@router.post("", response_model=ItemResponse)
async def add_item(
    category: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    short_description: Optional[str] = Form(None, alias="shortDescription"),
    long_description: Optional[str] = Form(None, alias="longDescription"),
    name_en: Optional[str] = Form(None, alias="nameEn"),
    short_description_en: Optional[str] = Form(None, alias="shortDescriptionEn"),
    long_description_en: Optional[str] = Form(None, alias="longDescriptionEn"),
    image: Optional[UploadFile] = File(None),
    admin: str = Depends(get_current_admin),
    settings: Settings = Depends(get_app_settings),
    repository: MenuRepository = Depends(get_menu_repository),
    images: ImageService = Depends(get_image_service),
):
    """Add an item to a category"""
    if not category or not name or not price:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields"
        )

    uploaded = None
    if image is not None and image.filename:
        uploaded = await _store_image(image, name, settings, images)

    new_item = MenuItem(
        id=uuid.uuid4().hex,
        name=name,
        price=format_price(price, settings.currency_symbol),
        short_description=short_description or "",
        long_description=long_description or "",
        image=uploaded.key if uploaded else None,
        translations=_english_translation(name_en, short_description_en, long_description_en),
    )

    if not await repository.add_item(category, new_item):
        if uploaded:
            await images.delete(uploaded.key)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add item"
        )

    logger.info(f"Admin {admin} added item {new_item.id} to {category}")
    return ItemResponse(success=True, item=await _item_payload(new_item, images))


@router.put("", response_model=ItemResponse)
async def update_item(
    category: Optional[str] = Form(None),
    id: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    short_description: Optional[str] = Form(None, alias="shortDescription"),
    long_description: Optional[str] = Form(None, alias="longDescription"),
    name_en: Optional[str] = Form(None, alias="nameEn"),
    short_description_en: Optional[str] = Form(None, alias="shortDescriptionEn"),
    long_description_en: Optional[str] = Form(None, alias="longDescriptionEn"),
    image: Optional[UploadFile] = File(None),
    admin: str = Depends(get_current_admin),
    settings: Settings = Depends(get_app_settings),
    repository: MenuRepository = Depends(get_menu_repository),
    images: ImageService = Depends(get_image_service),
):
    """Replace an existing item; the stored image is kept unless a new one is sent"""
    if not category or not id or not name or not price:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields"
        )

    uploaded = None
    if image is not None and image.filename:
        uploaded = await _store_image(image, name, settings, images)

    translations = _english_translation(name_en, short_description_en, long_description_en)

    def merge(existing: MenuItem) -> MenuItem:
        return MenuItem(
            id=id,
            name=name,
            price=format_price(price, settings.currency_symbol),
            short_description=short_description or "",
            long_description=long_description or "",
            image=uploaded.key if uploaded else existing.image,
            translations=translations if translations is not None else existing.translations,
        )

    # The repository deletes the replaced image once the write has succeeded
    updated_item = await repository.merge_item(category, id, merge)
    if updated_item is None:
        if uploaded:
            await images.delete(uploaded.key)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update item"
        )

    logger.info(f"Admin {admin} updated item {id} in {category}")
    return ItemResponse(success=True, item=await _item_payload(updated_item, images))


@router.delete("", response_model=ItemResponse)
async def delete_item(
    category: Optional[str] = Query(None),
    id: Optional[str] = Query(None),
    admin: str = Depends(get_current_admin),
    repository: MenuRepository = Depends(get_menu_repository),
):
    """Delete an item together with its image"""
    if not category or not id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields"
        )

    if not await repository.delete_item(category, id):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete item"
        )

    logger.info(f"Admin {admin} deleted item {id} from {category}")
    return ItemResponse(success=True)
