# qrmenu/routers/public_menu.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional
import asyncio
import logging

from qrmenu.core.config import Settings
from qrmenu.core.dependencies import get_app_settings, get_image_service, get_menu_repository
from qrmenu.models.menu import PublicCategory, PublicMenuItem, PublicMenuResponse
from qrmenu.services.image_service import ImageService
from qrmenu.services.menu_repository import MenuRepository
from qrmenu.utils.i18n import category_title, normalize_language

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/public", response_model=PublicMenuResponse)
async def public_menu(
    lang: Optional[str] = Query(None),
    settings: Settings = Depends(get_app_settings),
    repository: MenuRepository = Depends(get_menu_repository),
    images: ImageService = Depends(get_image_service),
):
    """Menu in the requested language with resolved image URLs"""
    language = normalize_language(lang, settings.default_language)

    document = await repository.read()
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Menu is temporarily unavailable"
        )

    entries = [(key, category, item) for key, category in document.categories() for item in category.items]
    # A missing image resolves to None and the item is shown without one
    urls = await asyncio.gather(*(images.url_for(item.image) for _, _, item in entries))
    url_by_item = {id(item): url for (_, _, item), url in zip(entries, urls)}

    categories = []
    for key, category in document.categories():
        items = []
        for item in category.items:
            fields = item.localized(language)
            items.append(PublicMenuItem(
                id=item.id,
                name=fields["name"],
                price=item.price,
                short_description=fields["short_description"],
                long_description=fields["long_description"],
                image_url=url_by_item[id(item)],
            ))
        categories.append(PublicCategory(key=key, title=category_title(key, category, language), items=items))

    return PublicMenuResponse(language=language, categories=categories)
