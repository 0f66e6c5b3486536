# qrmenu/routers/categories.py
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from qrmenu.core.auth import get_current_admin
from qrmenu.core.dependencies import get_menu_repository
from qrmenu.models.menu import CategoryCreate
from qrmenu.services.menu_repository import MenuRepository

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("")
async def add_category(
    payload: CategoryCreate,
    admin: str = Depends(get_current_admin),
    repository: MenuRepository = Depends(get_menu_repository),
):
    """Create an empty category"""
    # Turkish characters are kept as typed; only surrounding whitespace goes
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category name is required"
        )

    if not await repository.add_category(name, payload.display_names):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add category"
        )

    logger.info(f"Admin {admin} added category {name}")
    return {"success": True, "category": name}


@router.delete("/{name:path}")
async def delete_category(
    name: str,
    admin: str = Depends(get_current_admin),
    repository: MenuRepository = Depends(get_menu_repository),
):
    """Delete a category, its items and their images

    Names are stored as typed and may contain "/", so the whole remaining
    path is the name.
    """
    if not await repository.delete_category(name):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete category"
        )

    logger.info(f"Admin {admin} deleted category {name}")
    return {"success": True}
