# qrmenu/core/dependencies.py
from fastapi import Request

from .config import Settings
from qrmenu.services.image_service import ImageService
from qrmenu.services.menu_repository import MenuRepository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_menu_repository(request: Request) -> MenuRepository:
    return request.app.state.menu_repository


def get_image_service(request: Request) -> ImageService:
    return request.app.state.image_service
