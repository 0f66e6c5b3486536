from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
from typing import Optional
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from qrmenu import __version__
from qrmenu.core.blob_store import BlobNotFoundError, BlobStore, build_blob_store
from qrmenu.core.config import Settings, get_settings
from qrmenu.core.logging import setup_logging
from qrmenu.routers import auth, categories, menu_items, public_menu
from qrmenu.services.change_log import ChangeLog
from qrmenu.services.image_service import ImageService
from qrmenu.services.menu_repository import MENU_DOCUMENT_KEY, MenuRepository

# Request size limiting middleware
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_size: int = 15 * 1024 * 1024):  # 15MB default
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and not content_length.isdigit():
            return JSONResponse(
                status_code=400,
                content={"detail": "Invalid Content-Length header"}
            )
        if content_length and int(content_length) > self.max_size:
            return JSONResponse(
                status_code=413,
                content={"detail": "Request entity too large"}
            )
        return await call_next(request)

# Setup logging
setup_logging(get_settings().log_level)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown"""
    logger.info("Starting QR menu API server...")

    missing_vars = app.state.settings.missing_variables()
    if missing_vars:
        logger.error(f"Missing required environment variables: {', '.join(missing_vars)}")
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing_vars)}")

    logger.info("All required environment variables are present")

    yield

    logger.info("Shutting down QR menu API server...")


def create_app(settings: Optional[Settings] = None, store: Optional[BlobStore] = None) -> FastAPI:
    """Build the application with its storage and services wired in"""
    settings = settings or get_settings()
    store = store or build_blob_store(settings)

    image_service = ImageService(
        store,
        url_mode=settings.image_url_mode,
        signed_url_ttl=settings.signed_url_ttl,
        public_base_url=settings.public_base_url,
    )
    repository = MenuRepository(
        store,
        image_service,
        change_log=ChangeLog(store),
        write_mode=settings.menu_write_mode,
    )

    app = FastAPI(
        title="Çardaklı Köşk QR Menu API",
        description="Backend API for the bilingual QR menu and its admin panel",
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.blob_store = store
    app.state.image_service = image_service
    app.state.menu_repository = repository

    app.add_middleware(RequestSizeLimitMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(menu_items.router, prefix="/api/menu-items", tags=["Menu items"])
    app.include_router(categories.router, prefix="/api/categories", tags=["Categories"])
    app.include_router(public_menu.router, prefix="/api/menu", tags=["Menu"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "Welcome to the Çardaklı Köşk QR Menu API",
            "version": __version__,
            "docs": "/docs"
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint for monitoring"""
        try:
            await request.app.state.blob_store.get(MENU_DOCUMENT_KEY)
            storage_status = "healthy"
        except BlobNotFoundError:
            # Reachable, the document is created on first read
            storage_status = "healthy"
        except Exception as e:
            logger.error(f"Storage health check failed: {str(e)}")
            storage_status = "unhealthy"

        return {
            "status": "healthy" if storage_status == "healthy" else "degraded",
            "services": {
                "api": "healthy",
                "storage": storage_status
            }
        }

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    return app


# This is important - it needs to be at module level for uvicorn to find it
app = create_app()

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("ENVIRONMENT", "production") == "development"
    )
