"""Main FastAPI application."""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.client.api_client import ApiClient
from storefront.client.products import ProductAdapter
from storefront.config import settings
from storefront.data.catalog import ProductCatalog
from storefront.data.database.connection import init_db
from storefront.errors import ApiError
from storefront.querying.service import ProductQueryService
from storefront.routes.admin import router as admin_router
from storefront.routes.cart import router as cart_router
from storefront.routes.products import router as products_router
from storefront.routes.wishlist import router as wishlist_router
from storefront.utils.logger import get_logger
from storefront.utils.session import SessionRegistry

logger = get_logger(__name__)


def create_app(
    catalog: Optional[ProductCatalog] = None,
    sessions: Optional[SessionRegistry] = None,
    adapter: Optional[ProductAdapter] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        catalog: Product catalogue (defaults to the configured JSON file, with
            admin writes kept under the storage directory)
        sessions: Session store registry (defaults to the configured backend)
        adapter: Remote product adapter; only used when the external API is enabled

    Returns:
        FastAPI app
    """
    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        description="Storefront API - product queries, cart and wishlist"
    )

    if settings.storage_backend == "database":
        # Create snapshot tables
        init_db()

    if catalog is None:
        catalog = ProductCatalog.from_storage(settings.products_data_path, settings.storage_dir)
    if adapter is None and settings.use_external_api:
        # Only an external API can serve as the remote source; the local one is this app
        adapter = ProductAdapter(ApiClient())

    # Store shared state in app state for reuse
    app.state.catalog = catalog
    app.state.sessions = sessions or SessionRegistry()
    app.state.query_service = ProductQueryService(catalog, adapter=adapter)
    logger.info(
        "Storefront ready: %d products, storage backend '%s'",
        len(catalog.all()), settings.storage_backend,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        status_code = exc.status if exc.status >= 400 else 502
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    # Include routers
    app.include_router(products_router)
    app.include_router(admin_router)
    app.include_router(cart_router)
    app.include_router(wishlist_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Storefront API",
            "version": settings.api_version,
            "docs": "/docs"
        }

    @app.head("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
