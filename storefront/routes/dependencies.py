"""FastAPI dependencies shared by the routers."""
from fastapi import Depends, Request

from storefront.data.catalog import ProductCatalog
from storefront.querying.service import ProductQueryService
from storefront.utils.session import SessionRegistry, SessionStores, resolve_session_id


def get_catalog(request: Request) -> ProductCatalog:
    return request.app.state.catalog


def get_query_service(request: Request) -> ProductQueryService:
    return request.app.state.query_service


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_session_stores(
    request: Request,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionStores:
    """Stores of the calling session (header or client IP based)."""
    return registry.get(resolve_session_id(request))
