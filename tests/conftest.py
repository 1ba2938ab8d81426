"""Shared fixtures."""
import shutil

import pytest
from fastapi.testclient import TestClient

from storefront.config import DEFAULT_PRODUCTS_PATH
from storefront.data.catalog import ProductCatalog
from storefront.main import create_app
from storefront.utils.persistence import MemoryStorage
from storefront.utils.session import SessionRegistry
from tests.factories import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog_path(tmp_path):
    path = tmp_path / "products.json"
    shutil.copy(DEFAULT_PRODUCTS_PATH, path)
    return path


@pytest.fixture
def catalog(catalog_path):
    return ProductCatalog.from_file(str(catalog_path))


@pytest.fixture
def sessions():
    return SessionRegistry(lambda namespace, session_id: MemoryStorage())


@pytest.fixture
def client(catalog, sessions):
    app = create_app(catalog=catalog, sessions=sessions)
    with TestClient(app) as test_client:
        yield test_client
