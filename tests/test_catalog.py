"""Product catalogue storage tests."""
import json

from storefront.data.catalog import CATALOG_FILE_NAME, ProductCatalog
from storefront.data.schemas import ProductCreate, ProductUpdate


class TestCatalogWorkingCopy:

    def test_first_load_reads_the_source(self, catalog_path, tmp_path):
        catalog = ProductCatalog.from_storage(str(catalog_path), str(tmp_path / "storage"))

        assert catalog.get("prod-006") is not None
        assert catalog.path == tmp_path / "storage" / CATALOG_FILE_NAME
        assert not catalog.path.exists()

    def test_writes_leave_the_source_untouched(self, catalog_path, tmp_path):
        original = catalog_path.read_bytes()
        catalog = ProductCatalog.from_storage(str(catalog_path), str(tmp_path / "storage"))

        created = catalog.create(ProductCreate(sku="INK-STN-009", title="Carved Ink Stone", price=64.0))
        catalog.update("prod-006", ProductUpdate(price=9.5))

        assert catalog_path.read_bytes() == original
        saved = json.loads(catalog.path.read_text(encoding="utf-8"))
        assert created.id in [record["id"] for record in saved["data"]]

    def test_reload_prefers_the_working_copy(self, catalog_path, tmp_path):
        storage_dir = str(tmp_path / "storage")
        first = ProductCatalog.from_storage(str(catalog_path), storage_dir)
        assert first.delete("prod-008")

        reloaded = ProductCatalog.from_storage(str(catalog_path), storage_dir)

        assert reloaded.get("prod-008") is None
        assert reloaded.path == first.path
        assert ProductCatalog.from_file(str(catalog_path)).get("prod-008") is not None
