"""HTTP surface tests against the FastAPI app."""
import json

ALICE = {"X-Session-Id": "alice"}
BOB = {"X-Session-Id": "bob"}


def product_ids(body):
    return [product["id"] for product in body["data"]]


class TestProductList:

    def test_default_page(self, client):
        response = client.get("/api/products")

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 8
        assert body["pagination"] == {"page": 1, "limit": 20, "total": 8, "totalPages": 1}
        assert body["message"] == "Products retrieved successfully"
        assert body["status"] == 200

    def test_max_price_uses_sale_price(self, client):
        body = client.get("/api/products", params={"max_price": "15"}).json()
        assert product_ids(body) == ["prod-006", "prod-007"]

    def test_invalid_numbers_are_ignored(self, client):
        body = client.get("/api/products", params={"max_price": "abc", "page": "zero"}).json()
        assert body["pagination"]["total"] == 8
        assert body["pagination"]["page"] == 1

    def test_category_and_sort(self, client):
        params = {"category": "tea", "sort_by": "price", "sort_order": "desc"}
        body = client.get("/api/products", params=params).json()
        assert product_ids(body) == ["prod-008", "prod-002", "prod-001"]

    def test_in_stock(self, client):
        body = client.get("/api/products", params={"in_stock": "true"}).json()
        assert "prod-002" not in product_ids(body)
        assert "prod-004" not in product_ids(body)
        assert body["pagination"]["total"] == 6

    def test_tags_any(self, client):
        body = client.get("/api/products", params={"tags": "GIFT"}).json()
        assert product_ids(body) == ["prod-003", "prod-004", "prod-005", "prod-007"]

    def test_search(self, client):
        body = client.get("/api/products", params={"q": "silk"}).json()
        assert product_ids(body) == ["prod-003", "prod-007"]

    def test_pagination(self, client):
        body = client.get("/api/products", params={"limit": "3", "page": "3"}).json()
        assert product_ids(body) == ["prod-007", "prod-008"]
        assert body["pagination"]["totalPages"] == 3

    def test_page_past_the_end(self, client):
        body = client.get("/api/products", params={"page": "9"}).json()
        assert body["data"] == []
        assert body["pagination"]["total"] == 8

    def test_empty_result_is_ok(self, client):
        response = client.get("/api/products", params={"q": "nothing-matches-this"})
        assert response.status_code == 200
        assert response.json()["data"] == []


class TestProductLookup:

    def test_by_id(self, client):
        body = client.get("/api/products/prod-001").json()
        assert body["data"]["title"] == "Premium Jasmine Tea"
        assert body["data"]["sale_price"] == 24.99

    def test_by_slug(self, client):
        assert client.get("/api/products/slug/natural-silk-scarf").json()["data"]["id"] == "prod-003"
        assert client.get("/api/products/natural-silk-scarf").json()["data"]["id"] == "prod-003"

    def test_missing_product(self, client):
        response = client.get("/api/products/ghost")
        assert response.status_code == 404
        assert response.json() == {"message": "Product not found", "status": 404}

    def test_categories(self, client):
        categories = client.get("/api/products/categories").json()["data"]
        counts = {category["slug"]: category["product_count"] for category in categories}
        assert counts == {"tea": 3, "apparel": 2, "home": 2, "kitchen": 1}


class TestCartRoutes:

    def add(self, client, headers=ALICE, **fields):
        payload = {"product_id": "prod-001", "title": "Premium Jasmine Tea", "price": 24.99}
        payload.update(fields)
        return client.post("/api/cart/items", json=payload, headers=headers)

    def test_add_and_merge(self, client):
        self.add(client, quantity=1)
        body = self.add(client, quantity=2, price=19.0).json()

        assert body["session_id"] == "alice"
        [line] = body["items"]
        assert line["quantity"] == 3
        assert line["price"] == 24.99
        assert body["item_count"] == 3
        assert body["total_formatted"] == "$74.97"

    def test_sessions_are_isolated(self, client):
        self.add(client)
        assert client.get("/api/cart", headers=BOB).json()["items"] == []
        assert client.get("/api/cart/count", headers=ALICE).json() == {"count": 1}

    def test_update_and_remove(self, client):
        self.add(client)
        self.add(client, product_id="prod-006", title="Bamboo Chopsticks", price=12.0)

        body = client.patch("/api/cart/items/prod-006", json={"quantity": 4}, headers=ALICE).json()
        assert body["item_count"] == 5

        body = client.patch("/api/cart/items/prod-001", json={"quantity": 0}, headers=ALICE).json()
        assert [line["product_id"] for line in body["items"]] == ["prod-006"]

        body = client.delete("/api/cart/items/prod-006", headers=ALICE).json()
        assert body["items"] == []

    def test_total_and_clear(self, client):
        self.add(client, quantity=2, price=10.0)
        assert client.get("/api/cart/total", headers=ALICE).json() == {
            "total": 20.0, "total_formatted": "$20.00",
        }
        assert client.post("/api/cart/clear", headers=ALICE).json()["item_count"] == 0

    def test_invalid_quantity_rejected(self, client):
        assert self.add(client, quantity=0).status_code == 422


class TestWishlistRoutes:

    def save(self, client, product_id, headers=ALICE, **fields):
        payload = {"product_id": product_id, "title": product_id, "price": 10.0}
        payload.update(fields)
        return client.post("/api/wishlist/items", json=payload, headers=headers)

    def test_save_query_and_membership(self, client):
        self.save(client, "prod-001", price=29.99, sale_price=24.99, category="tea")
        self.save(client, "prod-006", price=12.0, category="kitchen")

        body = client.get("/api/wishlist", params={"sort_by": "price", "sort_order": "asc"},
                          headers=ALICE).json()
        assert [item["product_id"] for item in body["items"]] == ["prod-006", "prod-001"]
        assert body["count"] == 2

        filtered = client.get("/api/wishlist", params={"category": "tea"}, headers=ALICE).json()
        assert [item["product_id"] for item in filtered["items"]] == ["prod-001"]
        assert filtered["count"] == 2

        assert client.get("/api/wishlist/items/prod-001", headers=ALICE).json()["in_wishlist"] is True
        assert client.get("/api/wishlist/items/prod-001", headers=BOB).json()["in_wishlist"] is False

    def test_resave_keeps_single_entry(self, client):
        first = self.save(client, "prod-003").json()["items"][0]
        second = self.save(client, "prod-003", price=40.0).json()["items"][0]

        assert client.get("/api/wishlist/count", headers=ALICE).json() == {"count": 1}
        assert second["added_at"] == first["added_at"]
        assert second["price"] == 40.0

    def test_move_to_cart(self, client):
        self.save(client, "prod-007", price=18.5, sale_price=15.0)

        cart = client.post("/api/wishlist/items/prod-007/move-to-cart", headers=ALICE).json()

        assert cart["items"][0]["price"] == 15.0
        assert cart["items"][0]["quantity"] == 1
        assert client.get("/api/wishlist/count", headers=ALICE).json() == {"count": 0}

    def test_remove_and_clear(self, client):
        self.save(client, "prod-001")
        self.save(client, "prod-002")

        body = client.delete("/api/wishlist/items/prod-001", headers=ALICE).json()
        assert [item["product_id"] for item in body["items"]] == ["prod-002"]
        assert client.post("/api/wishlist/clear", headers=ALICE).json()["count"] == 0


class TestAdminRoutes:

    NEW_PRODUCT = {
        "sku": "INK-STN-009",
        "title": "Carved Ink Stone",
        "price": 64.0,
        "stock": 5,
        "category": {"id": "cat-home", "name": "Home", "slug": "home"},
        "tags": [" calligraphy ", ""],
    }

    def test_create(self, client, catalog_path):
        response = client.post("/api/admin/products", json=self.NEW_PRODUCT)

        assert response.status_code == 201
        created = response.json()
        assert created["slug"] == "carved-ink-stone"
        assert created["tags"] == ["calligraphy"]
        assert client.get(f"/api/products/{created['id']}").status_code == 200

        saved = json.loads(catalog_path.read_text(encoding="utf-8"))
        assert created["id"] in [record["id"] for record in saved["data"]]

    def test_duplicate_sku(self, client):
        response = client.post("/api/admin/products", json={**self.NEW_PRODUCT, "sku": "TEA-JAS-001"})
        assert response.status_code == 400

    def test_update(self, client):
        response = client.put("/api/admin/products/prod-006", json={"price": 9.5, "stock": 10})

        assert response.status_code == 200
        assert response.json()["price"] == 9.5
        assert response.json()["title"] == "Bamboo Chopsticks (Set of 10)"
        body = client.get("/api/products", params={"max_price": "10"}).json()
        assert product_ids(body) == ["prod-006"]

    def test_patch_sku_conflict(self, client):
        response = client.patch("/api/admin/products/prod-006", json={"sku": "TEA-JAS-001"})
        assert response.status_code == 400

    def test_update_unknown(self, client):
        assert client.put("/api/admin/products/ghost", json={"price": 1.0}).status_code == 404

    def test_delete(self, client):
        response = client.delete("/api/admin/products/prod-008")

        assert response.json() == {"message": "Product deleted", "status": 200}
        assert client.get("/api/products/prod-008").status_code == 404
        assert client.delete("/api/admin/products/prod-008").status_code == 404


class TestAppRoutes:

    def test_root(self, client):
        assert client.get("/").json()["message"] == "Storefront API"

    def test_health(self, client):
        assert client.head("/health").status_code == 200
