"""Query engine tests: filtering, sorting, pagination."""
from datetime import datetime, timezone

from storefront.querying.engine import (
    effective_price,
    filter_products,
    paginate,
    query_products,
    sort_products,
)
from storefront.querying.params import ProductQuery
from tests.factories import make_product


def ids(products):
    return [p.id for p in products]


class TestEffectivePrice:

    def test_sale_price_wins(self):
        assert effective_price(make_product("a", price=20, sale_price=15)) == 15

    def test_base_price_without_sale(self):
        assert effective_price(make_product("a", price=20)) == 20

    def test_zero_sale_price_is_ignored(self):
        """A falsy raw sale price is treated as not on sale."""
        assert effective_price(make_product("a", price=20, sale_price=0)) == 20


class TestFilterProducts:

    def setup_method(self):
        self.products = [
            make_product(
                "tea", title="Jasmine Tea", description="Floral green tea",
                price=30, sale_price=25, stock=5, tags=["Tea", "Green"],
                category={"id": "cat-tea", "slug": "tea", "name": "Tea"},
                featured=True, average_rating=4.8,
            ),
            make_product(
                "scarf", title="Silk Scarf", description="Mulberry silk",
                price=45, stock=0, tags=["silk", "gift"],
                category={"id": "cat-apparel", "slug": "apparel", "name": "Apparel"},
                average_rating=4.1,
            ),
            make_product(
                "vase", title="Porcelain Vase", description="Blue and white",
                price=90, sale_price=80, stock=2, tags=["decor", "Gift"],
                category={"id": "cat-home", "slug": "home", "name": "Home"},
            ),
        ]

    def test_no_filters_returns_everything(self):
        assert ids(filter_products(self.products, ProductQuery())) == ["tea", "scarf", "vase"]

    def test_max_price_uses_effective_price(self):
        products = [make_product("a", price=10), make_product("b", price=20, sale_price=15)]
        result = filter_products(products, ProductQuery(max_price=15))
        assert ids(result) == ["a", "b"]

    def test_price_bounds_are_inclusive(self):
        result = filter_products(self.products, ProductQuery(min_price=25, max_price=45))
        assert ids(result) == ["tea", "scarf"]

    def test_search_matches_title_case_insensitively(self):
        assert ids(filter_products(self.products, ProductQuery(search="SILK"))) == ["scarf"]

    def test_search_matches_description(self):
        assert ids(filter_products(self.products, ProductQuery(search="blue and"))) == ["vase"]

    def test_search_matches_tag_substring(self):
        assert ids(filter_products(self.products, ProductQuery(search="deco"))) == ["vase"]

    def test_in_stock_true(self):
        assert ids(filter_products(self.products, ProductQuery(in_stock=True))) == ["tea", "vase"]

    def test_in_stock_false(self):
        assert ids(filter_products(self.products, ProductQuery(in_stock=False))) == ["scarf"]

    def test_category_by_id_or_slug(self):
        assert ids(filter_products(self.products, ProductQuery(category="cat-home"))) == ["vase"]
        assert ids(filter_products(self.products, ProductQuery(category="apparel"))) == ["scarf"]

    def test_category_name_does_not_match(self):
        assert filter_products(self.products, ProductQuery(category="Apparel")) == []

    def test_tags_match_any_case_insensitively(self):
        query = ProductQuery(tags=frozenset({"gift", "green"}))
        assert ids(filter_products(self.products, query)) == ["tea", "scarf", "vase"]

    def test_filters_combine_with_and(self):
        query = ProductQuery(tags=frozenset({"gift"}), in_stock=True)
        assert ids(filter_products(self.products, query)) == ["vase"]

    def test_featured_rating_and_exclude(self):
        assert ids(filter_products(self.products, ProductQuery(featured=True))) == ["tea"]
        assert ids(filter_products(self.products, ProductQuery(min_rating=4.5))) == ["tea"]
        assert ids(filter_products(self.products, ProductQuery(exclude="tea"))) == ["scarf", "vase"]

    def test_result_is_subset_satisfying_every_predicate(self):
        query = ProductQuery(min_price=20, in_stock=True, search="e")
        result = filter_products(self.products, query)
        for product in result:
            assert product in self.products
            assert effective_price(product) >= 20
            assert product.stock > 0


class TestSortProducts:

    def test_price_ascending_keeps_ties_in_input_order(self):
        products = [
            make_product("x", price=12),
            make_product("first", price=10),
            make_product("second", price=20, sale_price=10),
            make_product("cheap", price=5),
        ]
        assert ids(sort_products(products, "price", "asc")) == ["cheap", "first", "second", "x"]

    def test_descending_keeps_ties_in_input_order(self):
        products = [
            make_product("first", price=10),
            make_product("top", price=30),
            make_product("second", price=10),
        ]
        assert ids(sort_products(products, "price", "desc")) == ["top", "first", "second"]

    def test_name_is_case_insensitive(self):
        products = [
            make_product("b", title="banana"),
            make_product("a", title="Apple"),
            make_product("c", title="cherry"),
        ]
        assert ids(sort_products(products, "name")) == ["a", "b", "c"]

    def test_unknown_key_sorts_by_name(self):
        products = [make_product("b", title="B"), make_product("a", title="A")]
        assert ids(sort_products(products, "bogus")) == ["a", "b"]

    def test_rating_missing_counts_as_zero(self):
        products = [
            make_product("rated", average_rating=3),
            make_product("unrated"),
        ]
        assert ids(sort_products(products, "rating", "asc")) == ["unrated", "rated"]

    def test_created_missing_sorts_as_epoch(self):
        products = [
            make_product("new", created_at="2024-05-01T00:00:00Z"),
            make_product("undated"),
            make_product("old", created_at="2020-05-01T00:00:00"),
        ]
        assert ids(sort_products(products, "created", "asc")) == ["undated", "old", "new"]
        assert ids(sort_products(products, "created", "desc")) == ["new", "old", "undated"]

    def test_sort_is_a_permutation(self):
        products = [make_product(str(i), price=i % 3) for i in range(10)]
        result = sort_products(products, "price", "desc")
        assert sorted(ids(result)) == sorted(ids(products))


class TestPaginate:

    def setup_method(self):
        self.items = list(range(25))

    def test_pages(self):
        assert len(paginate(self.items, 1, 10).items) == 10
        assert paginate(self.items, 3, 10).items == [20, 21, 22, 23, 24]
        assert paginate(self.items, 1, 10).total_pages == 3

    def test_page_past_the_end_is_empty(self):
        page = paginate(self.items, 4, 10)
        assert page.items == []
        assert page.total == 25

    def test_pages_reconstruct_input(self):
        page_count = paginate(self.items, 1, 7).total_pages
        rebuilt = []
        for number in range(1, page_count + 1):
            rebuilt.extend(paginate(self.items, number, 7).items)
        assert rebuilt == self.items

    def test_empty_input(self):
        page = paginate([], 1, 10)
        assert page.items == []
        assert page.total_pages == 0


class TestQueryProducts:

    def test_response_envelope(self):
        products = [make_product(str(i), price=i) for i in range(5)]
        query = ProductQuery(sort_by="price", sort_order="desc", page=2, limit=2)
        response = query_products(products, query)

        assert ids(response.data) == ["2", "1"]
        assert response.pagination.total == 5
        assert response.pagination.totalPages == 3
        assert response.status == 200

    def test_without_sort_keeps_catalogue_order(self):
        products = [make_product("b", title="B"), make_product("a", title="A")]
        assert ids(query_products(products, ProductQuery()).data) == ["b", "a"]


class TestProductQueryParams:

    def test_invalid_price_bounds_are_ignored(self):
        query = ProductQuery.from_params({"min_price": "abc", "max_price": ""})
        assert query.min_price is None
        assert query.max_price is None

    def test_numeric_price_bounds(self):
        query = ProductQuery.from_params({"min_price": "5", "max_price": "12.5"})
        assert (query.min_price, query.max_price) == (5.0, 12.5)

    def test_in_stock_flag(self):
        assert ProductQuery.from_params({}).in_stock is None
        assert ProductQuery.from_params({"in_stock": "1"}).in_stock is True
        assert ProductQuery.from_params({"in_stock": "true"}).in_stock is True
        assert ProductQuery.from_params({"in_stock": "false"}).in_stock is False
        assert ProductQuery.from_params({"in_stock": "yes"}).in_stock is False

    def test_search_alias_and_tags(self):
        query = ProductQuery.from_params({"search": "tea", "tags": "Tea, ,Gift"})
        assert query.search == "tea"
        assert query.tags == frozenset({"tea", "gift"})

    def test_q_takes_precedence_over_search(self):
        assert ProductQuery.from_params({"q": "silk", "search": "tea"}).search == "silk"

    def test_paging_defaults_and_clamping(self):
        query = ProductQuery.from_params({"page": "0", "limit": "x"}, default_limit=24)
        assert query.page == 1
        assert query.limit == 24
        assert ProductQuery.from_params({"limit": "-3"}).limit == 1

    def test_search_term_is_kept_as_given(self):
        assert ProductQuery.from_params({"q": " tea "}).search == " tea "
        products = [make_product("a", title="Green Tea"), make_product("b", title="Teapot")]
        query = ProductQuery.from_params({"q": " "})
        assert ids(filter_products(products, query)) == ["a"]

    def test_unknown_sort_values(self):
        query = ProductQuery.from_params({"sort_by": "bogus", "sort_order": "sideways"})
        assert query.sort_by == "name"
        assert query.sort_order == "asc"

    def test_missing_sort_by_keeps_catalogue_order(self):
        assert ProductQuery.from_params({}).sort_by is None
        assert ProductQuery.from_params({"sort_by": ""}).sort_by is None

    def test_unknown_sort_by_orders_by_name(self):
        products = [make_product("b", title="B"), make_product("a", title="A")]
        query = ProductQuery.from_params({"sort_by": "bogus"})
        assert ids(query_products(products, query).data) == ["a", "b"]

    def test_created_at_parsing_handles_naive_and_aware(self):
        product = make_product("p", created_at="2024-01-01T00:00:00")
        assert product.created_at == datetime(2024, 1, 1)
        aware = make_product("q", created_at="2024-01-01T00:00:00Z")
        assert aware.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
