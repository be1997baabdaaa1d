"""Tests for the item query engine."""

import math

import pytest

from catalog_api.app.core.store import ItemStore
from catalog_api.app.schemas.item import ItemComparison, ItemCreate, ItemsQuery, ItemUpdate
from catalog_api.app.services.item_service import ItemService
from conftest import make_item, write_items


def _ids(items):
    return [item.id for item in items]


@pytest.fixture
def scenario_service(tmp_path):
    path = tmp_path / "items.json"
    write_items(
        path,
        [
            make_item("1", price=10, createdAt="2024-01-01T00:00:00Z", updatedAt="2024-01-01T00:00:00Z"),
            make_item("2", price=30, createdAt="2024-01-02T00:00:00Z", updatedAt="2024-01-02T00:00:00Z"),
            make_item("3", price=20, createdAt="2024-01-03T00:00:00Z", updatedAt="2024-01-03T00:00:00Z"),
        ],
    )
    return ItemService(ItemStore(str(path)))


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def test_sort_by_price_first_page(scenario_service):
    items, meta = scenario_service.list(ItemsQuery(sort_by="price", sort_order="asc", page=1, limit=2))
    assert _ids(items) == ["1", "3"]
    assert meta.model_dump(by_alias=True) == {
        "page": 1,
        "limit": 2,
        "total": 3,
        "totalPages": 2,
        "hasNext": True,
        "hasPrev": False,
    }


def test_second_page_has_prev(scenario_service):
    items, meta = scenario_service.list(ItemsQuery(sort_by="price", sort_order="asc", page=2, limit=2))
    assert _ids(items) == ["2"]
    assert meta.has_next is False
    assert meta.has_prev is True


def test_unknown_category_yields_empty_page(service):
    items, meta = service.list(ItemsQuery(category="x"))
    assert items == []
    assert (meta.total, meta.total_pages, meta.has_next, meta.has_prev) == (0, 0, False, False)


def test_page_past_the_end_is_empty(service):
    items, meta = service.list(ItemsQuery(page=5, limit=2))
    assert items == []
    assert meta.total == 4
    assert meta.total_pages == 2
    assert meta.has_next is False
    assert meta.has_prev is True


@pytest.mark.parametrize("limit", [1, 2, 3, 4, 7])
@pytest.mark.parametrize("sort_by", ["name", "price", "rating", "createdAt"])
def test_pages_concatenate_to_full_result(service, limit, sort_by):
    full, meta = service.list(ItemsQuery(sort_by=sort_by, limit=100))
    pages = []
    for page in range(1, math.ceil(meta.total / limit) + 1):
        items, _ = service.list(ItemsQuery(sort_by=sort_by, page=page, limit=limit))
        pages.extend(items)
    assert _ids(pages) == _ids(full)
    assert len(set(_ids(pages))) == meta.total


# ---------------------------------------------------------------------------
# Filtering and search
# ---------------------------------------------------------------------------


def test_filter_by_category(service):
    items, _ = service.list(ItemsQuery(category="smartphones", sort_order="asc"))
    assert _ids(items) == ["1", "2"]


def test_filter_by_brand(service):
    items, _ = service.list(ItemsQuery(brand="Apple", sort_order="asc"))
    assert _ids(items) == ["1", "3"]


def test_filter_by_price_range_is_inclusive(service):
    items, _ = service.list(ItemsQuery(min_price=349.0, max_price=1199.99, sort_by="price", sort_order="asc"))
    assert _ids(items) == ["4", "1", "2"]


def test_filters_combine_with_and(service):
    items, _ = service.list(ItemsQuery(brand="Apple", max_price=1000))
    assert _ids(items) == ["1"]


def test_empty_string_filter_is_ignored(service):
    items, meta = service.list(ItemsQuery(category="", search=""))
    assert meta.total == 4


@pytest.mark.parametrize(
    "term, expected",
    [
        ("iphone", ["1"]),
        ("APPLE", ["1", "3"]),
        ("laptops", ["3"]),
        ("s pen", ["2"]),
        ("noise", ["4"]),
        ("chip", ["1", "3"]),
        ("nothing-matches", []),
    ],
)
def test_search_is_case_insensitive_across_fields(service, term, expected):
    items, _ = service.list(ItemsQuery(search=term, sort_order="asc"))
    assert _ids(items) == expected


def test_search_narrows_filters(service):
    items, _ = service.list(ItemsQuery(category="smartphones", search="chip"))
    assert _ids(items) == ["1"]


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------


def test_default_sort_is_newest_first(service):
    items, _ = service.list(ItemsQuery())
    assert _ids(items) == ["4", "3", "2", "1"]


def test_sort_by_name_ignores_case(service):
    items, _ = service.list(ItemsQuery(sort_by="name", sort_order="asc"))
    assert [item.name for item in items] == [
        "bose QuietComfort",
        "iPhone 15 Pro",
        "MacBook Pro 14",
        "Samsung Galaxy S24 Ultra",
    ]


def test_sort_by_name_places_accented_letters_with_their_base(tmp_path):
    path = tmp_path / "items.json"
    write_items(path, [make_item("z", name="Zebra"), make_item("e", name="Éclair"), make_item("f", name="Fig")])
    service = ItemService(ItemStore(str(path)))

    items, _ = service.list(ItemsQuery(sort_by="name", sort_order="asc"))
    assert [item.name for item in items] == ["Éclair", "Fig", "Zebra"]
    items, _ = service.list(ItemsQuery(sort_by="name", sort_order="desc"))
    assert [item.name for item in items] == ["Zebra", "Fig", "Éclair"]


def test_sort_by_rating_treats_missing_as_zero(service):
    items, _ = service.list(ItemsQuery(sort_by="rating", sort_order="asc"))
    assert _ids(items) == ["4", "2", "1", "3"]
    items, _ = service.list(ItemsQuery(sort_by="rating", sort_order="desc"))
    assert _ids(items) == ["3", "1", "2", "4"]


def test_equal_keys_keep_catalog_order_in_both_directions(tmp_path):
    path = tmp_path / "items.json"
    write_items(path, [make_item("a", price=5), make_item("b", price=1), make_item("c", price=5), make_item("d", price=5)])
    service = ItemService(ItemStore(str(path)))

    items, _ = service.list(ItemsQuery(sort_by="price", sort_order="asc"))
    assert _ids(items) == ["b", "a", "c", "d"]
    items, _ = service.list(ItemsQuery(sort_by="price", sort_order="desc"))
    assert _ids(items) == ["a", "c", "d", "b"]


def test_list_does_not_reorder_the_store(service, store):
    service.list(ItemsQuery(sort_by="price", sort_order="desc"))
    assert _ids(store.get_all()) == ["1", "2", "3", "4"]


# ---------------------------------------------------------------------------
# Compare
# ---------------------------------------------------------------------------


def test_compare_deduplicates_and_follows_catalog_order(service):
    result = service.compare(["3", "1", "3", "missing"])
    assert _ids(result) == ["1", "3"]
    assert all(isinstance(view, ItemComparison) for view in result)


def test_compare_view_omits_internal_fields(service):
    view = service.compare(["1"])[0]
    dumped = view.model_dump(by_alias=True)
    assert set(dumped) == {"id", "name", "price", "category", "brand", "features", "description", "imageUrl", "rating"}
    assert dumped["imageUrl"] == "https://example.com/iphone15pro.jpg"


def test_compare_unknown_ids_returns_empty(service):
    assert service.compare(["x", "y"]) == []


def test_get_many_matches_store(service):
    assert _ids(service.get_many(["2", "2", "4"])) == ["2", "4"]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def test_create_update_delete_round_trip(service):
    item = service.create(ItemCreate(name="New", price=5, category="misc", brand="Acme"))
    assert service.get(item.id) == item

    updated = service.update(item.id, ItemUpdate(features=["one", "two"]))
    assert updated.features == ("one", "two")
    assert updated.created_at == item.created_at

    assert service.delete(item.id) is True
    assert service.get(item.id) is None
    assert service.delete(item.id) is False


def test_update_missing_item(service):
    assert service.update("missing", ItemUpdate(name="x")) is None


def test_tokens_come_from_store(service, store):
    before = service.fingerprint()
    service.create(ItemCreate(name="New", price=5, category="misc", brand="Acme"))
    assert service.fingerprint() == store.fingerprint() != before
    assert service.last_modified() == store.last_modified()
    assert service.validation_token().fingerprint == store.fingerprint()
