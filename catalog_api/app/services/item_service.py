"""
Business logic for catalog items.

``ItemService`` answers list and compare queries over a snapshot taken
from an ``ItemStore`` and forwards mutations to it.  Query evaluation is
pure: it never touches the store's internals and has no side effects
beyond logging.
"""

import logging
import math
import unicodedata
from datetime import datetime
from functools import cmp_to_key
from typing import Callable, List, Optional, Sequence, Tuple

from ..core.cache import ValidationToken
from ..core.store import ItemStore
from ..schemas.item import Item, ItemComparison, ItemCreate, ItemsQuery, ItemUpdate, PaginationMeta

logger = logging.getLogger(__name__)


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def _collation_key(name: str) -> str:
    # Accented letters sort with their base letter: "Éclair" before "Fig".
    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _compare_text(a: str, b: str) -> int:
    return (a > b) - (a < b)


def _compare_names(a: Item, b: Item) -> int:
    result = _compare_text(_collation_key(a.name), _collation_key(b.name))
    if result == 0:
        result = _compare_text(a.name.casefold(), b.name.casefold())
    if result == 0:
        result = _compare_text(a.name, b.name)
    return result


def _compare_prices(a: Item, b: Item) -> int:
    return _sign(a.price - b.price)


def _compare_ratings(a: Item, b: Item) -> int:
    return _sign((a.rating or 0) - (b.rating or 0))


def _compare_created(a: Item, b: Item) -> int:
    return _sign((a.created_at - b.created_at).total_seconds())


COMPARATORS: dict = {
    "name": _compare_names,
    "price": _compare_prices,
    "rating": _compare_ratings,
    "createdAt": _compare_created,
}


class ItemService:
    """Query engine and command facade over an ``ItemStore``."""

    def __init__(self, store: ItemStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, query: ItemsQuery) -> Tuple[List[Item], PaginationMeta]:
        """Filter, search, sort and paginate the catalog.

        Filters (category, brand, price range) and the free-text search
        are combined with AND.  Sorting is stable, so items with equal keys
        keep catalog order in either direction.  A page past the end is
        empty rather than an error.
        """
        items = self.apply_filters(self.store.get_all(), query)
        items = self.apply_sorting(items, query.sort_by, query.sort_order)

        total = len(items)
        total_pages = math.ceil(total / query.limit)
        offset = (query.page - 1) * query.limit
        page_items = items[offset:offset + query.limit]

        meta = PaginationMeta(
            page=query.page,
            limit=query.limit,
            total=total,
            total_pages=total_pages,
            has_next=query.page < total_pages,
            has_prev=query.page > 1,
        )
        logger.debug(
            "Items retrieved (query=%s, total=%d, returned=%d)",
            query.model_dump(exclude_none=True),
            total,
            len(page_items),
        )
        return page_items, meta

    def get(self, item_id: str) -> Optional[Item]:
        item = self.store.get_by_id(item_id)
        if item is None:
            logger.debug("Item not found (id=%s)", item_id)
            return None
        logger.debug("Item retrieved (id=%s)", item_id)
        return item

    def get_many(self, item_ids: Sequence[str]) -> List[Item]:
        return self.store.get_by_ids(item_ids)

    def compare(self, item_ids: Sequence[str]) -> List[ItemComparison]:
        """Resolve identifiers to comparison views.

        Duplicates and unknown identifiers are dropped; results follow
        catalog order, not request order.  Bounds on the number of
        identifiers are the caller's concern.
        """
        comparisons = [ItemComparison.from_item(item) for item in self.store.get_by_ids(item_ids)]
        logger.debug("Items compared (requested=%s, found=%d)", list(item_ids), len(comparisons))
        return comparisons

    def fingerprint(self) -> str:
        return self.store.fingerprint()

    def last_modified(self) -> datetime:
        return self.store.last_modified()

    def validation_token(self) -> ValidationToken:
        return self.store.validation_token()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, data: ItemCreate) -> Item:
        item = self.store.create(data)
        logger.info("Item created successfully (id=%s, name=%s)", item.id, item.name)
        return item

    def update(self, item_id: str, changes: ItemUpdate) -> Optional[Item]:
        item = self.store.update(item_id, changes)
        if item is None:
            logger.debug("Item not found for update (id=%s)", item_id)
            return None
        logger.info("Item updated successfully (id=%s, name=%s)", item_id, item.name)
        return item

    def delete(self, item_id: str) -> bool:
        if not self.store.delete(item_id):
            logger.debug("Item not found for deletion (id=%s)", item_id)
            return False
        logger.info("Item deleted successfully (id=%s)", item_id)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def apply_filters(items: List[Item], query: ItemsQuery) -> List[Item]:
        predicates: List[Callable[[Item], bool]] = []
        if query.category:
            predicates.append(lambda item: item.category == query.category)
        if query.brand:
            predicates.append(lambda item: item.brand == query.brand)
        if query.min_price is not None:
            predicates.append(lambda item: item.price >= query.min_price)
        if query.max_price is not None:
            predicates.append(lambda item: item.price <= query.max_price)
        if query.search:
            needle = query.search.lower()
            predicates.append(lambda item: ItemService.matches_search(item, needle))
        return [item for item in items if all(predicate(item) for predicate in predicates)]

    @staticmethod
    def matches_search(item: Item, needle: str) -> bool:
        """Case-insensitive substring match on the item's text fields.

        ``needle`` must already be lower-cased.
        """
        haystacks = [item.name, item.brand, item.category, item.description or ""]
        haystacks.extend(item.features)
        return any(needle in text.lower() for text in haystacks)

    @staticmethod
    def apply_sorting(items: List[Item], sort_by: str, sort_order: str) -> List[Item]:
        compare = COMPARATORS.get(sort_by, _compare_created)
        if sort_order == "desc":
            def comparator(a: Item, b: Item) -> int:
                return -compare(a, b)
        else:
            comparator = compare
        return sorted(items, key=cmp_to_key(comparator))
