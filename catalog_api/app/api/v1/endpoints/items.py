"""
Item endpoints for API v1.

CRUD routes for catalog items.  Read routes carry ``ETag`` and
``Last-Modified`` validators and answer conditional requests with
``304 Not Modified`` while the catalog is unchanged.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from catalog_api.app.api.deps import get_item_service
from catalog_api.app.core.cache import conditional_response
from catalog_api.app.schemas.item import (
    Item,
    ItemCreate,
    ItemPage,
    ItemsQuery,
    ItemUpdate,
    SortField,
    SortOrder,
)
from catalog_api.app.services.item_service import ItemService


router = APIRouter()


def _not_found(item_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Item with id {item_id} not found")


@router.get("/", response_model=ItemPage, response_model_exclude_none=True)
async def list_items(
    request: Request,
    response: Response,
    category: Optional[str] = Query(None),
    brand: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice", gt=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", gt=0),
    search: Optional[str] = Query(None),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: ItemService = Depends(get_item_service),
):
    """List items with filters, free-text search, sorting and pagination.

    - **category**, **brand**: exact match filters.
    - **minPrice**, **maxPrice**: inclusive price range.
    - **search**: case-insensitive match on name, brand, category,
      description and features.
    - **sortBy**: `name`, `price`, `rating` or `createdAt`.
    - **sortOrder**: `asc` or `desc`.
    - **page**, **limit**: 1-indexed page and page size (max 100).
    """
    cached = conditional_response(request, response, service.validation_token())
    if cached is not None:
        return cached
    query = ItemsQuery(
        category=category,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    items, meta = service.list(query)
    return ItemPage(items=items, meta=meta)


@router.get("/{item_id}", response_model=Item, response_model_exclude_none=True)
async def get_item(
    item_id: str,
    request: Request,
    response: Response,
    service: ItemService = Depends(get_item_service),
):
    """Retrieve a single item by its ID."""
    cached = conditional_response(request, response, service.validation_token())
    if cached is not None:
        return cached
    item = service.get(item_id)
    if item is None:
        raise _not_found(item_id)
    return item


@router.post("/", response_model=Item, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_item(item: ItemCreate, service: ItemService = Depends(get_item_service)) -> Item:
    """Create a new item.

    The identifier and both timestamps are assigned by the server.
    """
    return service.create(item)


@router.put("/{item_id}", response_model=Item, response_model_exclude_none=True)
async def update_item(
    item_id: str,
    updates: ItemUpdate,
    service: ItemService = Depends(get_item_service),
) -> Item:
    """Update an existing item.

    Partial updates are supported; fields missing from the body remain
    unchanged.  ``description``, ``rating`` and ``imageUrl`` can be
    cleared by sending ``null``.
    """
    item = service.update(item_id, updates)
    if item is None:
        raise _not_found(item_id)
    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: str, service: ItemService = Depends(get_item_service)) -> Response:
    """Delete an item."""
    if not service.delete(item_id):
        raise _not_found(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
