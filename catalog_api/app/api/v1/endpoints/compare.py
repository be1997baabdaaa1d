"""
Comparison endpoint for API v1.

``GET /compare?ids=a,b,c`` returns the comparison view of every known
item among the requested identifiers.  Unknown and repeated identifiers
are skipped; results follow catalog order.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from catalog_api.app.api.deps import get_item_service, parse_id_list
from catalog_api.app.core.cache import conditional_response
from catalog_api.app.core.config import settings
from catalog_api.app.schemas.item import ItemComparison
from catalog_api.app.services.item_service import ItemService


router = APIRouter()


@router.get("/", response_model=List[ItemComparison], response_model_exclude_none=True)
async def compare_items(
    request: Request,
    response: Response,
    ids: str = Query(..., description="Comma-separated list of item IDs", examples=["id1,id2,id3"]),
    service: ItemService = Depends(get_item_service),
):
    """Compare up to ``COMPARE_MAX_IDS`` items side by side."""
    item_ids = parse_id_list(ids)
    max_ids = getattr(request.app.state, "settings", settings).compare_max_ids
    if not item_ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="At least one item ID is required")
    if len(item_ids) > max_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Maximum {max_ids} items can be compared at once",
        )
    cached = conditional_response(request, response, service.validation_token())
    if cached is not None:
        return cached
    return service.compare(item_ids)
