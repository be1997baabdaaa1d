"""
FastAPI dependencies shared by the endpoints.

The application keeps its ``ItemService`` on ``app.state`` (see
``main.create_app``); handlers obtain it through ``get_item_service`` so
tests can build an app around any data file.
"""

from typing import List

from fastapi import Request

from ..services.item_service import ItemService


def get_item_service(request: Request) -> ItemService:
    return request.app.state.item_service


def parse_id_list(raw: str) -> List[str]:
    """Split a comma-separated id list, trimming blanks and dropping empties."""
    return [part.strip() for part in raw.split(",") if part.strip()]
