"""
Pydantic models for catalog items.

``Item`` is the stored record and mirrors one entry of the JSON data
file.  ``ItemCreate`` and ``ItemUpdate`` describe request payloads;
``ItemComparison`` is the reduced view returned by the compare endpoint.
Field names are snake_case in Python and camelCase on the wire
(``imageUrl``, ``createdAt``, ``updatedAt``).
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional, Tuple

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator


class Item(BaseModel):
    """A single catalog record as stored in the data file."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str = Field(..., min_length=1, examples=["iPhone 15 Pro"])
    price: float = Field(..., gt=0, examples=[999.99])
    category: str = Field(..., min_length=1, examples=["smartphones"])
    brand: str = Field(..., min_length=1, examples=["Apple"])
    description: Optional[str] = None
    # Tuple so records handed out by the store cannot be mutated in place.
    features: Tuple[str, ...] = ()
    rating: Optional[float] = Field(None, ge=0, le=5)
    availability: bool = True
    image_url: Optional[str] = Field(None, alias="imageUrl")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Hand-edited files may carry timestamps without an offset.
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class ItemCreate(BaseModel):
    """Schema for creating an item."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, examples=["Test Product"])
    price: float = Field(..., gt=0, examples=[299.99])
    category: str = Field(..., min_length=1, examples=["test-category"])
    brand: str = Field(..., min_length=1, examples=["Test Brand"])
    description: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    rating: Optional[float] = Field(None, ge=0, le=5)
    availability: bool = True
    image_url: Optional[AnyHttpUrl] = Field(None, alias="imageUrl")


class ItemUpdate(BaseModel):
    """Schema for a partial item update.

    All fields are optional.  Only the fields present in the payload are
    applied; ``model_dump(exclude_unset=True)`` tells an omitted field from
    one explicitly set to ``""``, ``False`` or (for clearable fields)
    ``None``.  Unknown keys such as ``id`` or ``createdAt`` are ignored.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, gt=0)
    category: Optional[str] = Field(None, min_length=1)
    brand: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    features: Optional[List[str]] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    availability: Optional[bool] = None
    image_url: Optional[AnyHttpUrl] = Field(None, alias="imageUrl")

    # Only description, rating and imageUrl may be cleared with an explicit null.
    @field_validator("name", "price", "category", "brand", "features", "availability")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v

    def changes(self) -> dict:
        """Return the explicitly provided fields keyed by attribute name."""
        data = self.model_dump(exclude_unset=True)
        # model_copy does not validate, so match Item.features here.
        if "features" in data:
            data["features"] = tuple(data["features"])
        if data.get("image_url") is not None:
            data["image_url"] = str(data["image_url"])
        return data


class ItemComparison(BaseModel):
    """Comparison view of an item.

    Availability and timestamps are internal bookkeeping and are left out.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    price: float
    category: str
    brand: str
    features: List[str]
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    rating: Optional[float] = None

    @classmethod
    def from_item(cls, item: Item) -> "ItemComparison":
        return cls(
            id=item.id,
            name=item.name,
            price=item.price,
            category=item.category,
            brand=item.brand,
            features=list(item.features),
            description=item.description,
            image_url=item.image_url,
            rating=item.rating,
        )


SortField = Literal["name", "price", "rating", "createdAt"]
SortOrder = Literal["asc", "desc"]


class ItemsQuery(BaseModel):
    """Typed parameters for listing items.

    Bounds on ``page`` and ``limit`` are enforced here, at the edge; the
    service trusts them.
    """

    model_config = ConfigDict(populate_by_name=True)

    category: Optional[str] = None
    brand: Optional[str] = None
    min_price: Optional[float] = Field(None, gt=0, alias="minPrice")
    max_price: Optional[float] = Field(None, gt=0, alias="maxPrice")
    search: Optional[str] = None
    sort_by: SortField = Field("createdAt", alias="sortBy")
    sort_order: SortOrder = Field("desc", alias="sortOrder")
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class PaginationMeta(BaseModel):
    """Pagination metadata returned alongside a page of items."""

    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(..., alias="totalPages")
    has_next: bool = Field(..., alias="hasNext")
    has_prev: bool = Field(..., alias="hasPrev")


class ItemPage(BaseModel):
    """A page of items with its pagination metadata."""

    items: List[Item]
    meta: PaginationMeta
