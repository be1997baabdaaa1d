"""Pytest configuration for all tests."""

import json
import os

# Must be set before the application settings are imported.
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient

from catalog_api.app.core.config import Settings
from catalog_api.app.core.store import ItemStore
from catalog_api.app.main import create_app
from catalog_api.app.services.item_service import ItemService


def make_item(item_id: str, **overrides) -> dict:
    """Build a raw item as it appears in the data file."""
    item = {
        "id": item_id,
        "name": f"Product {item_id}",
        "price": 10.0,
        "category": "misc",
        "brand": "Generic",
        "features": [],
        "availability": True,
        "createdAt": "2024-01-01T10:00:00Z",
        "updatedAt": "2024-01-01T10:00:00Z",
    }
    item.update(overrides)
    return item


SAMPLE_ITEMS = [
    make_item(
        "1",
        name="iPhone 15 Pro",
        price=999.99,
        category="smartphones",
        brand="Apple",
        description="Latest iPhone with A17 Pro chip and titanium design",
        features=["A17 Pro chip", "48MP camera", "USB-C"],
        rating=4.8,
        imageUrl="https://example.com/iphone15pro.jpg",
        createdAt="2024-01-01T10:00:00Z",
        updatedAt="2024-01-01T10:00:00Z",
    ),
    make_item(
        "2",
        name="Samsung Galaxy S24 Ultra",
        price=1199.99,
        category="smartphones",
        brand="Samsung",
        description="Premium Android smartphone with S Pen",
        features=["Snapdragon 8 Gen 3", "200MP camera", "S Pen"],
        rating=4.7,
        createdAt="2024-01-02T10:00:00Z",
        updatedAt="2024-01-02T10:00:00Z",
    ),
    make_item(
        "3",
        name="MacBook Pro 14",
        price=1999.99,
        category="laptops",
        brand="Apple",
        description="Professional laptop with M3 chip",
        features=["M3 chip", "16GB RAM", "Touch ID"],
        rating=4.9,
        createdAt="2024-01-03T10:00:00Z",
        updatedAt="2024-01-03T10:00:00Z",
    ),
    make_item(
        "4",
        name="bose QuietComfort",
        price=349.0,
        category="headphones",
        brand="Bose",
        features=["Noise cancelling"],
        availability=False,
        createdAt="2024-01-04T10:00:00Z",
        updatedAt="2024-01-04T10:00:00Z",
    ),
]


def write_items(path, items) -> None:
    path.write_text(json.dumps(items, indent=2), encoding="utf-8")


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "items.json"
    write_items(path, SAMPLE_ITEMS)
    return path


@pytest.fixture
def store(data_file):
    item_store = ItemStore(str(data_file))
    yield item_store
    item_store.stop_watching()


@pytest.fixture
def service(store):
    return ItemService(store)


@pytest.fixture
def test_settings(data_file):
    return Settings(data_path=str(data_file), environment="test", log_level="WARNING")


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client
