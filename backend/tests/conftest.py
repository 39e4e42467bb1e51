"""
Pytest configuration and shared fixtures.
"""

from datetime import timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from savorsync.main import app
from savorsync.api.deps import get_data_provider
from savorsync.providers.mock import MockDataProvider
from savorsync.schemas.order import OrderChannel
from tests.factories import AS_OF, make_menu_item, make_line, make_order


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def burger():
    return make_menu_item("item_burger", "Burger", price=10.0, cost=4.0)


@pytest.fixture
def fries():
    return make_menu_item("item_fries", "Fries", price=4.0, profit=3.0, category="Sides")


@pytest.fixture
def sample_orders(burger, fries):
    """Three orders totalling 60.00 over two days at two locations."""
    return [
        make_order(10.0, AS_OF - timedelta(hours=2), items=[make_line(burger, 1)]),
        make_order(
            20.0, AS_OF - timedelta(hours=1), channel=OrderChannel.TAKEOUT,
            items=[make_line(burger, 1), make_line(fries, 2)],
        ),
        make_order(30.0, AS_OF - timedelta(days=1), location_id="loc_2", items=[make_line(fries, 5)]),
    ]


@pytest.fixture(scope="session")
def mock_provider():
    return MockDataProvider(as_of=AS_OF, seed=1, days=30)


@pytest.fixture
def client(mock_provider):
    """Test client serving the seeded mock dataset."""
    app.dependency_overrides[get_data_provider] = lambda: mock_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def utc_provider():
    return MockDataProvider(as_of=AS_OF.replace(tzinfo=timezone.utc), seed=1, days=30)


@pytest.fixture
def utc_client(utc_provider):
    """Test client serving a dataset stamped in UTC."""
    app.dependency_overrides[get_data_provider] = lambda: utc_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
