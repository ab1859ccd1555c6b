"""Shared test fixtures and configuration."""
import pytest
import os
from decimal import Decimal
from pathlib import Path

import yaml
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ADMIN_BASE_URL", "https://concierge.test")

from concierge.main import app
from concierge.db.database import get_db
from concierge.db.models import (
    Base,
    Hotel,
    Menu,
    MenuItem,
    ModifierGroup,
    ModifierOption,
    Restaurant,
)
from concierge.core.config import Settings
from concierge.services.catalog.in_memory_catalog import InMemoryCatalogProvider
from concierge.services.catalog.repository import CatalogRepository
from concierge.services.ordering.models import (
    Catalog,
    CatalogMenuItem,
    CatalogModifierGroup,
    CatalogModifierOption,
)
from catalog_ids import (
    ADDONS_GROUP,
    AVOCADO,
    BACON,
    CHEESEBURGER,
    DONENESS_GROUP,
    FRENCH_FRIES,
    MEDIUM,
    WELL_DONE,
)


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def test_settings():
    """Override settings for testing."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        admin_base_url="https://concierge.test",
        catalog_file=None,
        max_candidates=3,
    )


@pytest.fixture
def test_catalog_path():
    """Return path to test catalog YAML file."""
    return Path(__file__).parent / "fixtures" / "test_catalog.yaml"


@pytest.fixture
def test_catalog_data(test_catalog_path):
    """Raw test catalog as loaded from YAML."""
    with open(test_catalog_path, "r") as f:
        return yaml.safe_load(f)


@pytest.fixture
def test_catalog_repository(test_catalog_path):
    """Create catalog repository backed by the YAML fixture."""
    provider = InMemoryCatalogProvider(catalog_file=str(test_catalog_path))
    return CatalogRepository(provider)


@pytest.fixture
def burger_catalog():
    """Single burger with a required single-select group and a multi-select group."""
    return Catalog(
        menu_items=[
            CatalogMenuItem(
                id=11,
                menu_item_guid=CHEESEBURGER,
                name="Cheeseburger",
                price="10.00",
            ),
            CatalogMenuItem(
                id=15,
                menu_item_guid=FRENCH_FRIES,
                name="French Fries",
                price="4.00",
            ),
        ],
        modifier_groups=[
            CatalogModifierGroup(
                id=101,
                modifier_group_guid=DONENESS_GROUP,
                menu_item_id=11,
                name="Doneness",
                is_required=True,
                is_multi_select=False,
            ),
            CatalogModifierGroup(
                id=102,
                modifier_group_guid=ADDONS_GROUP,
                menu_item_id=11,
                name="Add-ons",
                min_selections=0,
                max_selections=2,
                is_multi_select=True,
            ),
        ],
        modifier_options=[
            CatalogModifierOption(id=1001, modifier_option_guid=MEDIUM, modifier_group_id=101, name="Medium", price="0.00"),
            CatalogModifierOption(id=1002, modifier_option_guid=WELL_DONE, modifier_group_id=101, name="Well Done", price="0.00"),
            CatalogModifierOption(id=1003, modifier_option_guid=BACON, modifier_group_id=102, name="Bacon", price="2.00"),
            CatalogModifierOption(id=1004, modifier_option_guid=AVOCADO, modifier_group_id=102, name="Avocado", price="1.50"),
        ],
    )


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_db(test_db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


async def seed_catalog(session: AsyncSession, data: dict) -> None:
    """Insert the YAML catalog into the database, one menu per restaurant."""
    for hotel in data.get("hotels", []):
        session.add(Hotel(**hotel))

    for raw in data.get("restaurants", []):
        restaurant = Restaurant(
            id=raw["id"],
            restaurant_guid=raw["restaurant_guid"],
            hotel_id=raw.get("hotel_id"),
            name=raw["name"],
            source_url=raw.get("source_url", ""),
            status=raw.get("status", "approved"),
            delivery_fee=raw.get("delivery_fee", "0.00"),
            service_fee_percent=raw.get("service_fee_percent", "0"),
        )
        menu = Menu(id=raw["id"], name="Main", restaurant=restaurant)
        for item in raw.get("menu_items", []):
            menu_item = MenuItem(
                id=item["id"],
                menu_item_guid=item["menu_item_guid"],
                name=item["name"],
                description=item.get("description"),
                price=Decimal(item["price"]) if item.get("price") is not None else None,
                status=item.get("status", "approved"),
                is_available=item.get("is_available", True),
            )
            for group in item.get("modifier_groups", []):
                modifier_group = ModifierGroup(
                    id=group["id"],
                    modifier_group_guid=group["modifier_group_guid"],
                    name=group["name"],
                    min_selections=group.get("min_selections"),
                    max_selections=group.get("max_selections"),
                    is_required=group.get("is_required"),
                    is_multi_select=group.get("is_multi_select"),
                    status=group.get("status", "approved"),
                )
                for option in group.get("options", []):
                    modifier_group.options.append(
                        ModifierOption(
                            id=option["id"],
                            modifier_option_guid=option["modifier_option_guid"],
                            name=option["name"],
                            price=Decimal(option["price"]) if option.get("price") is not None else None,
                            status=option.get("status", "approved"),
                            is_available=option.get("is_available", True),
                        )
                    )
                menu_item.modifier_groups.append(modifier_group)
            menu.items.append(menu_item)
        session.add(restaurant)
        session.add(menu)

    await session.commit()


@pytest.fixture
async def seeded_db(test_db, test_catalog_data):
    """Test database session holding the fixture catalog."""
    await seed_catalog(test_db, test_catalog_data)
    return test_db


@pytest.fixture
def override_get_db(seeded_db):
    """Override get_db dependency with test database."""
    async def _override_get_db():
        yield seeded_db
    return _override_get_db


@pytest.fixture
def test_client(override_get_db, test_settings, monkeypatch):
    """Create FastAPI test client with overrides."""
    app.dependency_overrides[get_db] = override_get_db

    # Override settings in modules that use it
    monkeypatch.setattr("concierge.core.dependencies.settings", test_settings)
    monkeypatch.setattr("concierge.api.order_compiler.settings", test_settings)
    monkeypatch.setattr("concierge.api.orders.settings", test_settings)

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()
