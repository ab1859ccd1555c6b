"""FastAPI dependencies."""
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.core.config import settings
from concierge.db.database import get_db
from concierge.services.catalog.database_catalog import DatabaseCatalogProvider
from concierge.services.catalog.in_memory_catalog import InMemoryCatalogProvider
from concierge.services.catalog.repository import CatalogRepository
from concierge.services.persistence.orders import OrderPersistenceService


@lru_cache
def _in_memory_catalog_provider(catalog_file: str) -> InMemoryCatalogProvider:
    return InMemoryCatalogProvider(catalog_file=catalog_file)


def get_catalog_repository(db: AsyncSession = Depends(get_db)) -> CatalogRepository:
    """Get catalog repository instance, YAML-backed when a catalog file is configured."""
    if settings.catalog_file:
        return CatalogRepository(provider=_in_memory_catalog_provider(settings.catalog_file))
    return CatalogRepository(provider=DatabaseCatalogProvider(db))


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderPersistenceService:
    """Get order persistence service instance."""
    return OrderPersistenceService(db)
