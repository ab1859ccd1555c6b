"""Catalog repository."""
from typing import Iterable, List, Optional

from concierge.services.catalog.base import CatalogProvider, IndexedMenuItem, RestaurantInfo
from concierge.services.ordering.models import Catalog


class CatalogRepository:
    """Repository for catalog lookups."""

    def __init__(self, provider: CatalogProvider):
        self.provider = provider

    async def list_restaurants(self) -> List[RestaurantInfo]:
        """List approved restaurants."""
        return await self.provider.list_restaurants()

    async def get_restaurant(self, restaurant_guid: str) -> Optional[RestaurantInfo]:
        """Get restaurant by guid."""
        return await self.provider.get_restaurant(restaurant_guid)

    async def get_indexed_menu_items(
        self, restaurant_guid: Optional[str] = None
    ) -> List[IndexedMenuItem]:
        """Get searchable menu items."""
        return await self.provider.get_indexed_menu_items(restaurant_guid)

    async def get_catalog(
        self, restaurant_guid: str, menu_item_guids: Iterable[str]
    ) -> Catalog:
        """Get the catalog for a set of menu items, deduplicating guids."""
        unique_guids = list(dict.fromkeys(menu_item_guids))
        if not unique_guids:
            return Catalog()
        return await self.provider.get_catalog(restaurant_guid, unique_guids)
