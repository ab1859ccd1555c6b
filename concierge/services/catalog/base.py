"""Catalog provider interface."""
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from concierge.services.ordering.models import Catalog, CamelModel


class RestaurantInfo(CamelModel):
    """Approved restaurant with its fee configuration."""

    id: int
    restaurant_guid: str
    name: str
    hotel_id: Optional[int] = None
    hotel_name: Optional[str] = None
    delivery_fee: str = "0.00"
    service_fee_percent: str = "0"


class IndexedMenuItem(CamelModel):
    """Searchable menu item tagged with its restaurant."""

    restaurant_guid: str
    restaurant_name: str
    menu_item_guid: str
    menu_item_name: str
    menu_item_description: Optional[str] = None


class CatalogProvider(ABC):
    """Abstract base class for catalog providers.

    Implementations only expose approved, available rows.
    """

    @abstractmethod
    async def list_restaurants(self) -> List[RestaurantInfo]:
        """List approved restaurants."""
        pass

    @abstractmethod
    async def get_restaurant(self, restaurant_guid: str) -> Optional[RestaurantInfo]:
        """Get an approved restaurant by guid."""
        pass

    @abstractmethod
    async def get_indexed_menu_items(
        self, restaurant_guid: Optional[str] = None
    ) -> List[IndexedMenuItem]:
        """Get orderable menu items, optionally scoped to one restaurant."""
        pass

    @abstractmethod
    async def get_catalog(
        self, restaurant_guid: str, menu_item_guids: Iterable[str]
    ) -> Catalog:
        """Get the catalog slice covering the given menu items of a restaurant."""
        pass
