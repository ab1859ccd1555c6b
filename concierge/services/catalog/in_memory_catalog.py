"""In-memory catalog provider."""
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from pydantic import BaseModel

from concierge.services.catalog.base import CatalogProvider, IndexedMenuItem, RestaurantInfo
from concierge.services.ordering.models import (
    Catalog,
    CatalogMenuItem,
    CatalogModifierGroup,
    CatalogModifierOption,
)

logger = logging.getLogger(__name__)

APPROVED = "approved"


class _RestaurantEntry(BaseModel):
    """Restaurant as loaded from YAML, with its flattened catalog rows."""

    info: RestaurantInfo
    menu_items: List[CatalogMenuItem] = []
    modifier_groups: List[CatalogModifierGroup] = []
    modifier_options: List[CatalogModifierOption] = []


class InMemoryCatalogProvider(CatalogProvider):
    """In-memory catalog provider using YAML configuration.

    The file holds ``hotels`` and ``restaurants``; each restaurant nests its
    ``menu_items``, each item its ``modifier_groups`` and each group its
    ``options``. Rows carry an optional ``status`` (default ``approved``) and
    items/options an optional ``is_available`` (default true).
    """

    def __init__(self, catalog_file: str):
        self.catalog_file = Path(catalog_file)
        self._restaurants: Optional[Dict[str, _RestaurantEntry]] = None

    async def _load_catalog(self) -> Dict[str, _RestaurantEntry]:
        """Load catalog from YAML file."""
        if self._restaurants is None:
            with open(self.catalog_file, "r") as f:
                data = yaml.safe_load(f) or {}

            hotel_names = {
                hotel["id"]: hotel.get("name") for hotel in data.get("hotels", [])
            }
            restaurants: Dict[str, _RestaurantEntry] = {}
            for raw in data.get("restaurants", []):
                if not _is_approved(raw):
                    continue
                entry = _build_entry(raw, hotel_names)
                restaurants[entry.info.restaurant_guid] = entry

            logger.info(
                f"[CATALOG] Loaded {len(restaurants)} restaurants from {self.catalog_file}"
            )
            self._restaurants = restaurants
        return self._restaurants

    async def list_restaurants(self) -> List[RestaurantInfo]:
        restaurants = await self._load_catalog()
        return [entry.info for entry in restaurants.values()]

    async def get_restaurant(self, restaurant_guid: str) -> Optional[RestaurantInfo]:
        restaurants = await self._load_catalog()
        entry = restaurants.get(restaurant_guid)
        return entry.info if entry else None

    async def get_indexed_menu_items(
        self, restaurant_guid: Optional[str] = None
    ) -> List[IndexedMenuItem]:
        restaurants = await self._load_catalog()
        indexed = []
        for entry in restaurants.values():
            if restaurant_guid is not None and entry.info.restaurant_guid != restaurant_guid:
                continue
            for item in entry.menu_items:
                indexed.append(
                    IndexedMenuItem(
                        restaurant_guid=entry.info.restaurant_guid,
                        restaurant_name=entry.info.name,
                        menu_item_guid=item.menu_item_guid,
                        menu_item_name=item.name,
                        menu_item_description=item.description,
                    )
                )
        return indexed

    async def get_catalog(
        self, restaurant_guid: str, menu_item_guids: Iterable[str]
    ) -> Catalog:
        restaurants = await self._load_catalog()
        entry = restaurants.get(restaurant_guid)
        if entry is None:
            return Catalog()

        wanted = set(menu_item_guids)
        menu_items = [item for item in entry.menu_items if item.menu_item_guid in wanted]
        item_ids = {item.id for item in menu_items}
        groups = [group for group in entry.modifier_groups if group.menu_item_id in item_ids]
        group_ids = {group.id for group in groups}
        options = [
            option for option in entry.modifier_options if option.modifier_group_id in group_ids
        ]
        return Catalog(menu_items=menu_items, modifier_groups=groups, modifier_options=options)


def _is_approved(raw: Dict[str, Any]) -> bool:
    return raw.get("status", APPROVED) == APPROVED


def _is_orderable(raw: Dict[str, Any]) -> bool:
    return _is_approved(raw) and raw.get("is_available", True)


def _build_entry(raw: Dict[str, Any], hotel_names: Dict[int, Optional[str]]) -> _RestaurantEntry:
    info = RestaurantInfo(
        id=raw["id"],
        restaurant_guid=raw["restaurant_guid"],
        name=raw["name"],
        hotel_id=raw.get("hotel_id"),
        hotel_name=hotel_names.get(raw.get("hotel_id")),
        delivery_fee=str(raw.get("delivery_fee", "0.00")),
        service_fee_percent=str(raw.get("service_fee_percent", "0")),
    )

    menu_items = []
    groups = []
    options = []
    for item in raw.get("menu_items", []):
        if not _is_orderable(item):
            continue
        menu_items.append(
            CatalogMenuItem(
                id=item["id"],
                menu_item_guid=item["menu_item_guid"],
                name=item["name"],
                description=item.get("description"),
                price=item.get("price"),
            )
        )
        for group in item.get("modifier_groups", []):
            if not _is_approved(group):
                continue
            groups.append(
                CatalogModifierGroup(
                    id=group["id"],
                    modifier_group_guid=group["modifier_group_guid"],
                    menu_item_id=item["id"],
                    name=group["name"],
                    min_selections=group.get("min_selections"),
                    max_selections=group.get("max_selections"),
                    is_required=group.get("is_required"),
                    is_multi_select=group.get("is_multi_select"),
                )
            )
            for option in group.get("options", []):
                if not _is_orderable(option):
                    continue
                options.append(
                    CatalogModifierOption(
                        id=option["id"],
                        modifier_option_guid=option["modifier_option_guid"],
                        modifier_group_id=group["id"],
                        name=option["name"],
                        price=option.get("price"),
                    )
                )

    return _RestaurantEntry(
        info=info,
        menu_items=menu_items,
        modifier_groups=groups,
        modifier_options=options,
    )
