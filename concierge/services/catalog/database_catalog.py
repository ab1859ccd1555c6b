"""Database-backed catalog provider."""
import logging
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.db.models import Hotel, Menu, MenuItem, ModifierGroup, ModifierOption, Restaurant
from concierge.services.catalog.base import CatalogProvider, IndexedMenuItem, RestaurantInfo
from concierge.services.ordering.models import (
    Catalog,
    CatalogMenuItem,
    CatalogModifierGroup,
    CatalogModifierOption,
)

logger = logging.getLogger(__name__)

APPROVED = "approved"


class DatabaseCatalogProvider(CatalogProvider):
    """Catalog provider reading approved, available rows via SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _restaurant_query(self):
        return (
            select(Restaurant, Hotel.name)
            .outerjoin(Hotel, Restaurant.hotel_id == Hotel.id)
            .where(Restaurant.status == APPROVED)
        )

    async def list_restaurants(self) -> List[RestaurantInfo]:
        result = await self.db.execute(self._restaurant_query().order_by(Restaurant.id))
        return [_to_restaurant_info(restaurant, hotel_name) for restaurant, hotel_name in result.all()]

    async def get_restaurant(self, restaurant_guid: str) -> Optional[RestaurantInfo]:
        result = await self.db.execute(
            self._restaurant_query().where(Restaurant.restaurant_guid == restaurant_guid).limit(1)
        )
        row = result.first()
        if row is None:
            return None
        restaurant, hotel_name = row
        return _to_restaurant_info(restaurant, hotel_name)

    async def get_indexed_menu_items(
        self, restaurant_guid: Optional[str] = None
    ) -> List[IndexedMenuItem]:
        query = (
            select(
                Restaurant.restaurant_guid,
                Restaurant.name,
                MenuItem.menu_item_guid,
                MenuItem.name,
                MenuItem.description,
            )
            .join(Menu, MenuItem.menu_id == Menu.id)
            .join(Restaurant, Menu.restaurant_id == Restaurant.id)
            .where(
                Restaurant.status == APPROVED,
                Menu.status == APPROVED,
                MenuItem.status == APPROVED,
                MenuItem.is_available.is_(True),
            )
            .order_by(Restaurant.id, MenuItem.id)
        )
        if restaurant_guid is not None:
            query = query.where(Restaurant.restaurant_guid == restaurant_guid)

        result = await self.db.execute(query)
        rows = result.all()
        logger.debug(f"[CATALOG] Indexed {len(rows)} menu items - scope: {restaurant_guid or 'all'}")
        return [
            IndexedMenuItem(
                restaurant_guid=row[0],
                restaurant_name=row[1],
                menu_item_guid=row[2],
                menu_item_name=row[3],
                menu_item_description=row[4],
            )
            for row in rows
        ]

    async def get_catalog(
        self, restaurant_guid: str, menu_item_guids: Iterable[str]
    ) -> Catalog:
        guids = list(menu_item_guids)
        if not guids:
            return Catalog()

        items_result = await self.db.execute(
            select(MenuItem)
            .join(Menu, MenuItem.menu_id == Menu.id)
            .join(Restaurant, Menu.restaurant_id == Restaurant.id)
            .where(
                Restaurant.restaurant_guid == restaurant_guid,
                MenuItem.menu_item_guid.in_(guids),
                Menu.status == APPROVED,
                MenuItem.status == APPROVED,
                MenuItem.is_available.is_(True),
            )
            .order_by(MenuItem.id)
        )
        menu_items = items_result.scalars().all()

        menu_item_ids = [item.id for item in menu_items]
        groups = []
        if menu_item_ids:
            groups_result = await self.db.execute(
                select(ModifierGroup)
                .where(
                    ModifierGroup.menu_item_id.in_(menu_item_ids),
                    ModifierGroup.status == APPROVED,
                )
                .order_by(ModifierGroup.id)
            )
            groups = groups_result.scalars().all()

        group_ids = [group.id for group in groups]
        options = []
        if group_ids:
            options_result = await self.db.execute(
                select(ModifierOption)
                .where(
                    ModifierOption.modifier_group_id.in_(group_ids),
                    ModifierOption.status == APPROVED,
                    ModifierOption.is_available.is_(True),
                )
                .order_by(ModifierOption.id)
            )
            options = options_result.scalars().all()

        return Catalog(
            menu_items=[
                CatalogMenuItem(
                    id=item.id,
                    menu_item_guid=item.menu_item_guid,
                    name=item.name,
                    description=item.description,
                    price=item.price,
                )
                for item in menu_items
            ],
            modifier_groups=[
                CatalogModifierGroup(
                    id=group.id,
                    modifier_group_guid=group.modifier_group_guid,
                    menu_item_id=group.menu_item_id,
                    name=group.name,
                    min_selections=group.min_selections,
                    max_selections=group.max_selections,
                    is_required=group.is_required,
                    is_multi_select=group.is_multi_select,
                )
                for group in groups
            ],
            modifier_options=[
                CatalogModifierOption(
                    id=option.id,
                    modifier_option_guid=option.modifier_option_guid,
                    modifier_group_id=option.modifier_group_id,
                    name=option.name,
                    price=option.price,
                )
                for option in options
            ],
        )


def _to_restaurant_info(restaurant: Restaurant, hotel_name: Optional[str]) -> RestaurantInfo:
    return RestaurantInfo(
        id=restaurant.id,
        restaurant_guid=restaurant.restaurant_guid,
        name=restaurant.name,
        hotel_id=restaurant.hotel_id,
        hotel_name=hotel_name,
        delivery_fee=restaurant.delivery_fee,
        service_fee_percent=restaurant.service_fee_percent,
    )
