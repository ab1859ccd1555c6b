"""Compile order requests against a restaurant's stored catalog."""
import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from concierge.services.catalog.repository import CatalogRepository
from concierge.services.ordering.compiler import compile_order_payload
from concierge.services.ordering.exceptions import (
    InvalidRestaurantConfigError,
    RestaurantNotFoundError,
)
from concierge.services.ordering.models import CompileServerResult

logger = logging.getLogger(__name__)


async def compile_canonical_order_request(
    repository: CatalogRepository, restaurant_guid: str, items: Any
) -> CompileServerResult:
    """
    Fetch the catalog slice for the requested items and compile them.

    Args:
        repository: Catalog source for the restaurant
        restaurant_guid: Restaurant the order is placed with
        items: Untrusted list of request items

    Returns:
        CompileServerResult carrying the compile outcome and the restaurant's fees

    Raises:
        RestaurantNotFoundError: Restaurant is unknown or not approved
        InvalidRestaurantConfigError: Fee configuration is not a finite number
    """
    restaurant = await repository.get_restaurant(restaurant_guid)
    if restaurant is None:
        raise RestaurantNotFoundError(f"Restaurant not found: {restaurant_guid}")

    delivery_fee = _parse_fee(restaurant.delivery_fee, "delivery fee")
    service_fee_percent = _parse_fee(restaurant.service_fee_percent, "service fee percent")

    catalog = await repository.get_catalog(restaurant_guid, _requested_guids(items))
    result = compile_order_payload(items, catalog)

    logger.info(
        f"[COMPILER] Restaurant {restaurant_guid} - status: {result.status}, "
        f"items: {len(result.items)}, issues: {len(result.issues)}, subtotal: {result.subtotal}"
    )
    return CompileServerResult(
        status=result.status,
        items=result.items,
        issues=result.issues,
        subtotal=result.subtotal,
        restaurant_id=restaurant.id,
        hotel_id=restaurant.hotel_id,
        delivery_fee=float(delivery_fee),
        service_fee_percent=float(service_fee_percent),
    )


def _parse_fee(value: str, label: str) -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidRestaurantConfigError(f"Restaurant {label} is invalid")
    if not amount.is_finite():
        raise InvalidRestaurantConfigError(f"Restaurant {label} is invalid")
    return amount


def _requested_guids(items: Any) -> list:
    """Menu item guids named by an untrusted payload, in request order."""
    if not isinstance(items, list):
        return []

    guids = []
    for entry in items:
        if isinstance(entry, dict):
            guid = entry.get("menuItemGuid", entry.get("menu_item_guid"))
        else:
            guid = getattr(entry, "menu_item_guid", None)
        if isinstance(guid, str):
            guids.append(guid)
    return guids
