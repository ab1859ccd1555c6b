"""Order-created alerts for hotel staff."""
from datetime import datetime, timezone
from typing import Any, Sequence

from concierge.services.notifications.models import (
    AlertGuest,
    AlertHotel,
    AlertRestaurant,
    NotificationItem,
    OrderCreatedAlertPayload,
    resolve_notification_items,
    summarize_items,
)

SLACK_ITEM_LIMIT = 6
SMS_ITEM_LIMIT = 3


def build_order_created_alert_payload(
    order_id: int,
    order_status: str,
    hotel: AlertHotel,
    restaurant: AlertRestaurant,
    guest: AlertGuest,
    total_amount: str,
    metadata: Any,
    fallback_items: Sequence[NotificationItem],
    admin_base_url: str,
) -> OrderCreatedAlertPayload:
    """Build the new-order alert; links to the hotel's admin when it has a slug."""
    _, items = resolve_notification_items(metadata, fallback_items)
    base = admin_base_url.rstrip("/")
    admin_url = f"{base}/{hotel.slug}/admin/orders" if hotel.slug else f"{base}/admin/orders"

    return OrderCreatedAlertPayload(
        created_at=datetime.now(timezone.utc).isoformat(),
        order_id=order_id,
        order_status=order_status,
        hotel=hotel,
        restaurant=restaurant,
        guest=guest,
        total_amount=total_amount,
        items=items,
        admin_url=admin_url,
    )


def format_order_created_slack_message(payload: OrderCreatedAlertPayload) -> str:
    hotel_label = payload.hotel.name + (f" ({payload.hotel.slug})" if payload.hotel.slug else "")
    lines = [
        "*NEW ORDER*",
        f"Order #{payload.order_id} | status: {payload.order_status} | total: ${payload.total_amount}",
        f"Hotel: {hotel_label} | Room: {payload.guest.room_number}",
        f"Guest: {payload.guest.name}" if payload.guest.name else None,
        f"Phone: {payload.guest.phone}" if payload.guest.phone else None,
        f"Email: {payload.guest.email}" if payload.guest.email else None,
        f"Restaurant: {payload.restaurant.name}",
        f"Items: {summarize_items(payload.items, SLACK_ITEM_LIMIT) or 'N/A'}",
        f"Admin: {payload.admin_url}",
    ]
    return "\n".join(line for line in lines if line is not None)


def format_order_created_sms_message(payload: OrderCreatedAlertPayload) -> str:
    item_summary = summarize_items(payload.items, SMS_ITEM_LIMIT)
    parts = [
        f"NEW ORDER #{payload.order_id} ${payload.total_amount}",
        f"Hotel {payload.hotel.slug or payload.hotel.name}, room {payload.guest.room_number}.",
        f"Items: {item_summary}." if item_summary else None,
        f"Open: {payload.admin_url}",
    ]
    return " ".join(part for part in parts if part is not None)
