"""Human-ops handoff payloads for orders automation could not finish."""
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from concierge.services.notifications.models import (
    CompilerSummary,
    HandoffGuest,
    HandoffHotel,
    HandoffReason,
    HandoffRestaurant,
    HumanOpsHandoffPayload,
    NotificationItem,
    resolve_notification_items,
    summarize_items,
)

UNKNOWN_COMPILER_VERSION = "unknown"
SMS_ITEM_LIMIT = 3


def build_human_ops_handoff_payload(
    reason: HandoffReason,
    order_id: int,
    order_status: str,
    guest: HandoffGuest,
    hotel: HandoffHotel,
    restaurant: HandoffRestaurant,
    metadata: Any,
    fallback_items: Sequence[NotificationItem],
    admin_base_url: str,
    failure_stage: Optional[str] = None,
    failure_message: Optional[str] = None,
) -> HumanOpsHandoffPayload:
    """
    Build the handoff payload for an order.

    Items come from the canonical artifact in ``metadata`` when it holds any,
    otherwise from ``fallback_items``. Compiler fields report the artifact's
    version, item count and subtotal, or ``unknown``, the item count and 0
    without one.
    """
    artifact, items = resolve_notification_items(metadata, fallback_items)

    return HumanOpsHandoffPayload(
        created_at=datetime.now(timezone.utc).isoformat(),
        reason=reason,
        order_id=order_id,
        order_status=order_status,
        failure_stage=failure_stage,
        failure_message=failure_message,
        guest=guest,
        hotel=hotel,
        restaurant=restaurant,
        items=items,
        compiler=CompilerSummary(
            item_count=artifact.item_count if artifact else len(items),
            subtotal=artifact.subtotal if artifact else 0.0,
            compiler_version=artifact.compiler_version if artifact else UNKNOWN_COMPILER_VERSION,
        ),
        admin_url=f"{admin_base_url.rstrip('/')}/admin/orders",
    )


def format_slack_message(payload: HumanOpsHandoffPayload) -> str:
    lines = [
        "*OPS HANDOFF REQUIRED*",
        f"Order #{payload.order_id} | reason: {payload.reason}",
        f"Stage: {payload.failure_stage}" if payload.failure_stage else None,
        f"Error: {payload.failure_message}" if payload.failure_message else None,
        f"Hotel: {payload.hotel.name} | Room: {payload.guest.room_number}",
        f"Guest: {payload.guest.name} ({payload.guest.phone})",
        f"Restaurant: {payload.restaurant.name}",
        f"Items: {summarize_items(payload.items) or 'N/A'}",
        f"Admin: {payload.admin_url}",
    ]
    return "\n".join(line for line in lines if line is not None)


def format_sms_message(payload: HumanOpsHandoffPayload) -> str:
    item_summary = summarize_items(payload.items, SMS_ITEM_LIMIT)
    stage = f" {payload.failure_stage}" if payload.failure_stage else ""
    parts = [
        f"HANDOFF: Order #{payload.order_id}{stage}",
        f"Hotel {payload.hotel.name}, room {payload.guest.room_number}.",
        f"Guest {payload.guest.name} {payload.guest.phone}.",
        f"Restaurant {payload.restaurant.name}.",
        f"Items: {item_summary}." if item_summary else None,
        f"Open: {payload.admin_url}",
    ]
    return " ".join(part for part in parts if part is not None)
