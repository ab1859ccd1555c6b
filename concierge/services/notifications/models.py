"""Notification payload models shared by handoff and alert builders."""
from enum import Enum
from typing import Any, List, Literal, Optional, Sequence, Tuple

from concierge.services.ordering.artifact import extract_canonical_order_artifact
from concierge.services.ordering.models import CamelModel, CanonicalOrderArtifact


class NotificationItem(CamelModel):
    """Item line as shown to human operators."""

    name: str
    quantity: int
    modifiers: List[str] = []


class HandoffReason(str, Enum):
    """Why an order is handed to human operations."""

    BOT_FAILED = "bot_failed"
    BOT_ERROR = "bot_error"
    CAPTURE_FAILED = "capture_failed"
    CANCEL_FAILED = "cancel_failed"

    def __str__(self) -> str:
        return self.value


class HandoffGuest(CamelModel):
    name: str
    phone: str
    email: str
    room_number: str


class HandoffHotel(CamelModel):
    id: int
    name: str
    address: str


class HandoffRestaurant(CamelModel):
    id: int
    name: str
    source_url: str


class CompilerSummary(CamelModel):
    item_count: int
    subtotal: float
    compiler_version: str


class HumanOpsHandoffPayload(CamelModel):
    """Everything an operator needs to finish an order by hand."""

    handoff_version: Literal["v1"] = "v1"
    created_at: str
    reason: HandoffReason
    order_id: int
    order_status: str
    failure_stage: Optional[str] = None
    failure_message: Optional[str] = None
    guest: HandoffGuest
    hotel: HandoffHotel
    restaurant: HandoffRestaurant
    items: List[NotificationItem]
    compiler: CompilerSummary
    admin_url: str


class AlertHotel(CamelModel):
    id: int
    name: str
    slug: Optional[str] = None


class AlertRestaurant(CamelModel):
    id: int
    name: str


class AlertGuest(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    room_number: str


class OrderCreatedAlertPayload(CamelModel):
    """New-order alert sent to hotel staff."""

    alert_version: Literal["v1"] = "v1"
    created_at: str
    order_id: int
    order_status: str
    hotel: AlertHotel
    restaurant: AlertRestaurant
    guest: AlertGuest
    total_amount: str
    items: List[NotificationItem] = []
    admin_url: str


def resolve_notification_items(
    metadata: Any, fallback_items: Sequence[NotificationItem]
) -> Tuple[Optional[CanonicalOrderArtifact], List[NotificationItem]]:
    """
    Prefer the canonical artifact's items; fall back to the stored item rows.

    Canonical modifiers are the option names of every selected group, in
    order. An artifact without items still falls back to the stored rows.
    """
    artifact = extract_canonical_order_artifact(metadata)
    canonical_items = []
    if artifact is not None:
        canonical_items = [
            NotificationItem(
                name=item.item_name,
                quantity=item.quantity,
                modifiers=[
                    option.option_name
                    for group in item.modifier_details
                    for option in group.options
                ],
            )
            for item in artifact.items
        ]

    if canonical_items:
        return artifact, canonical_items
    return artifact, [item.model_copy(deep=True) for item in fallback_items]


def summarize_items(items: Sequence[NotificationItem], limit: Optional[int] = None) -> str:
    """Render "2x Burger, 1x Fries" for at most ``limit`` items."""
    shown = items if limit is None else items[:limit]
    return ", ".join(f"{item.quantity}x {item.name}" for item in shown)
