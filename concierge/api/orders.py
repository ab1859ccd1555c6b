"""Order API endpoints."""
import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import Field

from concierge.core.config import settings
from concierge.core.dependencies import get_catalog_repository, get_order_service
from concierge.db.models import Order
from concierge.services.catalog.repository import CatalogRepository
from concierge.services.notifications.alerts import (
    build_order_created_alert_payload,
    format_order_created_slack_message,
    format_order_created_sms_message,
)
from concierge.services.notifications.handoff import (
    build_human_ops_handoff_payload,
    format_slack_message,
    format_sms_message,
)
from concierge.services.notifications.models import (
    AlertGuest,
    AlertHotel,
    AlertRestaurant,
    HandoffGuest,
    HandoffHotel,
    HandoffReason,
    HandoffRestaurant,
    HumanOpsHandoffPayload,
    NotificationItem,
    OrderCreatedAlertPayload,
)
from concierge.services.ordering.artifact import (
    extract_canonical_bot_items,
    extract_canonical_order_artifact,
)
from concierge.services.ordering.exceptions import (
    InvalidRestaurantConfigError,
    RestaurantNotFoundError,
)
from concierge.services.ordering.models import (
    CamelModel,
    CanonicalOrderArtifact,
    CompileStatus,
)
from concierge.services.ordering.service import compile_canonical_order_request
from concierge.services.persistence.orders import OrderPersistenceService

router = APIRouter(prefix="/api/orders")
logger = logging.getLogger(__name__)


class CreateOrderRequest(CamelModel):
    """Guest order submission."""

    restaurant_guid: str = Field(min_length=1)
    room_number: str = Field(min_length=1)
    guest_name: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_email: Optional[str] = None
    special_instructions: Optional[str] = None
    items: Any = None


class OrderItemResponse(CamelModel):
    """Order item response model."""

    id: int
    item_name: str
    quantity: int
    modifiers: List[str] = []


class OrderResponse(CamelModel):
    """Order response model."""

    id: int
    status: str
    room_number: str
    total_amount: str
    created_at: str
    items: List[OrderItemResponse] = []
    canonical_order: Optional[CanonicalOrderArtifact] = None


class BotItemsResponse(CamelModel):
    order_id: int
    source: Literal["canonical", "fallback"]
    items: List[Dict[str, Any]]


class HandoffRequest(CamelModel):
    reason: HandoffReason
    failure_stage: Optional[str] = None
    failure_message: Optional[str] = None


class HandoffResponse(CamelModel):
    payload: HumanOpsHandoffPayload
    slack_message: str
    sms_message: str


class AlertResponse(CamelModel):
    payload: OrderCreatedAlertPayload
    slack_message: str
    sms_message: str


def _fallback_items(order: Order) -> List[NotificationItem]:
    return [
        NotificationItem(
            name=item.item_name,
            quantity=item.quantity,
            modifiers=list(item.modifiers or []),
        )
        for item in order.items
    ]


def _to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        status=order.status,
        room_number=order.room_number,
        total_amount=order.total_amount,
        created_at=order.created_at.isoformat() if order.created_at else "",
        items=[
            OrderItemResponse(
                id=item.id,
                item_name=item.item_name,
                quantity=item.quantity,
                modifiers=list(item.modifiers or []),
            )
            for item in order.items
        ],
        canonical_order=extract_canonical_order_artifact(order.order_metadata),
    )


async def _load_order(orders: OrderPersistenceService, order_id: int) -> Order:
    order = await orders.get_order_by_id(order_id)
    if order is None:
        logger.warning(f"[ORDERS] Order {order_id} not found")
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return order


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(
    request: Request,
    body: CreateOrderRequest,
    catalog: CatalogRepository = Depends(get_catalog_repository),
    orders: OrderPersistenceService = Depends(get_order_service),
):
    """Compile and place an order; only ready-to-execute orders are stored."""
    logger.info(
        f"[ORDERS] Create order requested - restaurant: {body.restaurant_guid}, "
        f"room: {body.room_number}, Client: {request.client.host if request.client else 'unknown'}"
    )
    try:
        result = await compile_canonical_order_request(catalog, body.restaurant_guid, body.items)
    except RestaurantNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidRestaurantConfigError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if result.status != CompileStatus.READY_TO_EXECUTE:
        logger.info(
            f"[ORDERS] Order not placed - status: {result.status}, "
            f"issues: {[str(issue.code) for issue in result.issues]}"
        )
        return JSONResponse(status_code=422, content=jsonable_encoder(result))

    try:
        order = await orders.create_order(
            result,
            room_number=body.room_number,
            guest_name=body.guest_name,
            guest_phone=body.guest_phone,
            guest_email=body.guest_email,
            special_instructions=body.special_instructions,
        )
    except Exception as e:
        logger.error(
            f"[ORDERS] Error creating order - restaurant: {body.restaurant_guid}, "
            f"Error: {type(e).__name__}: {e}",
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail="Failed to create order")

    return _to_order_response(order)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    orders: OrderPersistenceService = Depends(get_order_service),
):
    """Get an order with its items and canonical artifact."""
    return _to_order_response(await _load_order(orders, order_id))


@router.get("/{order_id}/bot-items", response_model=BotItemsResponse)
async def get_bot_items(
    order_id: int,
    orders: OrderPersistenceService = Depends(get_order_service),
):
    """Items for bot ordering automation, canonical when available."""
    order = await _load_order(orders, order_id)
    canonical_items = extract_canonical_bot_items(order.order_metadata)
    if canonical_items is not None:
        return BotItemsResponse(
            order_id=order.id,
            source="canonical",
            items=[item.model_dump(mode="json") for item in canonical_items],
        )

    logger.info(f"[ORDERS] Order {order_id} has no canonical artifact, using item rows")
    return BotItemsResponse(
        order_id=order.id,
        source="fallback",
        items=[item.model_dump(mode="json") for item in _fallback_items(order)],
    )


@router.post("/{order_id}/handoff", response_model=HandoffResponse)
async def create_handoff(
    order_id: int,
    body: HandoffRequest,
    orders: OrderPersistenceService = Depends(get_order_service),
):
    """Build the human-ops handoff for an order automation could not finish."""
    order = await _load_order(orders, order_id)
    restaurant = order.restaurant
    hotel = restaurant.hotel if restaurant else None

    payload = build_human_ops_handoff_payload(
        reason=body.reason,
        order_id=order.id,
        order_status=order.status,
        failure_stage=body.failure_stage,
        failure_message=body.failure_message,
        guest=HandoffGuest(
            name=order.guest_name or "",
            phone=order.guest_phone or "",
            email=order.guest_email or "",
            room_number=order.room_number,
        ),
        hotel=HandoffHotel(
            id=hotel.id if hotel else 0,
            name=hotel.name if hotel else "",
            address=hotel.address if hotel else "",
        ),
        restaurant=HandoffRestaurant(
            id=order.restaurant_id,
            name=restaurant.name if restaurant else "",
            source_url=restaurant.source_url if restaurant else "",
        ),
        metadata=order.order_metadata,
        fallback_items=_fallback_items(order),
        admin_base_url=settings.admin_base_url,
    )
    logger.info(f"[ORDERS] Handoff built for order {order.id} - reason: {body.reason}")
    return HandoffResponse(
        payload=payload,
        slack_message=format_slack_message(payload),
        sms_message=format_sms_message(payload),
    )


@router.get("/{order_id}/alert", response_model=AlertResponse)
async def get_order_alert(
    order_id: int,
    orders: OrderPersistenceService = Depends(get_order_service),
):
    """Build the order-created alert for hotel staff."""
    order = await _load_order(orders, order_id)
    restaurant = order.restaurant
    hotel = restaurant.hotel if restaurant else None

    payload = build_order_created_alert_payload(
        order_id=order.id,
        order_status=order.status,
        hotel=AlertHotel(
            id=hotel.id if hotel else 0,
            name=hotel.name if hotel else "",
            slug=hotel.slug if hotel else None,
        ),
        restaurant=AlertRestaurant(
            id=order.restaurant_id,
            name=restaurant.name if restaurant else "",
        ),
        guest=AlertGuest(
            name=order.guest_name,
            phone=order.guest_phone,
            email=order.guest_email,
            room_number=order.room_number,
        ),
        total_amount=order.total_amount,
        metadata=order.order_metadata,
        fallback_items=_fallback_items(order),
        admin_base_url=settings.admin_base_url,
    )
    return AlertResponse(
        payload=payload,
        slack_message=format_order_created_slack_message(payload),
        sms_message=format_order_created_sms_message(payload),
    )
