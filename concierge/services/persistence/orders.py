"""Order persistence service."""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from concierge.db.models import Order, OrderItem, Restaurant
from concierge.services.ordering.artifact import attach_canonical_order, freeze_compiled_order
from concierge.services.ordering.models import CompileServerResult

logger = logging.getLogger(__name__)


def calculate_order_total(result: CompileServerResult) -> Decimal:
    """Subtotal plus delivery fee plus the percentage service fee, in cents."""
    subtotal = Decimal(str(result.subtotal))
    service_fee = subtotal * Decimal(str(result.service_fee_percent)) / Decimal("100")
    total = subtotal + Decimal(str(result.delivery_fee)) + service_fee
    return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class OrderPersistenceService:
    """Service for persisting order data."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_order(
        self,
        result: CompileServerResult,
        room_number: str,
        guest_name: Optional[str] = None,
        guest_phone: Optional[str] = None,
        guest_email: Optional[str] = None,
        special_instructions: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Order:
        """
        Create an order from a ready compile result.

        The canonical artifact is frozen from the result and stored in the
        order metadata; item rows mirror the compiled items.

        Raises:
            ArtifactStatusError: The result is not ready to execute
        """
        artifact = freeze_compiled_order(result)

        order = Order(
            restaurant_id=result.restaurant_id,
            status="pending",
            room_number=room_number,
            guest_name=guest_name,
            guest_phone=guest_phone,
            guest_email=guest_email,
            special_instructions=special_instructions,
            total_amount=f"{calculate_order_total(result):.2f}",
            order_metadata=attach_canonical_order(metadata, artifact),
        )
        for item in artifact.items:
            order.items.append(
                OrderItem(
                    item_name=item.item_name,
                    quantity=item.quantity,
                    modifiers=[
                        option.option_name
                        for group in item.modifier_details
                        for option in group.options
                    ],
                )
            )

        self.db.add(order)
        await self.db.commit()
        logger.info(
            f"[ORDERS] Created order {order.id} - restaurant: {result.restaurant_id}, "
            f"items: {artifact.item_count}, total: {order.total_amount}"
        )
        return await self.get_order_by_id(order.id)

    async def get_order_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID with items, restaurant and hotel."""
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
            .options(
                selectinload(Order.items),
                selectinload(Order.restaurant).selectinload(Restaurant.hotel),
            )
        )
        return result.scalar_one_or_none()

