"""Application service for checkout (order creation)."""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from fulfillment.application.dtos import OrderDTO, PlaceOrderItem
from fulfillment.data.uow import create_uow
from fulfillment.domain.entities import Order, OrderItem, Product
from fulfillment.domain.enums import DeliveryType, GiftType, OrderStatus
from fulfillment.domain.errors import NotFoundError
from fulfillment.domain.value_objects import Money, OrderNumber

from .support import load_order, order_to_dto


logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Creates orders with their items in one transaction.

    Prices arrive as snapshots from the pricing collaborator; this service
    only sums line totals into the order amount.
    """

    def __init__(self, session_factory: async_sessionmaker, currency: str = "CNY") -> None:
        self._session_factory = session_factory
        self._currency = currency

    async def place_order(
        self,
        user_id: int,
        items: List[PlaceOrderItem],
        gift_card: Optional[str] = None,
        gift_type: Optional[int] = None,
    ) -> OrderDTO:
        """Create a pending-payment order.

        An order is a gift when ``gift_card`` or ``gift_type`` is given. A
        multi-recipient gift splits every line into quantity-1 items so each
        unit can be claimed by a different person.

        Raises:
            ValueError: If no items are given
            NotFoundError: If a product does not exist
        """
        if not items:
            raise ValueError("An order needs at least one item")

        is_gift = gift_card is not None or gift_type is not None
        if is_gift and gift_type is None:
            gift_type = GiftType.SINGLE_RECIPIENT
        split_units = gift_type == GiftType.MULTI_RECIPIENT

        uow = create_uow(self._session_factory)
        async with uow:
            products = await uow.products.get_many(line.product_id for line in items)
            missing = sorted({line.product_id for line in items} - set(products))
            if missing:
                raise NotFoundError(f"Products not found: {missing}", details={"product_ids": missing})

            order_items: List[OrderItem] = []
            for line in items:
                product = products[line.product_id]
                quantities = [1] * line.quantity if split_units else [line.quantity]
                order_items.extend(
                    self._build_item(product, quantity, line.price) for quantity in quantities
                )

            amount = Money(Decimal("0"), self._currency)
            for item in order_items:
                amount = amount + item.line_total

            order = Order(
                order_no=str(OrderNumber.generate()),
                user_id=user_id,
                amount=amount,
                status=OrderStatus.PENDING_PAYMENT,
                is_gift=is_gift,
                gift_type=gift_type,
                gift_card=gift_card,
                items=order_items,
            )
            await uow.orders.add(order)
            await uow.commit()

            logger.info(
                f"✅ [{uow.execution_id}] Order {order.order_no} placed by user {user_id} "
                f"({len(order_items)} item(s), {amount})"
            )
            order = await load_order(uow, order.id, with_plans=True)
            return order_to_dto(order, str(uow.execution_id))

    def _build_item(self, product: Product, quantity: int, price: Decimal) -> OrderItem:
        is_interval = product.delivery_type == DeliveryType.INTERVAL.value
        return OrderItem(
            product_id=product.id,
            product_name=product.product_name,
            quantity=quantity,
            price=Money(price, self._currency),
            delivery_type=product.delivery_type,
            total_deliveries=product.max_deliveries if is_interval else 1,
            delivery_interval=product.delivery_interval if is_interval else 0,
        )
