import logging
from typing import List
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, func
from app.core.errors import AppError, InvalidStatus, InvalidTransition, NotFound, PersistenceFailure
from app.models.base import utcnow
from app.models.catalog import Family
from app.models.order import Order, OrderItem, OrderStatus, ALLOWED_TRANSITIONS

logger = logging.getLogger(__name__)

class OrderItemView(BaseModel):
    family: Family
    item_id: int
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

class OrderDetail(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    total: Decimal
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemView]

class OrderSummary(BaseModel):
    id: int
    status: OrderStatus
    total: Decimal
    item_count: int
    created_at: datetime

def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise InvalidStatus(f"Invalid status '{value}'. Allowed: {allowed}")

class OrderService:
    def __init__(self, session: Session):
        self.session = session

    def get_order(self, order_id: int) -> OrderDetail:
        """Order header with its line items, as recorded at checkout."""
        order = self.session.get(Order, order_id)
        if not order:
            raise NotFound(f"Order {order_id} not found")

        items = self.session.exec(
            select(OrderItem).where(OrderItem.order_id == order.id).order_by(OrderItem.id)
        ).all()
        return OrderDetail(
            id=order.id,
            user_id=order.user_id,
            status=order.status,
            total=order.total,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemView(
                    family=item.family,
                    item_id=item.item_id,
                    name=item.name_at_purchase,
                    quantity=item.quantity,
                    unit_price=item.price_at_purchase,
                    line_total=item.price_at_purchase * item.quantity
                )
                for item in items
            ]
        )

    def get_user_orders(self, user_id: int) -> List[OrderSummary]:
        rows = self.session.exec(
            select(Order, func.count(OrderItem.id))
            .join(OrderItem, OrderItem.order_id == Order.id, isouter=True)
            .where(Order.user_id == user_id)
            .group_by(Order.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        ).all()
        return [
            OrderSummary(
                id=order.id,
                status=order.status,
                total=order.total,
                item_count=count,
                created_at=order.created_at
            )
            for order, count in rows
        ]

    def update_status(self, order_id: int, new_status) -> Order:
        status = parse_status(new_status)
        try:
            order = self.session.exec(
                select(Order).where(Order.id == order_id).with_for_update()
            ).first()
            if not order:
                raise NotFound(f"Order {order_id} not found")

            if order.status != status:
                if status not in ALLOWED_TRANSITIONS[order.status]:
                    raise InvalidTransition(
                        f"Cannot move order {order_id} from {order.status.value} to {status.value}"
                    )
                previous = order.status
                order.status = status
                order.updated_at = utcnow()
                self.session.add(order)
                self.session.commit()
                self.session.refresh(order)
                logger.info("Order %s status %s -> %s", order_id, previous.value, status.value)
        except AppError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Status update failed for order %s", order_id, exc_info=True)
            raise PersistenceFailure() from e
        return order
