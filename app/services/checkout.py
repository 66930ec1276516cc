import logging
from typing import Optional
from decimal import Decimal
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from app.core.errors import (
    AppError,
    EmptyCart,
    InsufficientStock,
    ItemNotFound,
    PersistenceFailure,
    Unauthenticated,
)
from app.db.session import begin_write_transaction
from app.models.base import utcnow
from app.models.cart import Cart
from app.models.order import Order, OrderItem, OrderStatus
from app.services.catalog import CatalogService, to_money

logger = logging.getLogger(__name__)

class CheckoutService:
    """Turns a cart into a committed order in a single transaction.

    Either the order, its items and every stock decrement are committed
    together, or nothing is. The cart itself is never modified here; the
    caller empties it once ``checkout`` has returned.
    """

    def __init__(self, session: Session):
        self.session = session
        self.catalog = CatalogService(session)

    def checkout(self, user_id: Optional[int], cart: Cart) -> int:
        if user_id is None:
            raise Unauthenticated("Log in to place an order")
        if cart.is_empty():
            raise EmptyCart()

        logger.info("Checkout started: user_id=%s, lines=%d", user_id, len(cart))
        try:
            order = self._place_order(user_id, cart)
            order_id = order.id
            total = order.total
            self.session.commit()
        except AppError as e:
            self.session.rollback()
            logger.warning("Checkout rejected for user_id=%s: %s: %s", user_id, e.kind, e.message)
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Checkout failed for user_id=%s", user_id, exc_info=True)
            raise PersistenceFailure() from e

        logger.info("Order created: id=%s, user_id=%s, lines=%d, total=%s", order_id, user_id, len(cart), total)
        return order_id

    def _place_order(self, user_id: int, cart: Cart) -> Order:
        requested = cart.quantities()

        # Lock every touched row before looking at stock
        begin_write_transaction(self.session)
        rows = self.catalog.fetch(requested.keys(), lock=True)

        total = Decimal("0.00")
        order_items = []
        for entry in cart:
            item = rows.get(entry.key)
            if item is None:
                raise ItemNotFound(entry.family.value, entry.id)
            if item.stock_quantity < requested[entry.key]:
                raise InsufficientStock(
                    entry.family.value, entry.id, item.name,
                    requested=requested[entry.key], available=item.stock_quantity
                )

            price = to_money(item.price)
            total += price * entry.quantity
            order_items.append(OrderItem(
                family=entry.family,
                item_id=entry.id,
                name_at_purchase=item.name,
                quantity=entry.quantity,
                price_at_purchase=price
            ))

        order = Order(user_id=user_id, total=total, status=OrderStatus.PENDING, items=order_items)
        self.session.add(order)

        now = utcnow()
        for key, quantity in requested.items():
            item = rows[key]
            item.stock_quantity -= quantity
            item.updated_at = now
            self.session.add(item)

        self.session.flush()
        return order
