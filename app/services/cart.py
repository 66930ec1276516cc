from typing import List
from decimal import Decimal
from pydantic import BaseModel
from sqlmodel import Session
from app.models.cart import Cart
from app.models.catalog import Family
from app.services.catalog import CatalogService, to_money

UNKNOWN_ITEM_NAME = "Unavailable item"

class CartLine(BaseModel):
    id: int
    family: Family
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    available: bool

class CartView(BaseModel):
    items: List[CartLine]
    subtotal: Decimal

class CartService:
    """Prices a cart against the catalog for display."""

    def __init__(self, session: Session):
        self.session = session
        self.catalog = CatalogService(session)

    def view(self, cart: Cart) -> CartView:
        # Unknown references degrade to a placeholder line instead of failing
        rows = self.catalog.fetch(entry.key for entry in cart)
        lines = []
        subtotal = Decimal("0.00")
        for entry in cart:
            item = rows.get(entry.key)
            if item:
                name, price = item.name, to_money(item.price)
            else:
                name, price = UNKNOWN_ITEM_NAME, to_money(0)
            line_total = price * entry.quantity
            subtotal += line_total
            lines.append(CartLine(
                id=entry.id,
                family=entry.family,
                name=name,
                unit_price=price,
                quantity=entry.quantity,
                line_total=line_total,
                available=item is not None
            ))
        return CartView(items=lines, subtotal=subtotal)
