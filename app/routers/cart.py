from typing import Any, Optional
from fastapi import APIRouter, Depends, Request
from sqlmodel import Session
from pydantic import BaseModel, Field, field_validator
from app.db.session import get_session
from app.models.cart import Cart, CartEntry, coerce_quantity
from app.models.catalog import Family
from app.services.cart import CartService, CartView

router = APIRouter()

CART_SESSION_KEY = "cart"

class CartItemCreate(BaseModel):
    family: Family
    id: int = Field(gt=0)
    quantity: int = 1

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, value: Any) -> int:
        return coerce_quantity(value)

class CartItemUpdate(BaseModel):
    delta: int

class CartUpdateResponse(BaseModel):
    message: str
    item: Optional[CartEntry] = None

def load_cart(request: Request) -> Cart:
    return Cart.from_session(request.session.get(CART_SESSION_KEY))

def save_cart(request: Request, cart: Cart):
    request.session[CART_SESSION_KEY] = cart.to_session()

def get_cart_service(session: Session = Depends(get_session)) -> CartService:
    return CartService(session)

@router.get("/", response_model=CartView)
def get_cart(request: Request, service: CartService = Depends(get_cart_service)):
    """Current cart with names and prices from the catalog.

    The priced lines come back in cart order under ``items``, next to the
    cart ``subtotal``: ``{"items": [...], "subtotal": "..."}``.
    """
    return service.view(load_cart(request))

@router.post("/add", response_model=CartView)
def add_to_cart(
    cart_item: CartItemCreate,
    request: Request,
    service: CartService = Depends(get_cart_service)
):
    """Add item to cart; repeated adds accumulate quantity"""
    cart = load_cart(request)
    cart.add(cart_item.family, cart_item.id, cart_item.quantity)
    save_cart(request, cart)
    return service.view(cart)

@router.patch("/{family}/{item_id}", response_model=CartUpdateResponse)
def update_cart_item(family: Family, item_id: int, cart_update: CartItemUpdate, request: Request):
    """Change quantity by a signed delta; dropping to zero removes the item"""
    cart = load_cart(request)
    entry = cart.update_quantity(family, item_id, cart_update.delta)
    save_cart(request, cart)
    if entry is None:
        return CartUpdateResponse(message="Item removed from cart")
    return CartUpdateResponse(message="Quantity updated", item=entry)

@router.delete("/clear")
def clear_cart(request: Request):
    """Clear entire cart"""
    cart = load_cart(request)
    cart.clear()
    save_cart(request, cart)
    return {"message": "Cart cleared"}

@router.delete("/{family}/{item_id}")
def remove_from_cart(family: Family, item_id: int, request: Request):
    """Remove item from cart"""
    cart = load_cart(request)
    cart.remove(family, item_id)
    save_cart(request, cart)
    return {"message": "Item removed from cart"}
