from typing import List, Optional
from fastapi import APIRouter, Depends, Request
from sqlmodel import Session
from pydantic import BaseModel
from app.core.errors import Forbidden
from app.db.session import get_session
from app.models.user import User
from app.routers.auth import get_current_user, get_current_user_optional, get_current_superuser
from app.routers.cart import load_cart, save_cart
from app.services.checkout import CheckoutService
from app.services.order import OrderService, OrderDetail, OrderSummary

router = APIRouter()

class CheckoutResponse(BaseModel):
    order_id: int

class OrderStatusUpdate(BaseModel):
    # Plain string so unknown values surface as InvalidStatus
    status: str

class OrderStatusResponse(BaseModel):
    id: int
    status: str
    message: str

def get_order_service(session: Session = Depends(get_session)) -> OrderService:
    return OrderService(session)

def get_checkout_service(session: Session = Depends(get_session)) -> CheckoutService:
    return CheckoutService(session)

@router.post("/checkout", response_model=CheckoutResponse, status_code=201)
def checkout(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: CheckoutService = Depends(get_checkout_service)
):
    cart = load_cart(request)
    order_id = service.checkout(current_user.id if current_user else None, cart)

    # Only reached after the order is committed
    cart.clear()
    save_cart(request, cart)
    return CheckoutResponse(order_id=order_id)

@router.get("/", response_model=List[OrderSummary])
def list_orders(
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    return service.get_user_orders(current_user.id)

@router.get("/{id}", response_model=OrderDetail)
def get_order(
    id: int,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    order = service.get_order(id)
    if order.user_id != current_user.id and not current_user.is_superuser:
        raise Forbidden()
    return order

@router.patch("/{id}/status", response_model=OrderStatusResponse)
def update_order_status(
    id: int,
    status_in: OrderStatusUpdate,
    current_user: User = Depends(get_current_superuser),
    service: OrderService = Depends(get_order_service)
):
    order = service.update_status(id, status_in.status)
    return OrderStatusResponse(id=order.id, status=order.status.value, message="Status updated")
