# Import all models to register them with SQLModel
from app.models.user import User
from app.models.catalog import Family, Product, Promotion, AddOn, CATALOG_MODELS, catalog_model
from app.models.order import Order, OrderItem, OrderStatus, ALLOWED_TRANSITIONS
from app.models.cart import Cart, CartEntry

__all__ = [
    "User",
    "Family",
    "Product",
    "Promotion",
    "AddOn",
    "CATALOG_MODELS",
    "catalog_model",
    "Order",
    "OrderItem",
    "OrderStatus",
    "ALLOWED_TRANSITIONS",
    "Cart",
    "CartEntry",
]
