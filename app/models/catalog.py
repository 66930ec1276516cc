from typing import Dict, Optional, Type
from decimal import Decimal
from datetime import datetime
from enum import Enum
from sqlmodel import Field, SQLModel
from app.models.base import timestamp_field

class Family(str, Enum):
    PRODUCT = "product"
    PROMOTION = "promotion"
    ADDON = "addon"

class CatalogItemBase(SQLModel):
    # Basic Info
    name: str = Field(index=True)
    description: Optional[str] = None
    image_url: Optional[str] = None

    # Pricing
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)

    # Inventory
    stock_quantity: int = Field(default=0, ge=0)

    # Timestamps
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()

class Product(CatalogItemBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    category: Optional[str] = None  # e.g. "coffee", "pastry"

class Promotion(CatalogItemBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

class AddOn(CatalogItemBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

CATALOG_MODELS: Dict[Family, Type[CatalogItemBase]] = {
    Family.PRODUCT: Product,
    Family.PROMOTION: Promotion,
    Family.ADDON: AddOn,
}

def catalog_model(family: Family) -> Type[CatalogItemBase]:
    return CATALOG_MODELS[Family(family)]
