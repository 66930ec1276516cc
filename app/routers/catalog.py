from typing import List, Optional
from decimal import Decimal
from fastapi import APIRouter, Depends
from sqlmodel import Session
from pydantic import BaseModel
from app.db.session import get_session
from app.models.catalog import Family
from app.services.catalog import CatalogService

router = APIRouter()

class CatalogItemRead(BaseModel):
    id: int
    family: Family
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    price: Decimal
    stock_quantity: int

def get_catalog_service(session: Session = Depends(get_session)) -> CatalogService:
    return CatalogService(session)

def to_read(family: Family, item) -> CatalogItemRead:
    return CatalogItemRead(family=family, **item.model_dump(include=set(CatalogItemRead.model_fields) - {"family"}))

@router.get("/{family}", response_model=List[CatalogItemRead])
def list_items(family: Family, service: CatalogService = Depends(get_catalog_service)):
    return [to_read(family, item) for item in service.list_items(family)]

@router.get("/{family}/{item_id}", response_model=CatalogItemRead)
def read_item(family: Family, item_id: int, service: CatalogService = Depends(get_catalog_service)):
    return to_read(family, service.get_item(family, item_id))
