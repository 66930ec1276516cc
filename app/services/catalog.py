from typing import Dict, Iterable, List
from decimal import Decimal
from sqlmodel import Session, select
from app.core.errors import NotFound
from app.models.catalog import Family, CatalogItemBase, catalog_model
from app.models.cart import CartKey

CENT = Decimal("0.01")

def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT)

class CatalogService:
    def __init__(self, session: Session):
        self.session = session

    def list_items(self, family: Family) -> List[CatalogItemBase]:
        model = catalog_model(family)
        return self.session.exec(select(model).order_by(model.id)).all()

    def get_item(self, family: Family, item_id: int) -> CatalogItemBase:
        item = self.session.get(catalog_model(family), item_id)
        if not item:
            raise NotFound(f"{Family(family).value.capitalize()} {item_id} not found")
        return item

    def fetch(self, keys: Iterable[CartKey], lock: bool = False) -> Dict[CartKey, CatalogItemBase]:
        """Load the catalog rows behind a set of (family, id) keys.

        With ``lock=True`` the rows are read ``FOR UPDATE`` so they stay
        locked until the surrounding transaction ends, and any copy the
        session already holds is overwritten with the locked values. Missing
        rows are simply absent from the result.
        """
        ids_by_family: Dict[Family, set] = {}
        for family, item_id in keys:
            ids_by_family.setdefault(Family(family), set()).add(item_id)

        rows: Dict[CartKey, CatalogItemBase] = {}
        # Fixed family order keeps lock acquisition order stable across checkouts
        for family in Family:
            ids = ids_by_family.get(family)
            if not ids:
                continue
            model = catalog_model(family)
            statement = select(model).where(model.id.in_(sorted(ids))).order_by(model.id)
            if lock:
                statement = statement.with_for_update().execution_options(populate_existing=True)
            for item in self.session.exec(statement).all():
                rows[(family, item.id)] = item
        return rows
