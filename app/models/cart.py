import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from app.core.errors import NotFound
from app.models.catalog import Family

logger = logging.getLogger(__name__)

CartKey = Tuple[Family, int]

def coerce_quantity(value: Any) -> int:
    """Quantities that are missing, non-numeric, fractional or below one become 1."""
    if isinstance(value, float) and not value.is_integer():
        return 1
    try:
        quantity = int(value)
    except (TypeError, ValueError, OverflowError):
        return 1
    return quantity if quantity >= 1 else 1

class CartEntry(BaseModel):
    family: Family
    id: int = Field(gt=0)
    quantity: int = Field(ge=1)

    @property
    def key(self) -> CartKey:
        return (self.family, self.id)

class Cart:
    """Session-owned cart: at most one entry per (family, id).

    The cart never talks to the catalog; prices and stock are resolved by
    the pricing and checkout services.
    """

    def __init__(self, entries: Optional[List[CartEntry]] = None):
        self.entries: List[CartEntry] = []
        for entry in entries or []:
            self.add(entry.family, entry.id, entry.quantity)

    @classmethod
    def from_session(cls, raw: Any) -> "Cart":
        entries = []
        for item in raw or []:
            try:
                entries.append(CartEntry.model_validate(item))
            except PydanticValidationError:
                logger.warning("Dropping malformed cart entry from session: %r", item)
        return cls(entries)

    def to_session(self) -> List[Dict[str, Any]]:
        return [entry.model_dump(mode="json") for entry in self.entries]

    def __iter__(self) -> Iterator[CartEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def is_empty(self) -> bool:
        return not self.entries

    def find(self, family: Family, item_id: int) -> Optional[CartEntry]:
        key = (Family(family), item_id)
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def add(self, family: Family, item_id: int, quantity: Any = 1) -> CartEntry:
        quantity = coerce_quantity(quantity)
        entry = self.find(family, item_id)
        if entry:
            entry.quantity += quantity
        else:
            entry = CartEntry(family=family, id=item_id, quantity=quantity)
            self.entries.append(entry)
        return entry

    def update_quantity(self, family: Family, item_id: int, delta: int) -> Optional[CartEntry]:
        """Apply a signed delta. Returns the entry, or None once it dropped out."""
        if self.is_empty():
            raise NotFound("Cart is empty")
        entry = self.find(family, item_id)
        if not entry:
            raise NotFound(f"Item {Family(family).value}:{item_id} is not in the cart")

        entry.quantity += delta
        if entry.quantity <= 0:
            self.entries.remove(entry)
            return None
        return entry

    def remove(self, family: Family, item_id: int):
        entry = self.find(family, item_id)
        if not entry:
            raise NotFound(f"Item {Family(family).value}:{item_id} is not in the cart")
        self.entries.remove(entry)

    def clear(self):
        self.entries.clear()

    def quantities(self) -> Dict[CartKey, int]:
        """Requested quantity per distinct catalog row."""
        totals: Dict[CartKey, int] = {}
        for entry in self.entries:
            totals[entry.key] = totals.get(entry.key, 0) + entry.quantity
        return totals
