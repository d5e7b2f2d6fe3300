"""Product catalogue entity."""

from typing import Any, Dict, Optional

from defactuur.models.base import Entity, compact


class Product(Entity):
    """A product that invoice items can refer to."""
    id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    vat: Optional[float] = None  # Percentage

    def to_payload(self, for_api: bool = False) -> Dict[str, Any]:
        data = {
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "vat": self.vat,
        }
        if for_api:
            return compact(data)
        return {"id": self.id, **data}
