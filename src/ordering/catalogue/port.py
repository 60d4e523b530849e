"""Catalog lookup port — how checkout sees the menu.

Menu management lives elsewhere; checkout only needs the current price,
availability and owning restaurant of each item.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogItem:
    item_id: str
    name: str
    price: float
    restaurant_id: str
    available: bool = True


class CatalogLookup(ABC):
    @abstractmethod
    def resolve_item(self, item_id: str) -> CatalogItem | None:
        """Return the item, or None when the id is unknown."""
        ...
