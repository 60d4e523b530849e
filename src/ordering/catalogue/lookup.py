"""Catalog lookup backed by the MenuItem repository."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.catalogue.menu_item import MenuItem
from ordering.catalogue.port import CatalogItem, CatalogLookup


class RepositoryCatalog(CatalogLookup):
    def resolve_item(self, item_id):
        try:
            item = current_domain.repository_for(MenuItem).get(str(item_id))
        except ObjectNotFoundError:
            return None
        return CatalogItem(
            item_id=str(item.id),
            name=item.name,
            price=item.price,
            restaurant_id=str(item.restaurant_id),
            available=bool(item.is_available),
        )
