"""Tests for splitting a food court cart into per-restaurant groups."""

import pytest
from ordering.catalogue.port import CatalogItem, CatalogLookup
from ordering.checkout.splitter import CartLine, OrderSplitter, new_group_id
from ordering.errors import EmptyCart, InvalidQuantity, UnresolvableItem


class DictCatalog(CatalogLookup):
    def __init__(self, *items):
        self._items = {item.item_id: item for item in items}

    def resolve_item(self, item_id):
        return self._items.get(item_id)


CATALOG = DictCatalog(
    CatalogItem("item-a", "Butter Chicken", 100.0, "rest-1"),
    CatalogItem("item-a2", "Garlic Naan", 30.0, "rest-1"),
    CatalogItem("item-b", "Masala Dosa", 50.0, "rest-2"),
    CatalogItem("item-c", "Margherita", 80.0, "rest-3"),
    CatalogItem("item-x", "Tandoori Platter", 250.0, "rest-1", available=False),
)


@pytest.fixture
def splitter():
    return OrderSplitter(CATALOG)


class TestCartLine:
    @pytest.mark.parametrize("quantity", [0, -2])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(InvalidQuantity):
            CartLine("item-a", quantity)

    def test_quantity_must_be_an_integer(self):
        with pytest.raises(InvalidQuantity):
            CartLine("item-a", 1.5)

    def test_menu_item_is_required(self):
        with pytest.raises(UnresolvableItem):
            CartLine("", 1)


class TestSplit:
    def test_two_restaurants(self, splitter):
        split = splitter.split([CartLine("item-a", 2), CartLine("item-b", 1)])

        assert [g.restaurant_id for g in split.groups] == ["rest-1", "rest-2"]
        first, second = split.groups
        assert (first.charges.subtotal, first.charges.service_charge, first.charges.tax) == (200.0, 10.0, 36.0)
        assert first.charges.grand_total == 246.0
        assert (second.charges.subtotal, second.charges.service_charge, second.charges.tax) == (50.0, 3.0, 9.0)
        assert second.charges.grand_total == 62.0
        assert split.grand_total == 308.0
        assert split.group_id.startswith("GRP-")

    def test_single_restaurant_has_no_group(self, splitter):
        split = splitter.split([CartLine("item-a", 1), CartLine("item-a2", 2)])
        assert split.restaurant_count == 1
        assert split.group_id is None
        assert len(split.groups[0].lines) == 2

    def test_existing_group_id_is_kept(self, splitter):
        split = splitter.split([CartLine("item-c", 1)], existing_group_id="GRP-EARLIER")
        assert split.group_id == "GRP-EARLIER"

    def test_groups_follow_first_appearance(self, splitter):
        split = splitter.split([CartLine("item-b", 1), CartLine("item-a", 1), CartLine("item-b", 2)])
        assert [g.restaurant_id for g in split.groups] == ["rest-2", "rest-1"]
        assert [line.quantity for line in split.groups[0].lines] == [1, 2]

    def test_prices_come_from_catalog(self, splitter):
        split = splitter.split([CartLine("item-a", 3, notes="extra spicy")])
        line = split.groups[0].lines[0]
        assert line.unit_price == 100.0
        assert line.name == "Butter Chicken"
        assert line.notes == "extra spicy"
        assert split.item_count == 3

    def test_every_line_is_accounted_for(self, splitter):
        cart = [CartLine("item-a", 1), CartLine("item-b", 4), CartLine("item-c", 2), CartLine("item-a2", 1)]
        split = splitter.split(cart)
        assert split.item_count == sum(line.quantity for line in cart)
        assert split.grand_total == sum(g.charges.grand_total for g in split.groups)

    def test_empty_cart(self, splitter):
        with pytest.raises(EmptyCart):
            splitter.split([])

    def test_unknown_item_rejects_whole_cart(self, splitter):
        with pytest.raises(UnresolvableItem) as exc:
            splitter.split([CartLine("item-a", 1), CartLine("ghost", 1)])
        assert "ghost" in exc.value.messages["items"][0]

    def test_unavailable_item_rejects_whole_cart(self, splitter):
        with pytest.raises(UnresolvableItem) as exc:
            splitter.split([CartLine("item-x", 1)])
        assert "not available" in exc.value.messages["items"][0]


def test_group_ids_are_unique():
    assert len({new_group_id() for _ in range(50)}) == 50
