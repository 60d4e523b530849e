"""Load restaurants and their menus from a seed document.

    {"restaurants": [{"id": "...", "name": "...", "commission_rate": 0.1,
                      "payout_account_id": "acc_...",
                      "menu": [{"id": "...", "name": "...", "price": 120, "available": true}]}]}

Must run inside an ordering domain context.
"""

import json
from pathlib import Path

import structlog
from protean.utils.globals import current_domain

from ordering.catalogue.menu_item import MenuItem
from ordering.order.pricing import DEFAULT_COMMISSION_RATE
from ordering.restaurant.restaurant import Restaurant

logger = structlog.get_logger(__name__)


def load_seed(data: dict) -> list[Restaurant]:
    restaurant_repo = current_domain.repository_for(Restaurant)
    menu_repo = current_domain.repository_for(MenuItem)

    restaurants = []
    for entry in data.get("restaurants", []):
        restaurant = Restaurant.register(
            name=entry["name"],
            commission_rate=entry.get("commission_rate", DEFAULT_COMMISSION_RATE),
            payout_account_id=entry.get("payout_account_id"),
            restaurant_id=entry.get("id"),
        )
        restaurant_repo.add(restaurant)

        menu = entry.get("menu", [])
        for item in menu:
            menu_repo.add(
                MenuItem(
                    **({"id": item["id"]} if item.get("id") else {}),
                    restaurant_id=str(restaurant.id),
                    name=item["name"],
                    price=item["price"],
                    is_available=item.get("available", True),
                )
            )
        logger.info(
            "restaurant_seeded",
            restaurant_id=str(restaurant.id),
            name=restaurant.name,
            menu_items=len(menu),
            payout_linked=restaurant.can_receive_transfers,
        )
        restaurants.append(restaurant)
    return restaurants


def load_seed_file(path) -> list[Restaurant]:
    return load_seed(json.loads(Path(path).read_text()))
