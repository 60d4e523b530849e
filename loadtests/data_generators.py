"""Faker-based payloads for the food court load test scenarios.

Menu item ids come from the same seed file the server is started with
(``SEED_FILE=data/seed.json``), so every generated cart resolves.
"""

import json
import os
import random
from pathlib import Path

from faker import Faker

fake = Faker("en_IN")

SEED_FILE = Path(os.environ.get("SEED_FILE", Path(__file__).resolve().parent.parent / "data" / "seed.json"))


def _available_items_by_restaurant() -> dict[str, list[str]]:
    data = json.loads(SEED_FILE.read_text())
    return {
        restaurant["id"]: [item["id"] for item in restaurant.get("menu", []) if item.get("available", True)]
        for restaurant in data["restaurants"]
    }


MENU = _available_items_by_restaurant()


def cart_items(restaurant_count: int = 2, max_lines_per_restaurant: int = 3) -> list[dict]:
    """A cart spanning ``restaurant_count`` restaurants picked at random."""
    restaurants = random.sample(sorted(MENU), k=min(restaurant_count, len(MENU)))
    items = []
    for restaurant_id in restaurants:
        for menu_item_id in random.sample(MENU[restaurant_id], k=random.randint(1, min(max_lines_per_restaurant, len(MENU[restaurant_id])))):
            items.append({"menu_item_id": menu_item_id, "quantity": random.randint(1, 3)})
    return items


def customer_contact() -> dict:
    return {"customer_email": fake.email(), "customer_phone": fake.numerify("+91 9#########")}


def checkout_data(restaurant_count: int = 2) -> dict:
    return {
        "items": cart_items(restaurant_count),
        "fulfillment_type": random.choice(["dine_in", "takeaway"]),
        **customer_contact(),
    }
