"""Default service catalog, loaded into an empty database on first start"""

import logging

from sqlalchemy.orm import Session

from ...models import Discount, Service
from .repository import PricingRepository

logger = logging.getLogger(__name__)

# (key, label, price, hours)
HOUSE_VARIANTS = [
    ("house-rancher", "Rancher House Wash", 350, 2),
    ("house-single", "Single Family House Wash", 575, 3),
    ("house-plus", "Plus+ House Wash", 805, 4),
]

# Add-on prices scale with house size: {variant key: [(suffix, label, price, hours)]}
HOUSE_ADDONS = {
    "house-rancher": [
        ("roof", "Roof Wash", 125, 1),
        ("driveway", "Driveway Hot Wash", 75, 1.5),
        ("heavy-stain", "Driveway Heavy Stain (Peroxide/Degreaser)", 125, 2),
        ("uv", "UV Protectant", 25, 1),
        ("windows", "Streak-Free Window Cleaning", 25, 0.75),
    ],
    "house-single": [
        ("roof", "Roof Wash", 225, 1),
        ("driveway", "Driveway Hot Wash", 75, 1.5),
        ("heavy-stain", "Driveway Heavy Stain (Peroxide/Degreaser)", 125, 2),
        ("uv", "UV Protectant", 65, 1),
        ("windows", "Streak-Free Window Cleaning", 60, 0.75),
    ],
    "house-plus": [
        ("roof", "Roof Wash", 400, 1),
        ("driveway", "Driveway Hot Wash", 125, 1.5),
        ("heavy-stain", "Driveway Heavy Stain (Peroxide/Degreaser)", 175, 2),
        ("uv", "UV Protectant", 100, 1),
        ("windows", "Streak-Free Window Cleaning", 85, 0.75),
    ],
}

DECKS = [
    ("deck-little", "Little Deck", 175, 2),
    ("deck-medium", "Medium Deck", 250, 2),
    ("deck-large", "Large Deck", 350, 2),
]

FENCES = [
    ("fence-standard", "Standard Fence (1/4 Acre)", 200, 2),
    ("fence-large", "Large Fence (1/2 Acre)", 350, 2),
]

RV_VARIANTS = [
    ("rv-short", "Short Bus RV", 75, 1),
    ("rv-medium", "Medium Bumper Pull RV", 125, 1),
    ("rv-large", "Big Boy 5th Wheel RV", 200, 1),
]

RV_ADDONS = {
    "rv-short": [("uv", "UV Protectant", 20, 0.5), ("windows", "Streak-Free Window Cleaning", 20, 0.25)],
    "rv-medium": [("uv", "UV Protectant", 35, 0.5), ("windows", "Streak-Free Window Cleaning", 35, 0.25)],
    "rv-large": [("uv", "UV Protectant", 50, 0.5), ("windows", "Streak-Free Window Cleaning", 50, 0.25)],
}

BOATS = [
    ("boat-small", "Boat (20ft or Less)", 150, 1),
    ("boat-large", "Boat (21-26ft)", 225, 1),
]

# (key, label, percent, auto_apply, min_services)
DISCOUNTS = [
    ("multi-2", "2+ Services Discount", 10, True, 2),
    ("multi-3", "3+ Services Discount", 15, True, 3),
    ("cash", "Cash Payment Discount", 10, False, None),
    ("returning", "Returning Customer Discount", 10, False, None),
]


def default_services() -> list[Service]:
    rows: list[Service] = []

    def add(key, label, category, price, hours, order, parent=None, group=None):
        rows.append(
            Service(
                key=key,
                label=label,
                category=category,
                parent_key=parent,
                price=price,
                duration=float(hours),
                sort_order=order,
                bookable_group=group,
                active=True,
            )
        )

    for order, (key, label, price, hours) in enumerate(HOUSE_VARIANTS):
        add(key, label, "house", price, hours, order, group="house")
        for addon_order, (suffix, addon_label, addon_price, addon_hours) in enumerate(HOUSE_ADDONS[key]):
            add(f"{key}-{suffix}", addon_label, "house-addon", addon_price, addon_hours, addon_order, parent=key)

    for order, (key, label, price, hours) in enumerate(DECKS):
        add(key, label, "deck", price, hours, order)

    for order, (key, label, price, hours) in enumerate(FENCES):
        add(key, label, "fence", price, hours, order)

    for order, (key, label, price, hours) in enumerate(RV_VARIANTS):
        add(key, label, "rv", price, hours, order, group="rv")
        for addon_order, (suffix, addon_label, addon_price, addon_hours) in enumerate(RV_ADDONS[key]):
            add(f"{key}-{suffix}", addon_label, "rv-addon", addon_price, addon_hours, addon_order, parent=key)

    for order, (key, label, price, hours) in enumerate(BOATS):
        add(key, label, "boat", price, hours, order)

    return rows


def default_discounts() -> list[Discount]:
    return [
        Discount(
            key=key,
            label=label,
            percent=float(percent),
            auto_apply=auto_apply,
            min_services=min_services,
            sort_order=order,
            active=True,
        )
        for order, (key, label, percent, auto_apply, min_services) in enumerate(DISCOUNTS)
    ]


def seed_catalog(db: Session) -> bool:
    """Insert the default services and discounts when the services table is empty"""
    if PricingRepository.count_services(db) > 0:
        return False

    services = default_services()
    discounts = default_discounts()
    db.add_all(services)
    db.add_all(discounts)
    db.commit()
    logger.info(f"🌱 Seeded pricing catalog: {len(services)} services, {len(discounts)} discounts")
    return True
