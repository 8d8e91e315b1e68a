"""
Till Register Engine — Demo Data
===================================
The starter catalog and staff a fresh register ships with.
"""

from __future__ import annotations

from decimal import Decimal

from engines.catalog.models import (
    CATEGORY_BUNDLE,
    CATEGORY_FASTFOOD,
    CATEGORY_GROCERY,
    BundleItem,
    Product,
)
from engines.staff.services import EmployeeRoster

DEMO_PRODUCTS = (
    Product("apple", "Apple", Decimal("0.50"), CATEGORY_GROCERY, 100),
    Product("bread", "Bread", Decimal("2.00"), CATEGORY_GROCERY, 100),
    Product("milk", "Milk", Decimal("3.00"), CATEGORY_GROCERY, 100),
    Product("burger", "Burger", Decimal("5.00"), CATEGORY_FASTFOOD, 100),
    Product("fries", "Fries", Decimal("2.50"), CATEGORY_FASTFOOD, 100),
    Product("soda", "Soda", Decimal("1.50"), CATEGORY_FASTFOOD, 100),
    Product(
        "burger-meal",
        "Burger Meal",
        Decimal("8.00"),
        CATEGORY_BUNDLE,
        100,
        bundle_items=(
            BundleItem("burger", 1),
            BundleItem("fries", 1),
            BundleItem("soda", 1),
        ),
    ),
)

# (employee_id, username, password, role, phone, email, address, ssn)
DEMO_STAFF = (
    ("emp-1", "johndoe", "password123", "cashier",
     "123-456-7890", "john@example.com", "123 Main St, Anytown, USA", "123-45-6789"),
    ("emp-2", "janesmith", "password456", "manager",
     "234-567-8901", "jane@example.com", "456 Elm St, Anytown, USA", "234-56-7890"),
    ("emp-3", "alicejohnson", "password789", "admin",
     "345-678-9012", "alice@example.com", "789 Oak St, Anytown, USA", "345-67-8901"),
    ("emp-4", "bobwilliams", "password000", "owner",
     "456-789-0123", "bob@example.com", "012 Pine St, Anytown, USA", "456-78-9012"),
)


def seed_demo_staff(roster: EmployeeRoster) -> None:
    """Enroll the demo staff directly on the roster (no session needed)."""
    for (employee_id, username, password, role,
         phone_number, email, address, social_security) in DEMO_STAFF:
        roster.add(
            username,
            password,
            role,
            employee_id=employee_id,
            phone_number=phone_number,
            email=email,
            address=address,
            social_security=social_security,
        )
