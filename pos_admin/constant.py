"""Editable sample catalog, roster and open orders used to seed a fresh store."""

from __future__ import annotations

SAMPLE_CATEGORIES: dict[str, str] = {
    "1": "Starters",
    "2": "Main Course",
    "3": "Beverages",
    "4": "Desserts",
}

# product id -> (name, price, category id)
SAMPLE_PRODUCTS: dict[str, tuple[str, float, str]] = {
    "1": ("Chicken 65", 180, "1"),
    "2": ("Paneer Tikka", 160, "1"),
    "3": ("Biryani", 220, "2"),
    "4": ("Butter Chicken", 280, "2"),
    "5": ("Masala Dosa", 120, "2"),
    "6": ("Fresh Lime Soda", 60, "3"),
    "7": ("Mango Lassi", 80, "3"),
    "8": ("Gulab Jamun", 70, "4"),
}

SAMPLE_WAITERS: list[dict[str, str | int]] = [
    {
        "id": "1",
        "name": "Ravi Kumar",
        "phone": "9876543210",
        "email": "ravi@aruvi.com",
        "joined_days_ago": 30,
        "orders_completed": 45,
    },
    {
        "id": "2",
        "name": "Priya Sharma",
        "phone": "9876543211",
        "email": "priya@aruvi.com",
        "joined_days_ago": 15,
        "orders_completed": 32,
    },
]

# table id -> [(product id, quantity)]
SAMPLE_OPEN_ORDERS: dict[str, list[tuple[str, int]]] = {
    "table1": [("3", 2), ("7", 2)],
    "table2": [("1", 1), ("4", 1), ("6", 3)],
    "table3": [("5", 3), ("6", 3)],
    "table5": [("2", 1), ("8", 2)],
    "table8": [("3", 1)],
}
