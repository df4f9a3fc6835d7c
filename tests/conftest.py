import copy

import pytest

from transaction_dashboard.core.models import Transaction
from transaction_dashboard.database import replace_transactions

SEED_RECORDS = [
    {
        "id": 1,
        "title": "Blue Backpack",
        "description": "Fits 15 inch laptops",
        "price": 100,
        "category": "bags",
        "image": "https://example.test/1.jpg",
        "sold": True,
        "dateOfSale": "2024-03-05",
    },
    {
        "id": 2,
        "title": "Red Jacket",
        "description": "Warm winter jacket",
        "price": 101,
        "category": "clothing",
        "image": "https://example.test/2.jpg",
        "sold": False,
        "dateOfSale": "2023-03-20T10:00:00Z",
    },
    {
        "id": 3,
        "title": "Gold Ring",
        "description": "Solid gold",
        "price": 950.5,
        "category": "jewelery",
        "image": "https://example.test/3.jpg",
        "sold": True,
        "dateOfSale": "2024-03-28T12:00:00.000Z",
    },
    {
        "id": 4,
        "title": "Green Shirt",
        "description": "Cotton shirt",
        "price": 22.3,
        "category": "clothing",
        "image": "https://example.test/4.jpg",
        "sold": True,
        "dateOfSale": "2024-04-02",
    },
    {
        # 2022-02-28T20:30:00 in UTC
        "id": 5,
        "title": "Silver Chain",
        "description": "Sterling silver",
        "price": 329.85,
        "category": "jewelery",
        "image": "https://example.test/5.jpg",
        "sold": False,
        "dateOfSale": "2022-03-01T02:00:00+05:30",
    },
    {
        "id": 6,
        "title": "USB Drive",
        "description": "64GB storage",
        "price": 64,
        "category": "electronics",
        "image": "https://example.test/6.jpg",
        "sold": False,
        "dateOfSale": "2024-03-10",
    },
]


@pytest.fixture
def seed_records():
    return copy.deepcopy(SEED_RECORDS)


@pytest.fixture
def seeded_db(tmp_path, seed_records):
    db_path = str(tmp_path / "transactions.db")
    replace_transactions([Transaction.from_record(r) for r in seed_records], db_path)
    return db_path
