from datetime import datetime, timedelta
from itertools import combinations

import pytest

from rule_discovery import Transaction

T0 = datetime(2024, 3, 1, 12, 0)


def make_transactions(baskets, start=T0):
    return [
        Transaction(f"tx{i}", tuple(items), start + timedelta(minutes=i))
        for i, items in enumerate(baskets, start=1)
    ]


def brute_force_supports(baskets, min_support):
    """Every itemset occurring at least once with support >= min_support."""
    total = len(baskets)
    counts = {}
    for basket in baskets:
        items = sorted(set(basket))
        for size in range(1, len(items) + 1):
            for itemset in combinations(items, size):
                counts[itemset] = counts.get(itemset, 0) + 1
    return {
        itemset: count / total
        for itemset, count in counts.items()
        if count / total >= min_support
    }


ELECTRONICS = [
    ['Laptop', 'Mouse', 'Keyboard'],
    ['Laptop', 'Mouse'],
    ['Laptop', 'Mouse', 'USB-C Hub'],
    ['Phone', 'Phone Case'],
]

GROCERIES = [
    ['Milk', 'Onion', 'Nutmeg', 'Kidney Beans', 'Eggs', 'Yogurt'],
    ['Dill', 'Onion', 'Nutmeg', 'Kidney Beans', 'Eggs', 'Yogurt'],
    ['Milk', 'Apple', 'Kidney Beans', 'Eggs'],
    ['Milk', 'Unicorn', 'Corn', 'Kidney Beans', 'Yogurt'],
    ['Corn', 'Onion', 'Onion', 'Kidney Beans', 'Ice cream', 'Eggs'],
]


@pytest.fixture
def electronics():
    return make_transactions(ELECTRONICS)


@pytest.fixture
def groceries():
    return make_transactions(GROCERIES)
