# core/utils.py

from collections import defaultdict
from typing import Iterable, List


def sanitize(data: dict) -> dict:
    """
    Clean a payload before it is written to Supabase:
    - Empty / whitespace-only strings → None
    - Strip string whitespace
    - Everything else kept as-is (pydantic already typed it)

    Codes such as facility codes stay strings even when numeric.
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped or None
            continue

        clean[k] = v

    return clean


def summarize_products(rows: Iterable[dict]) -> dict:
    """
    Totals over already-fetched pharmaceutical_products rows.

    value = quantity * price; rows missing either count toward
    product_count but add nothing to the value.
    """
    rows: List[dict] = list(rows)

    total_quantity = 0.0
    total_value = 0.0
    prices = []
    by_category = defaultdict(lambda: {"product_count": 0, "total_quantity": 0.0, "total_value": 0.0})

    for row in rows:
        quantity = row.get("quantity") or 0
        price = row.get("price")
        value = quantity * price if price is not None else 0.0

        total_quantity += quantity
        total_value += value
        if price is not None:
            prices.append(price)

        bucket = by_category[row.get("product_category") or "uncategorized"]
        bucket["product_count"] += 1
        bucket["total_quantity"] += quantity
        bucket["total_value"] += value

    return {
        "product_count": len(rows),
        "total_quantity": total_quantity,
        "total_value": round(total_value, 2),
        "average_price": round(sum(prices) / len(prices), 2) if prices else None,
        "by_category": {
            name: {**totals, "total_value": round(totals["total_value"], 2)}
            for name, totals in sorted(by_category.items())
        },
    }
