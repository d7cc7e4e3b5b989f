"""
Record frames consumed by the aggregators.

Data sources hand rows to these builders; the aggregators only ever see
polars DataFrames with the schemas below. Monetary columns are Float64,
timestamps naive UTC.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Tuple, Union

import polars as pl

Amount = Union[Decimal, float, int, None]

ORDER_SCHEMA = {
    "created_at": pl.Datetime("us"),
    "total_amount": pl.Float64,
    "currency": pl.Utf8,
}

TIMESTAMP_SCHEMA = {
    "created_at": pl.Datetime("us"),
}

SALES_ORDER_SCHEMA = {
    "order_id": pl.Int64,
    "placed_at": pl.Datetime("us"),
    "status": pl.Utf8,
    "order_type": pl.Utf8,
    "total_amount": pl.Float64,
    "payment_method": pl.Utf8,
}

ORDER_ITEM_SCHEMA = {
    "order_id": pl.Int64,
    "menu_id": pl.Int64,
    "menu_name": pl.Utf8,
    "quantity": pl.Int64,
    "subtotal": pl.Float64,
}


def _amount(value: Amount) -> float:
    return float(value) if value is not None else 0.0


def _enum_value(value) -> Optional[str]:
    return getattr(value, "value", value)


def orders_frame(rows: Iterable[Tuple[datetime, Amount, Optional[str]]]) -> pl.DataFrame:
    """Build a chart orders frame from (created_at, total_amount, currency) rows."""
    created, amounts, currencies = [], [], []
    for created_at, amount, currency in rows:
        created.append(created_at)
        amounts.append(_amount(amount))
        currencies.append(currency)
    return pl.DataFrame(
        {"created_at": created, "total_amount": amounts, "currency": currencies},
        schema=ORDER_SCHEMA,
    )


def timestamps_frame(timestamps: Iterable[datetime]) -> pl.DataFrame:
    """Build a single-column frame of creation timestamps."""
    return pl.DataFrame({"created_at": list(timestamps)}, schema=TIMESTAMP_SCHEMA)


def sales_orders_frame(rows: Iterable[Tuple]) -> pl.DataFrame:
    """
    Build a merchant sales frame from
    (id, placed_at, status, order_type, total_amount, payment_method) rows.
    """
    columns = {name: [] for name in SALES_ORDER_SCHEMA}
    for order_id, placed_at, status, order_type, amount, payment_method in rows:
        columns["order_id"].append(order_id)
        columns["placed_at"].append(placed_at)
        columns["status"].append(_enum_value(status))
        columns["order_type"].append(_enum_value(order_type))
        columns["total_amount"].append(_amount(amount))
        columns["payment_method"].append(_enum_value(payment_method))
    return pl.DataFrame(columns, schema=SALES_ORDER_SCHEMA)


def order_items_frame(rows: Iterable[Tuple]) -> pl.DataFrame:
    """Build an items frame from (order_id, menu_id, menu_name, quantity, subtotal) rows."""
    columns = {name: [] for name in ORDER_ITEM_SCHEMA}
    for order_id, menu_id, menu_name, quantity, subtotal in rows:
        columns["order_id"].append(order_id)
        columns["menu_id"].append(menu_id)
        columns["menu_name"].append(menu_name)
        columns["quantity"].append(quantity)
        columns["subtotal"].append(_amount(subtotal))
    return pl.DataFrame(columns, schema=ORDER_ITEM_SCHEMA)
