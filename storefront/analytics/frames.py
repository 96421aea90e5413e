"""
Sales Frames

Polars views over the sale log. Categories are looked up from the *current*
product state when the frame is built, so a product that changed category
reports its historical revenue under the new one; sales whose product was
deleted carry a null category.
"""

from typing import Mapping, Optional, Sequence

import polars as pl

from storefront.data.models import Sale

SALES_SCHEMA = {
    "sale_id": pl.Utf8,
    "product_id": pl.Utf8,
    "product_name": pl.Utf8,
    "category": pl.Utf8,
    "quantity": pl.Int64,
    "total_cents": pl.Int64,
    "customer_email": pl.Utf8,
    "payment_method": pl.Utf8,
    "status": pl.Utf8,
    "timestamp": pl.Datetime("us"),
}


def sales_frame(
    sales: Sequence[Sale],
    categories: Optional[Mapping[str, str]] = None,
) -> pl.DataFrame:
    """
    Build a DataFrame with one row per sale, in log order.

    Args:
        sales: Sales to include
        categories: product_id -> current category

    Returns:
        DataFrame following ``SALES_SCHEMA`` (empty but typed for no sales)
    """
    categories = categories or {}
    rows = [
        {
            "sale_id": sale.id,
            "product_id": sale.product_id,
            "product_name": sale.product_name,
            "category": categories.get(sale.product_id),
            "quantity": sale.quantity,
            "total_cents": sale.total_cents,
            "customer_email": sale.customer_email,
            "payment_method": sale.payment_method,
            "status": sale.status.value,
            "timestamp": sale.timestamp,
        }
        for sale in sales
    ]
    return pl.DataFrame(rows, schema=SALES_SCHEMA)


def rank_groups(frame: pl.DataFrame, key: str, by: str = "revenue_cents") -> pl.DataFrame:
    """
    Group ``frame`` by ``key`` and rank the groups by ``by``, descending.

    Groups keep first-seen order and the sort is stable, so ties stay in the
    order their first sale appears in the log.

    Columns: key, product_name (first seen), revenue_cents, units, orders.
    """
    return (
        frame.group_by(key, maintain_order=True)
        .agg(
            pl.col("product_name").first(),
            pl.col("total_cents").sum().alias("revenue_cents"),
            pl.col("quantity").sum().alias("units"),
            pl.len().alias("orders"),
        )
        .sort(by, descending=True, maintain_order=True)
    )


def total_cents(frame: pl.DataFrame) -> int:
    if frame.is_empty():
        return 0
    return int(frame["total_cents"].sum())
