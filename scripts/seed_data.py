"""
Store Seeding Script
Builds a store, fills it with generated products and sales, prints a sales
summary and optionally writes a JSON snapshot.
"""

import argparse
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from storefront import create_context
from storefront.config.logging import configure_logging
from storefront.data import DataGenerator, save_snapshot
from storefront.formatting import format_currency, format_product_list, format_sales_summary


def main():
    parser = argparse.ArgumentParser(description="Seed the in-memory store with generated data")
    parser.add_argument("--products", type=int, default=20, help="Number of products to generate")
    parser.add_argument("--sales", type=int, default=50, help="Number of sales to generate")
    parser.add_argument("--days", type=int, default=30, help="Spread sales over the last N days")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--output", type=Path, default=None, help="Write a JSON snapshot to this path")
    parser.add_argument("--log-level", default="WARNING", help="Log level")
    args = parser.parse_args()

    configure_logging(log_level=args.log_level)

    print("=" * 60)
    print("Storefront Seeder")
    print("=" * 60 + "\n")

    ctx = create_context()
    now = datetime.now()
    DataGenerator(seed=args.seed).populate(
        ctx.repository,
        n_products=args.products,
        n_sales=args.sales,
        start_date=now - timedelta(days=args.days),
        end_date=now,
    )

    currency = ctx.settings.store.currency
    metrics = ctx.service.get_sales_analytics()
    print(format_sales_summary(
        metrics.total_sales,
        metrics.total_orders,
        metrics.avg_order_value,
        "all time",
        currency,
    ))
    print(f"Inventory Value: {format_currency(ctx.repository.get_total_inventory_value(), currency)}")

    print("\nTop sellers:")
    print(format_product_list(ctx.service.top_selling_products(limit=5), currency))

    low_stock = ctx.service.list_low_stock()
    print(
        f"\nLow stock: {low_stock.summary.total_low_stock} "
        f"(out of stock: {low_stock.summary.total_out_of_stock}, "
        f"critical: {low_stock.summary.critical_items})"
    )

    if args.output is not None:
        path = save_snapshot(ctx.service.export_data(), args.output)
        print(f"\nSnapshot written to {path}")


if __name__ == "__main__":
    main()
