"""
Output Formatting

Human-readable rendering of store results. Nothing here changes data; the
service layer returns structured values and callers pick the wording.
"""

from enum import Enum
from typing import Iterable, List, Tuple

from storefront.data.models import Product, SaleStatus, StockOperation

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}


class StockStatus(str, Enum):
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"


def stock_status(quantity: int, low_stock_threshold: int = 10) -> StockStatus:
    if quantity == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= low_stock_threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def format_currency(amount: float, currency: str = "USD") -> str:
    """``1234.5`` -> ``$1,234.50``; unknown currencies get a code suffix"""
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    sign = "-" if amount < 0 else ""
    body = f"{abs(amount):,.2f}"
    if symbol is None:
        return f"{sign}{body} {currency.upper()}"
    return f"{sign}{symbol}{body}"


def format_stock_level(quantity: int, low_stock_threshold: int = 10) -> str:
    status = stock_status(quantity, low_stock_threshold)
    if status is StockStatus.OUT_OF_STOCK:
        return "Out of Stock"
    if status is StockStatus.LOW_STOCK:
        return f"Low Stock ({quantity} remaining)"
    return f"In Stock ({quantity} available)"


def describe_stock_adjustment(
    product_name: str,
    operation: StockOperation,
    quantity: int,
    previous_stock: int,
    new_stock: int,
    low_stock_threshold: int = 10,
) -> str:
    """Sentence describing an applied stock operation and the resulting level"""
    if operation is StockOperation.ADD:
        message = f"Added {quantity} units to {product_name}. Stock increased from {previous_stock} to {new_stock}."
    elif operation is StockOperation.SUBTRACT:
        message = f"Removed {quantity} units from {product_name}. Stock decreased from {previous_stock} to {new_stock}."
    else:
        message = f"Set stock level for {product_name} to {new_stock} units. Previous stock was {previous_stock}."

    status = stock_status(new_stock, low_stock_threshold)
    if status is StockStatus.OUT_OF_STOCK:
        message += " Warning: product is now out of stock."
    elif status is StockStatus.LOW_STOCK:
        message += " Warning: product stock is now low."
    return message


def describe_new_product(product: Product) -> str:
    message = f"Successfully added new product '{product.name}' to the store. Product ID: {product.id}"
    if product.sku:
        message += f", SKU: {product.sku}"
    return message + f". Initial stock: {product.stock} units."


def format_tags(tags: List[str]) -> str:
    """``["a", "b", "c"]`` -> ``"a, b, and c"``"""
    if not tags:
        return "No tags"
    if len(tags) == 1:
        return tags[0]
    if len(tags) == 2:
        return f"{tags[0]} and {tags[1]}"
    return f"{', '.join(tags[:-1])}, and {tags[-1]}"


def format_order_status(status: SaleStatus) -> Tuple[str, str]:
    """Display label and colour hint for an order status"""
    colours = {
        SaleStatus.PENDING: "yellow",
        SaleStatus.PROCESSING: "blue",
        SaleStatus.SHIPPED: "blue",
        SaleStatus.DELIVERED: "green",
        SaleStatus.CANCELLED: "red",
    }
    return status.value.title(), colours.get(status, "gray")


def format_product_list(products: Iterable[Product], currency: str = "USD") -> str:
    return "\n".join(
        f"- {p.name} - {format_currency(p.price, currency)} ({p.stock} in stock)"
        for p in products
    )


def format_sales_summary(
    total_sales: float,
    total_orders: int,
    avg_order_value: float,
    period: str,
    currency: str = "USD",
) -> str:
    return "\n".join([
        f"Sales Summary ({period})",
        f"Total Revenue: {format_currency(total_sales, currency)}",
        f"Total Orders: {total_orders:,}",
        f"Average Order Value: {format_currency(avg_order_value, currency)}",
    ])
