"""
Sales Aggregator

Read-only computations over a sequence of sales. Product lookups (category,
current record) go through the repository at aggregation time; nothing here
mutates store state, and empty input yields zeroed results rather than
errors.
"""

from datetime import datetime
from typing import Callable, List, Optional, Sequence

import polars as pl
import structlog
from pydantic import BaseModel

from storefront.analytics.frames import rank_groups, sales_frame, total_cents
from storefront.analytics.periods import (
    TimeGrouping,
    bucket_label,
    bucket_start,
    next_bucket,
    start_of_day,
    start_of_month,
    start_of_week,
)
from storefront.data.models import (
    CategoryPerformance,
    DateRange,
    LowStockAlert,
    Product,
    RevenueByPeriod,
    Sale,
    StoreMetrics,
    TopProduct,
)
from storefront.data.money import average_amount, from_cents, percentage
from storefront.store.repository import StoreRepository

logger = structlog.get_logger(__name__)

UNKNOWN_CATEGORY = "Unknown"


class ProductPerformance(BaseModel):
    product_id: str
    product_name: str
    revenue: float
    units_sold: int
    orders: int
    average_price: float


class CategoryShare(BaseModel):
    category: str
    revenue: float
    orders: int
    units: int
    average_order_value: float
    percentage: float


class PaymentMethodShare(BaseModel):
    method: str
    revenue: float
    orders: int
    percentage: float


class DailyRevenue(BaseModel):
    date: str
    revenue: float
    orders: int
    average_order_value: float


class PeriodRevenue(BaseModel):
    """One bucket of a revenue time series"""
    period: str
    revenue: float
    orders: int
    average_order_value: float


class CustomerInsights(BaseModel):
    unique_customers: int
    new_customers: int
    returning_customers: int
    average_customer_value: float


class SalesAggregator:
    """
    Revenue, ranking and category rollups over the sale log.

    Example:
        aggregator = SalesAggregator(repository)
        metrics = aggregator.compute_metrics(repository.get_sales())
    """

    def __init__(
        self,
        repository: StoreRepository,
        low_stock_threshold: int = 10,
        top_products_limit: int = 5,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.low_stock_threshold = low_stock_threshold
        self.top_products_limit = top_products_limit
        self.clock = clock or repository.clock

    def frame(self, sales: Sequence[Sale]) -> pl.DataFrame:
        """Sales frame with categories taken from the current catalogue"""
        categories = {p.id: p.category for p in self.repository.get_all_products()}
        return sales_frame(sales, categories)

    # -------------------------------------------------------------------------
    # Store metrics
    # -------------------------------------------------------------------------

    def compute_metrics(self, sales: Sequence[Sale]) -> StoreMetrics:
        """
        Summary metrics for ``sales``.

        Period rollups always cover the full sale log relative to now and
        low-stock alerts reflect current stock, whatever window ``sales`` is.
        """
        frame = self.frame(sales)
        revenue = total_cents(frame)
        orders = frame.height

        metrics = StoreMetrics(
            total_sales=from_cents(revenue),
            total_orders=orders,
            avg_order_value=average_amount(revenue, orders),
            top_products=self.top_products(frame),
            low_stock_alerts=self.low_stock_alerts(),
            revenue_by_period=self.revenue_by_period(),
            category_performance=self.category_performance(frame),
        )

        logger.debug("Store metrics computed", orders=orders, total_sales=metrics.total_sales)
        return metrics

    def top_products(self, frame: pl.DataFrame, limit: Optional[int] = None) -> List[TopProduct]:
        """Products ranked by summed revenue; ties keep first-seen order"""
        limit = self.top_products_limit if limit is None else limit
        ranked = rank_groups(frame, "product_id").head(max(limit, 0))
        return [
            TopProduct(id=row["product_id"], name=row["product_name"], sales=from_cents(row["revenue_cents"]))
            for row in ranked.iter_rows(named=True)
        ]

    def category_performance(self, frame: pl.DataFrame) -> List[CategoryPerformance]:
        """Revenue and orders per current category; orphaned sales are skipped"""
        ranked = rank_groups(frame.filter(pl.col("category").is_not_null()), "category")
        return [
            CategoryPerformance(
                category=row["category"],
                revenue=from_cents(row["revenue_cents"]),
                orders=row["orders"],
            )
            for row in ranked.iter_rows(named=True)
        ]

    def revenue_by_period(self) -> RevenueByPeriod:
        """Revenue for today, this week (from Sunday) and this month, up to now"""
        now = self.clock()

        def revenue_since(start: datetime) -> float:
            sales = self.repository.get_sales_by_date_range(start, now)
            return from_cents(sum(s.total_cents for s in sales))

        return RevenueByPeriod(
            daily=revenue_since(start_of_day(now)),
            weekly=revenue_since(start_of_week(now)),
            monthly=revenue_since(start_of_month(now)),
        )

    def low_stock_alerts(self, threshold: Optional[int] = None) -> List[LowStockAlert]:
        limit = self.low_stock_threshold if threshold is None else threshold
        return [
            LowStockAlert(id=p.id, name=p.name, stock=p.stock)
            for p in self.repository.get_low_stock_products(limit)
        ]

    # -------------------------------------------------------------------------
    # Rankings
    # -------------------------------------------------------------------------

    def top_selling_products(self, sales: Sequence[Sale], limit: int = 5) -> List[Product]:
        """
        Current product records ranked by units sold.

        Products deleted since their sales are dropped before the limit is
        applied.
        """
        ranked = rank_groups(self.frame(sales), "product_id", by="units")
        products = []
        for product_id in ranked["product_id"].to_list():
            if len(products) >= limit:
                break
            product = self.repository.get_product(product_id)
            if product is not None:
                products.append(product)
        return products

    def product_performance(self, sales: Sequence[Sale], limit: int = 10) -> List[ProductPerformance]:
        ranked = rank_groups(self.frame(sales), "product_id").head(limit)
        return [
            ProductPerformance(
                product_id=row["product_id"],
                product_name=row["product_name"],
                revenue=from_cents(row["revenue_cents"]),
                units_sold=row["units"],
                orders=row["orders"],
                average_price=average_amount(row["revenue_cents"], row["units"]),
            )
            for row in ranked.iter_rows(named=True)
        ]

    # -------------------------------------------------------------------------
    # Breakdowns
    # -------------------------------------------------------------------------

    def category_breakdown(
        self,
        sales: Sequence[Sale],
        include_unknown: bool = True,
    ) -> List[CategoryShare]:
        """Category shares of revenue; orphaned sales go under "Unknown" when included"""
        frame = self.frame(sales)
        if include_unknown:
            frame = frame.with_columns(pl.col("category").fill_null(UNKNOWN_CATEGORY))
        else:
            frame = frame.filter(pl.col("category").is_not_null())

        revenue = total_cents(frame)
        return [
            CategoryShare(
                category=row["category"],
                revenue=from_cents(row["revenue_cents"]),
                orders=row["orders"],
                units=row["units"],
                average_order_value=average_amount(row["revenue_cents"], row["orders"]),
                percentage=percentage(row["revenue_cents"], revenue),
            )
            for row in rank_groups(frame, "category").iter_rows(named=True)
        ]

    def payment_method_breakdown(self, sales: Sequence[Sale]) -> List[PaymentMethodShare]:
        frame = self.frame(sales)
        revenue = total_cents(frame)
        return [
            PaymentMethodShare(
                method=row["payment_method"],
                revenue=from_cents(row["revenue_cents"]),
                orders=row["orders"],
                percentage=percentage(row["revenue_cents"], revenue),
            )
            for row in rank_groups(frame, "payment_method").iter_rows(named=True)
        ]

    def daily_breakdown(self, sales: Sequence[Sale]) -> List[DailyRevenue]:
        """Revenue per calendar day, oldest first; days without sales are omitted"""
        frame = self.frame(sales)
        if frame.is_empty():
            return []

        daily = (
            frame.with_columns(pl.col("timestamp").dt.date().alias("day"))
            .group_by("day", maintain_order=True)
            .agg(
                pl.col("total_cents").sum().alias("revenue_cents"),
                pl.len().alias("orders"),
            )
            .sort("day")
        )
        return [
            DailyRevenue(
                date=row["day"].isoformat(),
                revenue=from_cents(row["revenue_cents"]),
                orders=row["orders"],
                average_order_value=average_amount(row["revenue_cents"], row["orders"]),
            )
            for row in daily.iter_rows(named=True)
        ]

    def time_series(
        self,
        sales: Sequence[Sale],
        window: DateRange,
        group_by: TimeGrouping = TimeGrouping.DAY,
    ) -> List[PeriodRevenue]:
        """
        Revenue per day, week (from Sunday) or month across ``window``.

        Every bucket the window touches is listed oldest first, including
        buckets without sales.
        """
        frame = self.frame(sales)
        totals = {}
        if not frame.is_empty():
            if group_by is TimeGrouping.WEEK:
                # truncate("1w") starts weeks on Monday; shift so they start on Sunday
                bucket = (
                    (pl.col("timestamp") + pl.duration(days=1)).dt.truncate("1w") - pl.duration(days=1)
                )
            elif group_by is TimeGrouping.MONTH:
                bucket = pl.col("timestamp").dt.truncate("1mo")
            else:
                bucket = pl.col("timestamp").dt.truncate("1d")

            grouped = (
                frame.with_columns(bucket.alias("bucket"))
                .group_by("bucket", maintain_order=True)
                .agg(
                    pl.col("total_cents").sum().alias("revenue_cents"),
                    pl.len().alias("orders"),
                )
            )
            totals = {
                row["bucket"]: (row["revenue_cents"], row["orders"])
                for row in grouped.iter_rows(named=True)
            }

        series = []
        current = bucket_start(window.start, group_by)
        while current <= window.end:
            revenue_cents, orders = totals.get(current, (0, 0))
            series.append(PeriodRevenue(
                period=bucket_label(current, group_by),
                revenue=from_cents(revenue_cents),
                orders=orders,
                average_order_value=average_amount(revenue_cents, orders),
            ))
            current = next_bucket(current, group_by)
        return series

    def customer_insights(self, sales: Sequence[Sale], window_start: datetime) -> CustomerInsights:
        """
        Customer counts for ``sales``; a customer is returning when they
        bought anything before ``window_start``.
        """
        frame = self.frame(sales)
        if frame.is_empty():
            return CustomerInsights(
                unique_customers=0,
                new_customers=0,
                returning_customers=0,
                average_customer_value=0.0,
            )

        earlier = {s.customer_email for s in self.repository.get_sales() if s.timestamp < window_start}
        customers = frame.group_by("customer_email").agg(pl.col("total_cents").sum())
        emails = customers["customer_email"].to_list()
        returning = sum(1 for email in emails if email in earlier)

        return CustomerInsights(
            unique_customers=len(emails),
            new_customers=len(emails) - returning,
            returning_customers=returning,
            average_customer_value=average_amount(total_cents(frame), len(emails)),
        )
