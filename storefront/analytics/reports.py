"""
Sales and Revenue Reports

Combines reporting windows with the aggregator into the report payloads
returned to tool-style callers.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

import structlog
from pydantic import BaseModel, Field

from storefront.analytics.aggregator import (
    CategoryShare,
    CustomerInsights,
    DailyRevenue,
    PaymentMethodShare,
    PeriodRevenue,
    ProductPerformance,
    SalesAggregator,
)
from storefront.analytics.periods import (
    DateInput,
    ReportType,
    SalesPeriod,
    TimeGrouping,
    coerce_enum,
    previous_window,
    resolve_report_window,
    resolve_sales_period,
)
from storefront.data.models import CategoryPerformance, DateRange, Sale, TopProduct
from storefront.data.money import average_amount, from_cents, percentage, percentage_change

logger = structlog.get_logger(__name__)


class Trend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class SaleRow(BaseModel):
    id: str
    product_name: str
    quantity: int
    total_amount: float
    customer_email: str
    status: str
    timestamp: str


class SalesDataReport(BaseModel):
    """Sales listed for a look-back period"""
    period: str
    start: str
    end: str
    total_sales: float
    total_orders: int
    avg_order_value: float
    sales: List[SaleRow] = Field(default_factory=list)
    top_products: Optional[List[TopProduct]] = None
    category_performance: Optional[List[CategoryPerformance]] = None


class ChangeSummary(BaseModel):
    current: float
    previous: float
    change: float
    change_percentage: float


class PeriodComparison(BaseModel):
    previous_start: str
    previous_end: str
    revenue: ChangeSummary
    orders: ChangeSummary
    average_order_value: ChangeSummary


class RevenueReport(BaseModel):
    """Revenue report for a calendar or custom window"""
    report_type: str
    start: str
    end: str
    total_revenue: float
    total_orders: int
    total_units: int
    average_order_value: float
    growth_rate: Optional[float] = None
    trend: Trend = Trend.STABLE
    top_products: List[ProductPerformance] = Field(default_factory=list)
    category_breakdown: Optional[List[CategoryShare]] = None
    payment_method_breakdown: Optional[List[PaymentMethodShare]] = None
    customer_insights: Optional[CustomerInsights] = None
    daily_breakdown: List[DailyRevenue] = Field(default_factory=list)
    group_by: TimeGrouping = TimeGrouping.DAY
    time_series: List[PeriodRevenue] = Field(default_factory=list)
    previous_period: Optional[PeriodComparison] = None
    insights: List[str] = Field(default_factory=list)


def _change(current: float, previous: float) -> ChangeSummary:
    return ChangeSummary(
        current=current,
        previous=previous,
        change=round(current - previous, 2),
        change_percentage=percentage_change(current, previous),
    )


class SalesReporter:
    """Builds sales data and revenue reports from the repository's sale log"""

    def __init__(
        self,
        aggregator: SalesAggregator,
        top_products_limit: int = 10,
        trend_threshold_percent: float = 5.0,
    ):
        self.aggregator = aggregator
        self.repository = aggregator.repository
        self.top_products_limit = top_products_limit
        self.trend_threshold_percent = trend_threshold_percent

    @property
    def now(self) -> datetime:
        return self.aggregator.clock()

    def sales_in(self, window: DateRange) -> List[Sale]:
        return self.repository.get_sales_by_date_range(window.start, window.end)

    def sales_data(
        self,
        period: Union[SalesPeriod, str],
        start_date: Optional[DateInput] = None,
        end_date: Optional[DateInput] = None,
        include_metrics: bool = True,
    ) -> SalesDataReport:
        """Sales and totals for a look-back period"""
        period = coerce_enum(SalesPeriod, period)
        window = resolve_sales_period(period, self.now, start_date, end_date)
        sales = self.sales_in(window)
        revenue = sum(s.total_cents for s in sales)

        if period is SalesPeriod.CUSTOM:
            label = f"{window.start.date().isoformat()} to {window.end.date().isoformat()}"
        else:
            label = period.value

        report = SalesDataReport(
            period=label,
            start=window.start.isoformat(),
            end=window.end.isoformat(),
            total_sales=from_cents(revenue),
            total_orders=len(sales),
            avg_order_value=average_amount(revenue, len(sales)),
            sales=[
                SaleRow(
                    id=s.id,
                    product_name=s.product_name,
                    quantity=s.quantity,
                    total_amount=s.total_amount,
                    customer_email=s.customer_email,
                    status=s.status.value,
                    timestamp=s.timestamp.isoformat(),
                )
                for s in sales
            ],
        )

        if include_metrics:
            frame = self.aggregator.frame(sales)
            report.top_products = self.aggregator.top_products(frame)
            report.category_performance = self.aggregator.category_performance(frame)

        logger.info("Sales data report built", period=label, orders=report.total_orders)
        return report

    def revenue_report(
        self,
        report_type: Union[ReportType, str],
        start_date: Optional[DateInput] = None,
        end_date: Optional[DateInput] = None,
        include_category_breakdown: bool = True,
        include_payment_methods: bool = True,
        include_customer_insights: bool = False,
        compare_with_previous: bool = True,
        group_by: Union[TimeGrouping, str] = TimeGrouping.DAY,
    ) -> RevenueReport:
        """
        Revenue report with optional breakdowns and previous-period comparison.

        ``group_by`` picks the bucket size (day, week or month) of the
        report's time series.
        """
        report_type = coerce_enum(ReportType, report_type)
        group_by = coerce_enum(TimeGrouping, group_by)
        window = resolve_report_window(report_type, self.now, start_date, end_date)
        sales = self.sales_in(window)
        revenue_cents = sum(s.total_cents for s in sales)
        orders = len(sales)

        report = RevenueReport(
            report_type=report_type.value,
            start=window.start.date().isoformat(),
            end=window.end.date().isoformat(),
            total_revenue=from_cents(revenue_cents),
            total_orders=orders,
            total_units=sum(s.quantity for s in sales),
            average_order_value=average_amount(revenue_cents, orders),
            top_products=self.aggregator.product_performance(sales, self.top_products_limit),
            daily_breakdown=self.aggregator.daily_breakdown(sales),
            group_by=group_by,
            time_series=self.aggregator.time_series(sales, window, group_by),
        )

        if include_category_breakdown:
            report.category_breakdown = self.aggregator.category_breakdown(sales)
        if include_payment_methods:
            report.payment_method_breakdown = self.aggregator.payment_method_breakdown(sales)
        if include_customer_insights:
            report.customer_insights = self.aggregator.customer_insights(sales, window.start)

        if compare_with_previous:
            report.previous_period = self.compare(window, report)
            report.growth_rate = report.previous_period.revenue.change_percentage
            report.trend = self.trend(report.growth_rate)

        report.insights = self.insights(report)

        logger.info(
            "Revenue report built",
            report_type=report.report_type,
            start=report.start,
            end=report.end,
            total_revenue=report.total_revenue,
            orders=orders,
        )
        return report

    def compare(self, window: DateRange, report: RevenueReport) -> PeriodComparison:
        previous = previous_window(window)
        prev_sales = self.sales_in(previous)
        prev_cents = sum(s.total_cents for s in prev_sales)

        return PeriodComparison(
            previous_start=previous.start.isoformat(),
            previous_end=previous.end.isoformat(),
            revenue=_change(report.total_revenue, from_cents(prev_cents)),
            orders=_change(report.total_orders, len(prev_sales)),
            average_order_value=_change(
                report.average_order_value,
                average_amount(prev_cents, len(prev_sales)),
            ),
        )

    def trend(self, growth_rate: float) -> Trend:
        if growth_rate > self.trend_threshold_percent:
            return Trend.INCREASING
        if growth_rate < -self.trend_threshold_percent:
            return Trend.DECREASING
        return Trend.STABLE

    def insights(self, report: RevenueReport) -> List[str]:
        """Plain-text observations about a report"""
        notes = []

        if report.previous_period is not None:
            revenue_change = report.previous_period.revenue.change_percentage
            if revenue_change > 10:
                notes.append(f"Strong revenue growth of {revenue_change:.1f}% compared to previous period")
            elif revenue_change < -10:
                notes.append(
                    f"Revenue declined by {abs(revenue_change):.1f}% - consider promotional strategies"
                )
            aov_change = report.previous_period.average_order_value.change_percentage
            if aov_change > 5:
                notes.append(
                    f"Average order value increased by {aov_change:.1f}% - customers buying higher-value items"
                )

        if report.top_products and report.total_revenue > 0:
            leader = report.top_products[0]
            share = percentage(leader.revenue, report.total_revenue)
            if share > 30:
                notes.append(f"{leader.product_name} dominates sales with {share:.1f}% of revenue")

        if report.average_order_value > 100:
            notes.append("High average order value suggests premium positioning is working well")
        elif 0 < report.average_order_value < 25:
            notes.append("Low average order value - consider bundling or upselling strategies")

        return notes
