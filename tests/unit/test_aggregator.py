"""
Unit Tests - Sales Aggregator
"""
from datetime import datetime, timedelta, timezone

import polars as pl
import pytest

from storefront.analytics.aggregator import UNKNOWN_CATEGORY, SalesAggregator
from storefront.analytics.frames import SALES_SCHEMA, rank_groups, sales_frame
from storefront.analytics.periods import TimeGrouping
from storefront.data.models import DateRange, ProductUpdate


@pytest.fixture
def aggregator(seeded_repository) -> SalesAggregator:
    return SalesAggregator(seeded_repository)


class TestSalesFrame:
    """Tests for the polars view of the sale log"""

    def test_empty_frame_is_typed(self):
        """Test no sales still produce the full schema"""
        frame = sales_frame([])

        assert frame.height == 0
        assert frame.columns == list(SALES_SCHEMA)
        assert frame.schema["timestamp"] == pl.Datetime("us")

    def test_rank_groups_keeps_first_seen_order_for_ties(self):
        """Test equal totals stay in the order their first sale appeared"""
        frame = pl.DataFrame(
            {
                "product_id": ["b", "a", "c", "a"],
                "product_name": ["B", "A", "C", "A"],
                "total_cents": [500, 250, 500, 250],
                "quantity": [1, 1, 1, 1],
            }
        )

        ranked = rank_groups(frame, "product_id")

        assert ranked["product_id"].to_list() == ["b", "a", "c"]
        assert ranked["revenue_cents"].to_list() == [500, 500, 500]
        assert ranked["orders"].to_list() == [1, 2, 1]


class TestComputeMetrics:
    """Tests for store metrics"""

    def test_empty_sales(self, repository):
        """Test no sales give zeroed metrics without errors"""
        metrics = SalesAggregator(repository).compute_metrics([])

        assert metrics.total_orders == 0
        assert metrics.total_sales == 0.0
        assert metrics.avg_order_value == 0.0
        assert metrics.top_products == []
        assert metrics.category_performance == []
        assert metrics.revenue_by_period.daily == 0.0

    def test_totals(self, aggregator, seeded_repository):
        """Test revenue, orders and average over the sample log"""
        metrics = aggregator.compute_metrics(seeded_repository.get_sales())

        assert metrics.total_sales == 609.88
        assert metrics.total_orders == 5
        assert metrics.avg_order_value == 121.98

    def test_timezone_aware_sale(self, repository, make_product, make_sale):
        """Test a sale recorded with an aware timestamp does not break the metrics"""
        product = make_product("A", stock=10)
        make_sale(product, quantity=1)
        aware = datetime(2025, 6, 18, tzinfo=timezone.utc)

        sale = make_sale(product, quantity=2, timestamp=aware)
        metrics = SalesAggregator(repository).compute_metrics(repository.get_sales())

        assert sale.timestamp == aware.astimezone().replace(tzinfo=None)
        assert metrics.total_orders == 2
        assert metrics.total_sales == 30.0

    def test_zero_top_products_limit(self, aggregator, seeded_repository):
        """Test an explicit limit of zero returns no products"""
        frame = aggregator.frame(seeded_repository.get_sales())

        assert aggregator.top_products(frame, limit=0) == []
        assert len(aggregator.top_products(frame)) == 4

    def test_top_products_by_revenue(self, aggregator, seeded_repository):
        """Test products are ranked by summed revenue"""
        metrics = aggregator.compute_metrics(seeded_repository.get_sales())

        assert [(p.name, p.sales) for p in metrics.top_products] == [
            ("Leather Jacket", 249.99),
            ("Blue T-Shirt", 159.92),
            ("Running Shoes", 129.99),
            ("Winter Scarf", 69.98),
        ]

    def test_top_products_limit(self, seeded_repository):
        """Test the configured limit caps the ranking"""
        aggregator = SalesAggregator(seeded_repository, top_products_limit=2)

        metrics = aggregator.compute_metrics(seeded_repository.get_sales())

        assert len(metrics.top_products) == 2

    def test_revenue_by_period_uses_full_log(self, aggregator, seeded_repository):
        """Test period rollups ignore the window passed in"""
        todays_only = [s for s in seeded_repository.get_sales() if s.id == "sale-004"]

        metrics = aggregator.compute_metrics(todays_only)

        assert metrics.total_sales == 249.99
        assert metrics.revenue_by_period.daily == 249.99
        assert metrics.revenue_by_period.weekly == 509.93
        assert metrics.revenue_by_period.monthly == 609.88

    def test_category_performance(self, aggregator, seeded_repository):
        """Test categories are ranked by revenue with order counts"""
        metrics = aggregator.compute_metrics(seeded_repository.get_sales())

        assert [(c.category, c.revenue, c.orders) for c in metrics.category_performance] == [
            ("Clothing", 409.91, 3),
            ("Footwear", 129.99, 1),
            ("Accessories", 69.98, 1),
        ]

    def test_category_uses_current_product_state(self, aggregator, seeded_repository):
        """Test a recategorised product moves its past revenue to the new category"""
        seeded_repository.update_product("12348", ProductUpdate(category="Sportswear"))

        metrics = aggregator.compute_metrics(seeded_repository.get_sales())

        categories = {c.category for c in metrics.category_performance}
        assert "Sportswear" in categories
        assert "Footwear" not in categories

    def test_low_stock_alerts_reflect_current_stock(self, aggregator, seeded_repository):
        """Test alerts list products with 0 < stock <= threshold"""
        metrics = aggregator.compute_metrics([])

        assert [(a.name, a.stock) for a in metrics.low_stock_alerts] == [
            ("Leather Jacket", 8),
            ("Winter Scarf", 5),
        ]


class TestTopSelling:
    """Tests for unit-based rankings"""

    def test_ranked_by_quantity(self, repository, make_product, make_sale):
        """Test A:3, B:5, C:1 with limit 2 gives [B, A]"""
        a = make_product("A", stock=10)
        b = make_product("B", stock=10)
        c = make_product("C", stock=10)
        make_sale(a, quantity=3)
        make_sale(b, quantity=5)
        make_sale(c, quantity=1)

        top = SalesAggregator(repository).top_selling_products(repository.get_sales(), limit=2)

        assert [p.name for p in top] == ["B", "A"]

    def test_deleted_products_are_dropped(self, repository, make_product, make_sale):
        """Test sales for deleted products do not take a ranking slot"""
        a = make_product("A", stock=10)
        b = make_product("B", stock=10)
        c = make_product("C", stock=10)
        make_sale(a, quantity=9)
        make_sale(b, quantity=5)
        make_sale(c, quantity=1)
        repository.delete_product(a.id)

        top = SalesAggregator(repository).top_selling_products(repository.get_sales(), limit=2)

        assert [p.name for p in top] == ["B", "C"]

    def test_returns_current_records(self, aggregator, seeded_repository):
        """Test ties keep first-seen order and records are current"""
        top = aggregator.top_selling_products(seeded_repository.get_sales(), limit=10)

        assert [p.id for p in top] == ["12345", "12349", "12348", "12346"]
        assert top[0] is seeded_repository.get_product("12345")

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit(self, aggregator, seeded_repository, limit):
        """Test a zero or negative limit returns no products"""
        assert aggregator.top_selling_products(seeded_repository.get_sales(), limit=limit) == []


class TestBreakdowns:
    """Tests for report breakdowns"""

    def test_product_performance(self, aggregator, seeded_repository):
        """Test units, orders and average price per product"""
        rows = aggregator.product_performance(seeded_repository.get_sales())
        shirt = next(r for r in rows if r.product_id == "12345")

        assert (shirt.units_sold, shirt.orders, shirt.revenue, shirt.average_price) == (8, 2, 159.92, 19.99)

    def test_category_breakdown_shares(self, aggregator, seeded_repository):
        """Test category shares add up to the whole"""
        rows = aggregator.category_breakdown(seeded_repository.get_sales())

        assert rows[0].category == "Clothing"
        assert rows[0].percentage == 67.21
        assert round(sum(r.percentage for r in rows)) == 100

    def test_orphaned_sales_under_unknown(self, aggregator, seeded_repository):
        """Test sales of deleted products are grouped as Unknown or skipped"""
        seeded_repository.delete_product("12348")
        sales = seeded_repository.get_sales()

        with_unknown = aggregator.category_breakdown(sales)
        without = aggregator.category_breakdown(sales, include_unknown=False)

        assert UNKNOWN_CATEGORY in [r.category for r in with_unknown]
        assert UNKNOWN_CATEGORY not in [r.category for r in without]

    def test_payment_methods(self, aggregator, seeded_repository):
        """Test revenue per payment method"""
        rows = aggregator.payment_method_breakdown(seeded_repository.get_sales())

        assert [(r.method, r.orders) for r in rows] == [
            ("credit_card", 3),
            ("paypal", 1),
            ("debit_card", 1),
        ]

    def test_daily_breakdown_is_chronological(self, aggregator, seeded_repository):
        """Test one row per day with sales, oldest first"""
        rows = aggregator.daily_breakdown(seeded_repository.get_sales())

        assert [r.date for r in rows] == ["2025-06-11", "2025-06-17", "2025-06-18"]
        assert rows[1].revenue == 259.94
        assert rows[1].orders == 3

    def test_time_series_by_day_fills_gaps(self, aggregator, seeded_repository, clock):
        """Test every day of the window is listed, including days without sales"""
        window = DateRange(clock() - timedelta(days=7), clock())

        rows = aggregator.time_series(seeded_repository.get_sales(), window, TimeGrouping.DAY)

        assert (rows[0].period, rows[-1].period) == ("2025-06-11", "2025-06-18")
        assert len(rows) == 8
        assert (rows[1].revenue, rows[1].orders, rows[1].average_order_value) == (0.0, 0, 0.0)
        assert (rows[6].revenue, rows[6].orders) == (259.94, 3)

    def test_time_series_weeks_start_on_sunday(self, aggregator, seeded_repository, clock):
        """Test weekly buckets begin on Sunday"""
        window = DateRange(clock() - timedelta(days=7), clock())

        rows = aggregator.time_series(seeded_repository.get_sales(), window, TimeGrouping.WEEK)

        assert [(r.period, r.revenue, r.orders) for r in rows] == [
            ("2025-06-08", 99.95, 1),
            ("2025-06-15", 509.93, 4),
        ]

    def test_time_series_by_month(self, aggregator, seeded_repository, clock):
        """Test monthly buckets are labelled by year and month"""
        window = DateRange(datetime(2025, 5, 20), clock())

        rows = aggregator.time_series(seeded_repository.get_sales(), window, TimeGrouping.MONTH)

        assert [(r.period, r.revenue, r.orders) for r in rows] == [("2025-05", 0.0, 0), ("2025-06", 609.88, 5)]
        assert rows[1].average_order_value == 121.98

    def test_customer_insights(self, aggregator, seeded_repository, clock):
        """Test customers with earlier purchases count as returning"""
        start = clock() - timedelta(days=2)
        window_sales = seeded_repository.get_sales_by_date_range(start, clock())

        insights = aggregator.customer_insights(window_sales, start)

        assert insights.unique_customers == 4
        assert insights.returning_customers == 0
        assert insights.new_customers == 4

    def test_customer_insights_empty(self, aggregator, clock):
        """Test no sales give zeroed insights"""
        insights = aggregator.customer_insights([], clock())

        assert insights.unique_customers == 0
        assert insights.average_customer_value == 0.0
