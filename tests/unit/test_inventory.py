"""
Unit Tests - Inventory Operations
"""
from datetime import datetime

import pytest
from structlog.testing import capture_logs

from storefront.data.models import Product, StockOperation
from storefront.exceptions import ErrorType, InvalidOperationError
from storefront.store.audit import InMemoryAuditSink, LoggingAuditSink, StockAuditEvent
from storefront.store.inventory import InventoryMutator, parse_operation


@pytest.fixture
def product() -> Product:
    created = datetime(2025, 1, 1)
    return Product(
        id="p-1",
        name="Winter Scarf",
        price_cents=3499,
        category="Accessories",
        stock=5,
        created_at=created,
        updated_at=created,
    )


class TestCompute:
    """Tests for stock arithmetic"""

    @pytest.mark.parametrize(
        "current, operation, quantity, expected",
        [
            (5, StockOperation.ADD, 3, 8),
            (5, StockOperation.SUBTRACT, 3, 2),
            (5, StockOperation.SUBTRACT, 9, 0),
            (5, StockOperation.SET, 12, 12),
            (5, StockOperation.SET, -4, 0),
            (0, StockOperation.SUBTRACT, 1, 0),
        ],
    )
    def test_compute(self, current, operation, quantity, expected):
        """Test each operation never yields negative stock"""
        assert InventoryMutator.compute(current, operation, quantity) == expected


class TestParseOperation:
    """Tests for operation names"""

    def test_accepts_names_case_insensitively(self):
        """Test string operation names are coerced"""
        assert parse_operation("Subtract") is StockOperation.SUBTRACT
        assert parse_operation(StockOperation.SET) is StockOperation.SET

    def test_unknown_operation_raises(self):
        """Test unknown kinds are an invalid operation"""
        with pytest.raises(InvalidOperationError) as exc_info:
            parse_operation("multiply")

        assert exc_info.value.error_type is ErrorType.INVALID_OPERATION
        assert exc_info.value.field == "operation"


class TestApply:
    """Tests for applying operations to a product"""

    def test_apply_mutates_and_stamps(self, product):
        """Test stock and updated_at change in place"""
        now = datetime(2025, 6, 1, 9, 30)
        mutator = InventoryMutator(clock=lambda: now)

        change = mutator.apply(product, "subtract", 2)

        assert product.stock == 3
        assert product.updated_at == now
        assert (change.previous_stock, change.new_stock) == (5, 3)

    def test_negative_add_is_rejected(self, product):
        """Test add and subtract refuse negative quantities"""
        mutator = InventoryMutator()

        with pytest.raises(InvalidOperationError):
            mutator.apply(product, StockOperation.ADD, -1)
        with pytest.raises(InvalidOperationError):
            mutator.apply(product, StockOperation.SUBTRACT, -1)

        assert product.stock == 5

    def test_audit_event_recorded(self, product):
        """Test an audit sink receives the applied change and its reason"""
        sink = InMemoryAuditSink()
        mutator = InventoryMutator(audit_sink=sink, clock=lambda: datetime(2025, 6, 1))

        mutator.apply(product, "add", 10, reason="Restock from supplier")

        assert len(sink.events) == 1
        event = sink.events[0]
        assert event.operation == "add"
        assert event.reason == "Restock from supplier"
        assert event.delta == 10
        assert event.new_stock == 15

    def test_reason_is_not_stored_on_product(self, product):
        """Test the reason only travels with the audit event"""
        InventoryMutator().apply(product, "set", 1, reason="Stocktake")

        assert "Stocktake" not in product.model_dump_json()

    def test_clock_behind_created_at(self, product):
        """Test updated_at is never stamped earlier than created_at"""
        mutator = InventoryMutator(clock=lambda: datetime(2024, 12, 31))

        mutator.apply(product, "add", 1)

        assert product.stock == 6
        assert product.updated_at == product.created_at

    def test_stock_change_logged_at_info(self, product):
        """Test applied changes are logged at info level without an audit sink"""
        with capture_logs() as logs:
            InventoryMutator().apply(product, "subtract", 2)

        entry = next(e for e in logs if e["event"] == "Stock updated")
        assert entry["log_level"] == "info"
        assert (entry["product_id"], entry["previous_stock"], entry["new_stock"]) == ("p-1", 5, 3)


class TestAuditSinks:
    """Tests for the provided audit sinks"""

    def test_in_memory_sink_filters_and_clears(self):
        """Test per-product lookup and clearing"""
        sink = InMemoryAuditSink()
        at = datetime(2025, 6, 1)
        sink.record(StockAuditEvent("a", "add", 1, 0, 1, at))
        sink.record(StockAuditEvent("b", "set", 4, 1, 4, at))

        assert [e.product_id for e in sink.for_product("b")] == ["b"]

        sink.clear()
        assert sink.events == []

    def test_logging_sink_accepts_events(self):
        """Test the logging sink records without raising"""
        LoggingAuditSink().record(
            StockAuditEvent("a", "subtract", 2, 5, 3, datetime(2025, 6, 1), reason=None)
        )

