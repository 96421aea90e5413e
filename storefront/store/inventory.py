"""
Inventory Mutator

Applies add / subtract / set to a single product's on-hand quantity.
Stock never goes below zero: over-subtraction and negative ``set`` values
clamp to 0 instead of failing.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

import structlog

from storefront.data.models import Product, StockOperation
from storefront.exceptions import InvalidOperationError
from storefront.store.audit import StockAuditEvent, StockAuditSink

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockChange:
    """Outcome of one stock operation"""
    product_id: str
    operation: StockOperation
    quantity: int
    previous_stock: int
    new_stock: int
    reason: Optional[str] = None


def parse_operation(operation: Union[StockOperation, str]) -> StockOperation:
    """Coerce an operation name, rejecting unknown kinds"""
    if isinstance(operation, StockOperation):
        return operation
    try:
        return StockOperation(str(operation).lower())
    except ValueError:
        raise InvalidOperationError(
            f"Unknown stock operation '{operation}'. Use one of: add, subtract, set",
            field="operation",
            value=operation,
        ) from None


class InventoryMutator:
    """
    Stock arithmetic for one product record at a time.

    The mutator does not look products up and holds no lock; the repository
    resolves the product and serialises calls.
    """

    def __init__(
        self,
        audit_sink: Optional[StockAuditSink] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.audit_sink = audit_sink
        self.clock = clock

    @staticmethod
    def compute(current: int, operation: StockOperation, quantity: int) -> int:
        """New stock level for ``operation`` applied to ``current``"""
        if operation is StockOperation.ADD:
            return current + quantity
        if operation is StockOperation.SUBTRACT:
            return max(0, current - quantity)
        if operation is StockOperation.SET:
            return max(0, quantity)
        raise InvalidOperationError(f"Unknown stock operation '{operation}'", field="operation", value=operation)

    def apply(
        self,
        product: Product,
        operation: Union[StockOperation, str],
        quantity: int,
        reason: Optional[str] = None,
    ) -> StockChange:
        """Mutate ``product.stock`` in place and stamp ``updated_at``"""
        op = parse_operation(operation)
        if op is not StockOperation.SET and quantity < 0:
            raise InvalidOperationError(
                f"Quantity for '{op.value}' must not be negative",
                field="quantity",
                value=quantity,
            )

        previous = product.stock
        new_stock = self.compute(previous, op, quantity)
        now = self.clock()

        product.stock = new_stock
        product.updated_at = max(now, product.created_at)

        change = StockChange(
            product_id=product.id,
            operation=op,
            quantity=quantity,
            previous_stock=previous,
            new_stock=new_stock,
            reason=reason,
        )

        logger.info(
            "Stock updated",
            product_id=product.id,
            operation=op.value,
            quantity=quantity,
            previous_stock=previous,
            new_stock=new_stock,
        )

        if self.audit_sink is not None:
            self.audit_sink.record(StockAuditEvent(
                product_id=product.id,
                operation=op.value,
                quantity=quantity,
                previous_stock=previous,
                new_stock=new_stock,
                occurred_at=now,
                reason=reason,
            ))

        return change
