"""
Stock Audit Sinks

Stock adjustments carry an optional free-text reason which is not kept on the
product. Collaborators that need an audit trail plug a sink into the
inventory mutator and receive one event per applied operation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Protocol

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockAuditEvent:
    """One applied stock operation"""
    product_id: str
    operation: str
    quantity: int
    previous_stock: int
    new_stock: int
    occurred_at: datetime
    reason: Optional[str] = None

    @property
    def delta(self) -> int:
        return self.new_stock - self.previous_stock


class StockAuditSink(Protocol):
    def record(self, event: StockAuditEvent) -> None:
        ...


class LoggingAuditSink:
    """Writes audit events to the structured log"""

    def __init__(self, event_name: str = "stock_audit"):
        self.event_name = event_name

    def record(self, event: StockAuditEvent) -> None:
        logger.info(
            self.event_name,
            product_id=event.product_id,
            operation=event.operation,
            quantity=event.quantity,
            previous_stock=event.previous_stock,
            new_stock=event.new_stock,
            reason=event.reason,
            occurred_at=event.occurred_at.isoformat(),
        )


@dataclass
class InMemoryAuditSink:
    """Keeps audit events in a list"""
    events: List[StockAuditEvent] = field(default_factory=list)

    def record(self, event: StockAuditEvent) -> None:
        self.events.append(event)

    def for_product(self, product_id: str) -> List[StockAuditEvent]:
        return [e for e in self.events if e.product_id == product_id]

    def clear(self) -> None:
        self.events.clear()
