"""
Entity Repository and Inventory
"""
from .audit import InMemoryAuditSink, LoggingAuditSink, StockAuditEvent
from .inventory import InventoryMutator, StockChange
from .repository import StoreRepository

__all__ = [
    "StoreRepository",
    "InventoryMutator",
    "StockChange",
    "StockAuditEvent",
    "LoggingAuditSink",
    "InMemoryAuditSink",
]
