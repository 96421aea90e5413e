"""
Service Layer
"""
from .identifiers import ById, ByName, BySku, IdentifierType, product_ref
from .store_service import StoreService

__all__ = [
    "StoreService",
    "IdentifierType",
    "ById",
    "ByName",
    "BySku",
    "product_ref",
]
