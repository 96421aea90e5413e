"""
Store Exceptions

Errors raised at the caller-facing boundary of the store. The repository
itself reports missing entities with ``None`` / ``False``; the service layer
turns those into the exceptions below.
"""

from enum import Enum
from typing import Any, Optional


class ErrorType(str, Enum):
    """Machine-readable error categories"""
    NOT_FOUND = "RESOURCE_NOT_FOUND"
    ALREADY_EXISTS = "RESOURCE_ALREADY_EXISTS"
    INVALID_OPERATION = "INVALID_OPERATION"
    INVALID_RANGE = "INVALID_RANGE"


class StoreError(Exception):
    """Base class for all store errors."""

    def __init__(
        self,
        error_type: ErrorType,
        message: str,
        resource: Optional[str] = None,
        field: Optional[str] = None,
        value: Optional[Any] = None,
    ) -> None:
        self.error_type = error_type
        self.message = message
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(message)

    def to_dict(self) -> dict:
        """Serializable error payload for tool-style callers"""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "resource": self.resource,
            "field": self.field,
            "value": self.value,
        }


class ProductNotFoundError(StoreError):
    """Raised when an identifier does not resolve to a product."""

    def __init__(self, identifier: str, identifier_type: str = "id") -> None:
        super().__init__(
            ErrorType.NOT_FOUND,
            f"Product not found with {identifier_type}: {identifier}",
            resource="product",
            field=identifier_type,
            value=identifier,
        )


class DuplicateSKUError(StoreError):
    """Raised when a SKU is already used by another product."""

    def __init__(self, sku: str, existing_name: Optional[str] = None) -> None:
        message = f"A product with SKU '{sku}' already exists"
        if existing_name:
            message += f": {existing_name}"
        super().__init__(
            ErrorType.ALREADY_EXISTS,
            message,
            resource="product",
            field="sku",
            value=sku,
        )


class DuplicateNameError(StoreError):
    """Raised when a product with the same name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(
            ErrorType.ALREADY_EXISTS,
            f"A product with the name '{name}' already exists. "
            "Please use a different name or update the existing product.",
            resource="product",
            field="name",
            value=name,
        )


class InvalidOperationError(StoreError):
    """Raised for unknown stock operations or identifier types."""

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[Any] = None) -> None:
        super().__init__(
            ErrorType.INVALID_OPERATION,
            message,
            field=field,
            value=value,
        )


class InvalidRangeError(StoreError):
    """Raised for malformed, incomplete or inverted date ranges."""

    def __init__(self, message: str, value: Optional[Any] = None) -> None:
        super().__init__(
            ErrorType.INVALID_RANGE,
            message,
            resource="date_range",
            value=value,
        )
