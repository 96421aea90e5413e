"""
Product References

A product can be addressed by id, by name fragment or by SKU. Each way is a
small value type with a ``resolve`` method, so callers never branch on an
identifier-type string themselves.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from storefront.data.models import Product
from storefront.exceptions import InvalidOperationError
from storefront.store.repository import StoreRepository


class IdentifierType(str, Enum):
    ID = "id"
    NAME = "name"
    SKU = "sku"


@dataclass(frozen=True)
class ById:
    value: str
    kind = IdentifierType.ID

    def resolve(self, repository: StoreRepository) -> Optional[Product]:
        return repository.get_product(self.value)


@dataclass(frozen=True)
class ByName:
    """Case-insensitive name fragment; the first matching product wins"""
    value: str
    kind = IdentifierType.NAME

    def resolve(self, repository: StoreRepository) -> Optional[Product]:
        return repository.get_product_by_name(self.value)


@dataclass(frozen=True)
class BySku:
    value: str
    kind = IdentifierType.SKU

    def resolve(self, repository: StoreRepository) -> Optional[Product]:
        return repository.get_product_by_sku(self.value)


ProductRef = Union[ById, ByName, BySku]

_REF_TYPES = {
    IdentifierType.ID: ById,
    IdentifierType.NAME: ByName,
    IdentifierType.SKU: BySku,
}


def product_ref(
    identifier: Union[str, ProductRef],
    identifier_type: Union[IdentifierType, str] = IdentifierType.NAME,
) -> ProductRef:
    """
    Build a product reference from an identifier and its type.

    Args:
        identifier: Product id, name fragment or SKU (or an existing reference)
        identifier_type: "id", "name" (default) or "sku"

    Returns:
        ProductRef: Reference ready to resolve against a repository
    """
    if isinstance(identifier, (ById, ByName, BySku)):
        return identifier
    if isinstance(identifier_type, IdentifierType):
        return _REF_TYPES[identifier_type](identifier)
    try:
        kind = IdentifierType(str(identifier_type).lower())
    except ValueError:
        raise InvalidOperationError(
            f"Unknown identifier type '{identifier_type}'. Use one of: id, name, sku",
            field="identifier_type",
            value=identifier_type,
        ) from None
    return _REF_TYPES[kind](identifier)
