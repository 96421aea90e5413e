"""
Store Repository

Authoritative in-memory store of products (keyed by id, insertion ordered)
and the append-only sale log.

Missing entities are reported with ``None`` / ``False``; nothing in this
module raises for an unknown id. Uniqueness of names and SKUs is enforced by
the service layer, not here.

Every mutation runs under one re-entrant lock, so the two composite steps
(subtract-then-floor, append-sale-then-decrement) are single critical sections.
"""

import threading
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional, Union

import structlog

from storefront.data.models import (
    Product,
    ProductCreate,
    ProductFilters,
    ProductUpdate,
    Sale,
    SaleCreate,
    StockOperation,
    StoreSnapshot,
    as_naive_local,
)
from storefront.data.money import from_cents, to_cents
from storefront.store.inventory import InventoryMutator, StockChange

logger = structlog.get_logger(__name__)

# Fields that may not be cleared through a partial update
_REQUIRED_FIELDS = {"name", "description", "price", "category", "stock", "is_visible", "tags"}


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class StoreRepository:
    """
    In-memory product and sale repository.

    Example:
        repo = StoreRepository()
        product = repo.add_product(ProductCreate(name="Mug", price=9.5, category="Kitchen"))
        repo.add_sale(SaleCreate(product_id=product.id, product_name=product.name,
                                 quantity=2, unit_price=9.5, customer_email="a@b.c"))
    """

    def __init__(
        self,
        initial_data: Optional[StoreSnapshot] = None,
        inventory: Optional[InventoryMutator] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.clock = clock
        self.inventory = inventory or InventoryMutator(clock=clock)
        self._initial_data = initial_data.model_copy(deep=True) if initial_data else None
        self._products: Dict[str, Product] = {}
        self._sales: List[Sale] = []
        # dicts used as insertion-ordered sets; they only ever grow
        self._categories: Dict[str, None] = {}
        self._collections: Dict[str, None] = {}
        self._lock = threading.RLock()

        if self._initial_data is not None:
            self._load(self._initial_data.model_copy(deep=True))

    @property
    def lock(self) -> threading.RLock:
        """Lock guarding all repository state"""
        return self._lock

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def get_product_by_name(self, fragment: str) -> Optional[Product]:
        """
        First product, in insertion order, whose name contains ``fragment``
        case-insensitively. Later matches are ignored.
        """
        needle = fragment.lower()
        for product in self._all():
            if needle in product.name.lower():
                return product
        return None

    def get_product_by_sku(self, sku: str) -> Optional[Product]:
        """Exact, case-sensitive SKU match"""
        for product in self._all():
            if product.sku is not None and product.sku == sku:
                return product
        return None

    def add_product(self, data: ProductCreate) -> Product:
        now = self.clock()
        fields = data.model_dump(exclude={"price"})
        product = Product(
            **fields,
            id=_new_id("prod"),
            price_cents=to_cents(data.price),
            created_at=now,
            updated_at=now,
        )

        with self._lock:
            self._products[product.id] = product
            self._register(product)

        logger.info("Product added", product_id=product.id, name=product.name, sku=product.sku)
        return product

    def update_product(self, product_id: str, data: ProductUpdate) -> Optional[Product]:
        """Merge the explicitly set fields of ``data`` over the stored product"""
        changes = data.model_dump(exclude_unset=True)
        for key in list(changes):
            if key in _REQUIRED_FIELDS and changes[key] is None:
                del changes[key]
        if "price" in changes:
            changes["price_cents"] = to_cents(changes.pop("price"))

        with self._lock:
            current = self._products.get(product_id)
            if current is None:
                logger.debug("Update skipped, product not found", product_id=product_id)
                return None

            updated_at = max(self.clock(), current.created_at)
            merged = {**current.model_dump(), **changes, "updated_at": updated_at}
            updated = Product.model_validate(merged)
            self._products[product_id] = updated
            self._register(updated)

        logger.info("Product updated", product_id=product_id, fields=sorted(changes))
        return updated

    def delete_product(self, product_id: str) -> bool:
        with self._lock:
            removed = self._products.pop(product_id, None)
        if removed is not None:
            logger.info("Product deleted", product_id=product_id, name=removed.name)
        return removed is not None

    def get_all_products(self, filters: Optional[ProductFilters] = None) -> List[Product]:
        """All products matching every filter that is set"""
        products = self._all()
        if filters is None:
            return products

        if filters.category:
            needle = filters.category.lower()
            products = [p for p in products if needle in p.category.lower()]
        if filters.collection:
            needle = filters.collection.lower()
            products = [p for p in products if p.collection and needle in p.collection.lower()]
        if filters.tag:
            needle = filters.tag.lower()
            products = [p for p in products if any(needle in tag.lower() for tag in p.tags)]
        if filters.price_min is not None:
            floor = to_cents(filters.price_min)
            products = [p for p in products if p.price_cents >= floor]
        if filters.price_max is not None:
            ceiling = to_cents(filters.price_max)
            products = [p for p in products if p.price_cents <= ceiling]
        if filters.in_stock is not None:
            products = [p for p in products if (p.stock > 0) == filters.in_stock]
        if filters.visible is not None:
            products = [p for p in products if p.is_visible == filters.visible]

        return products

    def search_products(self, query: str) -> List[Product]:
        """Products whose name, description, category, tags or SKU contain ``query``"""
        term = query.lower()
        return [
            p for p in self._all()
            if term in p.name.lower()
            or term in p.description.lower()
            or term in p.category.lower()
            or any(term in tag.lower() for tag in p.tags)
            or (p.sku is not None and term in p.sku.lower())
        ]

    def get_products_by_category(self, category: str) -> List[Product]:
        return self.get_all_products(ProductFilters(category=category))

    def get_products_by_collection(self, collection: str) -> List[Product]:
        return self.get_all_products(ProductFilters(collection=collection))

    def get_products_by_tag(self, tag: str) -> List[Product]:
        return self.get_all_products(ProductFilters(tag=tag))

    # -------------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------------

    def apply_stock_operation(
        self,
        product_id: str,
        operation: Union[StockOperation, str],
        quantity: int,
        reason: Optional[str] = None,
    ) -> Optional[StockChange]:
        """Apply a stock operation; ``None`` when the product does not exist"""
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                logger.debug("Stock update skipped, product not found", product_id=product_id)
                return None
            return self.inventory.apply(product, operation, quantity, reason=reason)

    def update_stock(
        self,
        product_id: str,
        operation: Union[StockOperation, str],
        quantity: int,
        reason: Optional[str] = None,
    ) -> bool:
        return self.apply_stock_operation(product_id, operation, quantity, reason) is not None

    def get_low_stock_products(self, threshold: int = 10) -> List[Product]:
        """Products with ``0 < stock <= threshold``"""
        return [p for p in self._all() if 0 < p.stock <= threshold]

    def get_out_of_stock_products(self) -> List[Product]:
        return [p for p in self._all() if p.stock == 0]

    def get_stock_level(self, product_id: str) -> Optional[int]:
        product = self._products.get(product_id)
        return product.stock if product else None

    # -------------------------------------------------------------------------
    # Sales
    # -------------------------------------------------------------------------

    def add_sale(self, data: SaleCreate) -> Sale:
        """
        Append a sale and subtract its quantity from the product's stock.

        The decrement is attempted for every sale and is a no-op when the
        product no longer exists.
        """
        unit_price_cents = to_cents(data.unit_price)
        fields = data.model_dump(exclude={"unit_price", "timestamp"})

        with self._lock:
            sale = Sale(
                **fields,
                id=_new_id("sale"),
                unit_price_cents=unit_price_cents,
                total_cents=unit_price_cents * data.quantity,
                timestamp=data.timestamp or self.clock(),
            )
            self._sales.append(sale)
            self.apply_stock_operation(
                sale.product_id,
                StockOperation.SUBTRACT,
                sale.quantity,
                reason=f"Sale: {sale.id}",
            )

        logger.info(
            "Sale recorded",
            sale_id=sale.id,
            product_id=sale.product_id,
            quantity=sale.quantity,
            total_amount=sale.total_amount,
        )
        return sale

    def get_sales(self) -> List[Sale]:
        with self._lock:
            return list(self._sales)

    def get_sales_by_date_range(self, start: datetime, end: datetime) -> List[Sale]:
        """Sales with ``start <= timestamp <= end`` in log order"""
        start, end = as_naive_local(start), as_naive_local(end)
        return [s for s in self.get_sales() if start <= s.timestamp <= end]

    # -------------------------------------------------------------------------
    # Data management
    # -------------------------------------------------------------------------

    def export_data(self) -> StoreSnapshot:
        """Deep copy of all products and sales"""
        with self._lock:
            snapshot = StoreSnapshot(products=list(self._products.values()), sales=list(self._sales))
            return snapshot.model_copy(deep=True)

    def import_data(self, snapshot: StoreSnapshot) -> None:
        """Replace the whole store with ``snapshot``; no merging"""
        with self._lock:
            self._clear()
            self._load(snapshot.model_copy(deep=True))
        logger.info("Store data imported", products=len(snapshot.products), sales=len(snapshot.sales))

    def reset(self) -> None:
        """Return to the data the repository was constructed with"""
        with self._lock:
            self._clear()
            if self._initial_data is not None:
                self._load(self._initial_data.model_copy(deep=True))
        logger.info("Store reset", products=len(self._products), sales=len(self._sales))

    def get_categories(self) -> List[str]:
        return list(self._categories)

    def get_collections(self) -> List[str]:
        return list(self._collections)

    def get_product_count(self) -> int:
        return len(self._products)

    def get_total_inventory_value(self) -> float:
        return from_cents(sum(p.inventory_value_cents for p in self._all()))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _all(self) -> List[Product]:
        with self._lock:
            return list(self._products.values())

    def _register(self, product: Product) -> None:
        self._categories[product.category] = None
        if product.collection:
            self._collections[product.collection] = None

    def _clear(self) -> None:
        self._products.clear()
        self._sales = []
        self._categories.clear()
        self._collections.clear()

    def _load(self, snapshot: StoreSnapshot) -> None:
        for product in snapshot.products:
            self._products[product.id] = product
            self._register(product)
        self._sales = list(snapshot.sales)
