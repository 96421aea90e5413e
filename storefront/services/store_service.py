"""
Store Service

Caller-facing layer over the repository and the analytics engine. It applies
the business rules the repository does not (name and SKU uniqueness,
identifier routing) and converts "not found" sentinels into ``StoreError``s,
so callers get either a complete value or a descriptive exception.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

import structlog
from pydantic import BaseModel, Field

from storefront.analytics.aggregator import SalesAggregator
from storefront.analytics.periods import DateInput, ReportType, SalesPeriod, custom_range
from storefront.analytics.reports import RevenueReport, SalesDataReport, SalesReporter
from storefront.config import StoreSettings
from storefront.data.models import (
    Address,
    DateRange,
    Product,
    ProductCreate,
    ProductFilters,
    ProductUpdate,
    Sale,
    SaleCreate,
    SaleStatus,
    StockOperation,
    StoreMetrics,
    StoreSnapshot,
)
from storefront.data.money import Amount, from_cents
from storefront.exceptions import (
    DuplicateNameError,
    DuplicateSKUError,
    InvalidOperationError,
    ProductNotFoundError,
)
from storefront.formatting import StockStatus, stock_status
from storefront.services.identifiers import IdentifierType, ProductRef, product_ref
from storefront.store.inventory import parse_operation
from storefront.store.repository import StoreRepository

logger = structlog.get_logger(__name__)

Identifier = Union[str, ProductRef]


class StockLevel(BaseModel):
    product_id: str
    product_name: str
    current_stock: int
    stock_status: StockStatus
    sku: Optional[str] = None
    price: float
    category: str


class StockAdjustment(BaseModel):
    """Result of an applied stock operation"""
    success: bool = True
    product_id: str
    product_name: str
    previous_stock: int
    new_stock: int
    operation: StockOperation
    quantity: int
    reason: Optional[str] = None


class LowStockItem(BaseModel):
    id: str
    name: str
    current_stock: int
    category: str
    sku: Optional[str] = None
    price: float
    alert_level: StockStatus


class LowStockSummary(BaseModel):
    total_low_stock: int
    total_out_of_stock: int
    critical_items: int
    total_value: float


class LowStockReport(BaseModel):
    items: List[LowStockItem] = Field(default_factory=list)
    summary: LowStockSummary


class ProductPage(BaseModel):
    """One page of a collection listing"""
    collection: str
    products: List[Product] = Field(default_factory=list)
    total: int
    limit: int
    offset: int
    has_next: bool


class StoreService:
    """
    Business operations for tool-style callers.

    Example:
        service = StoreService(repository)
        level = service.get_product_stock("t-shirt")
        service.adjust_stock("BTS-001", "add", 20, identifier_type="sku")
    """

    def __init__(
        self,
        repository: StoreRepository,
        settings: Optional[StoreSettings] = None,
        aggregator: Optional[SalesAggregator] = None,
    ):
        self.repository = repository
        self.settings = settings or StoreSettings()
        self.aggregator = aggregator or SalesAggregator(
            repository,
            low_stock_threshold=self.settings.low_stock_threshold,
            top_products_limit=self.settings.top_products_limit,
        )
        self.reporter = SalesReporter(
            self.aggregator,
            top_products_limit=self.settings.report_top_products_limit,
            trend_threshold_percent=self.settings.trend_threshold_percent,
        )

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def resolve(
        self,
        identifier: Identifier,
        identifier_type: Union[IdentifierType, str] = IdentifierType.NAME,
    ) -> Product:
        """Resolve an identifier to a product or raise ProductNotFoundError"""
        ref = product_ref(identifier, identifier_type)
        product = ref.resolve(self.repository)
        if product is None:
            logger.debug("Product lookup failed", identifier=ref.value, identifier_type=ref.kind.value)
            raise ProductNotFoundError(ref.value, ref.kind.value)
        return product

    def get_product(
        self,
        identifier: Identifier,
        identifier_type: Union[IdentifierType, str] = IdentifierType.NAME,
    ) -> Product:
        return self.resolve(identifier, identifier_type)

    def get_product_stock(
        self,
        identifier: Identifier,
        identifier_type: Union[IdentifierType, str] = IdentifierType.NAME,
    ) -> StockLevel:
        product = self.resolve(identifier, identifier_type)
        return StockLevel(
            product_id=product.id,
            product_name=product.name,
            current_stock=product.stock,
            stock_status=stock_status(product.stock, self.settings.low_stock_threshold),
            sku=product.sku,
            price=product.price,
            category=product.category,
        )

    def list_products(self, filters: Optional[ProductFilters] = None) -> List[Product]:
        return self.repository.get_all_products(filters)

    def search_products(self, query: str) -> List[Product]:
        return self.repository.search_products(query)

    def products_by_collection(self, collection: str, limit: int = 50, offset: int = 0) -> ProductPage:
        """
        Products in ``collection``, ``limit`` at a time starting at ``offset``.

        Raises:
            InvalidOperationError: negative limit or offset
        """
        if limit < 0:
            raise InvalidOperationError("Limit must not be negative", field="limit", value=limit)
        if offset < 0:
            raise InvalidOperationError("Offset must not be negative", field="offset", value=offset)

        matches = self.repository.get_products_by_collection(collection)
        return ProductPage(
            collection=collection,
            products=matches[offset:offset + limit],
            total=len(matches),
            limit=limit,
            offset=offset,
            has_next=offset + limit < len(matches),
        )

    def get_categories(self) -> List[str]:
        return self.repository.get_categories()

    def get_collections(self) -> List[str]:
        return self.repository.get_collections()

    # -------------------------------------------------------------------------
    # Catalogue changes
    # -------------------------------------------------------------------------

    def create_product(self, data: ProductCreate) -> Product:
        """
        Add a product after checking SKU and name uniqueness.

        Raises:
            DuplicateSKUError: the SKU is already used
            DuplicateNameError: a product with the same name exists
        """
        with self.repository.lock:
            if data.sku:
                existing = self.repository.get_product_by_sku(data.sku)
                if existing is not None:
                    raise DuplicateSKUError(data.sku, existing.name)
            if self._find_by_exact_name(data.name) is not None:
                raise DuplicateNameError(data.name)
            return self.repository.add_product(data)

    def update_product(
        self,
        identifier: Identifier,
        data: ProductUpdate,
        identifier_type: Union[IdentifierType, str] = IdentifierType.ID,
    ) -> Product:
        with self.repository.lock:
            product = self.resolve(identifier, identifier_type)
            if data.sku:
                owner = self.repository.get_product_by_sku(data.sku)
                if owner is not None and owner.id != product.id:
                    raise DuplicateSKUError(data.sku, owner.name)
            if data.name:
                owner = self._find_by_exact_name(data.name)
                if owner is not None and owner.id != product.id:
                    raise DuplicateNameError(data.name)

            updated = self.repository.update_product(product.id, data)
            if updated is None:
                raise ProductNotFoundError(product.id, IdentifierType.ID.value)
            return updated

    def toggle_visibility(
        self,
        identifier: Identifier,
        identifier_type: Union[IdentifierType, str] = IdentifierType.NAME,
        visible: Optional[bool] = None,
    ) -> Product:
        """Set visibility, or flip it when ``visible`` is None"""
        with self.repository.lock:
            product = self.resolve(identifier, identifier_type)
            target = (not product.is_visible) if visible is None else visible
            return self.update_product(product.id, ProductUpdate(is_visible=target), IdentifierType.ID)

    def delete_product(
        self,
        identifier: Identifier,
        identifier_type: Union[IdentifierType, str] = IdentifierType.ID,
    ) -> Product:
        with self.repository.lock:
            product = self.resolve(identifier, identifier_type)
            self.repository.delete_product(product.id)
        return product

    # -------------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------------

    def adjust_stock(
        self,
        identifier: Identifier,
        operation: Union[StockOperation, str],
        quantity: int,
        identifier_type: Union[IdentifierType, str] = IdentifierType.NAME,
        reason: Optional[str] = None,
    ) -> StockAdjustment:
        """
        Apply add / subtract / set to the resolved product.

        Raises:
            ProductNotFoundError: identifier does not resolve
            InvalidOperationError: unknown operation or negative add/subtract
        """
        op = parse_operation(operation)
        with self.repository.lock:
            product = self.resolve(identifier, identifier_type)
            change = self.repository.apply_stock_operation(product.id, op, quantity, reason=reason)
            if change is None:
                raise ProductNotFoundError(product.id, IdentifierType.ID.value)

        logger.info(
            "Stock adjusted",
            product_id=product.id,
            operation=op.value,
            quantity=quantity,
            previous_stock=change.previous_stock,
            new_stock=change.new_stock,
            reason=reason,
        )
        return StockAdjustment(
            product_id=product.id,
            product_name=product.name,
            previous_stock=change.previous_stock,
            new_stock=change.new_stock,
            operation=op,
            quantity=quantity,
            reason=reason,
        )

    def list_low_stock(
        self,
        threshold: Optional[int] = None,
        include_out_of_stock: bool = True,
    ) -> LowStockReport:
        """Low-stock products, optionally followed by out-of-stock ones"""
        limit = self.settings.low_stock_threshold if threshold is None else threshold
        low = self.repository.get_low_stock_products(limit)
        out = self.repository.get_out_of_stock_products() if include_out_of_stock else []

        items = [self._low_stock_item(p, StockStatus.LOW_STOCK) for p in low]
        items += [self._low_stock_item(p, StockStatus.OUT_OF_STOCK) for p in out]

        value_cents = sum(p.inventory_value_cents for p in low + out)
        summary = LowStockSummary(
            total_low_stock=len(low),
            total_out_of_stock=len(out),
            critical_items=sum(1 for item in items if item.current_stock <= self.settings.critical_stock_threshold),
            total_value=from_cents(value_cents),
        )
        return LowStockReport(items=items, summary=summary)

    # -------------------------------------------------------------------------
    # Sales
    # -------------------------------------------------------------------------

    def record_sale(
        self,
        identifier: Identifier,
        quantity: int,
        customer_email: str,
        identifier_type: Union[IdentifierType, str] = IdentifierType.ID,
        unit_price: Optional[Amount] = None,
        customer_name: Optional[str] = None,
        shipping_address: Optional[Address] = None,
        status: SaleStatus = SaleStatus.PENDING,
        payment_method: str = "credit_card",
        timestamp: Optional[datetime] = None,
    ) -> Sale:
        """Record a sale against the resolved product at its current price unless given"""
        with self.repository.lock:
            product = self.resolve(identifier, identifier_type)
            data = SaleCreate(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price=Decimal(product.price_cents) / 100 if unit_price is None else unit_price,
                customer_email=customer_email,
                customer_name=customer_name,
                shipping_address=shipping_address,
                status=status,
                payment_method=payment_method,
                timestamp=timestamp,
            )
            return self.repository.add_sale(data)

    def get_sales_analytics(
        self,
        start: Optional[DateInput] = None,
        end: Optional[DateInput] = None,
    ) -> StoreMetrics:
        """Store metrics over the whole log, or over ``start``..``end`` when both are given"""
        window = self._window(start, end)
        if window is None:
            sales = self.repository.get_sales()
        else:
            sales = self.repository.get_sales_by_date_range(window.start, window.end)
        return self.aggregator.compute_metrics(sales)

    def top_selling_products(
        self,
        limit: int = 5,
        start: Optional[DateInput] = None,
        end: Optional[DateInput] = None,
    ) -> List[Product]:
        window = self._window(start, end)
        if window is None:
            sales = self.repository.get_sales()
        else:
            sales = self.repository.get_sales_by_date_range(window.start, window.end)
        return self.aggregator.top_selling_products(sales, limit)

    def get_sales_data(
        self,
        period: Union[SalesPeriod, str],
        start_date: Optional[DateInput] = None,
        end_date: Optional[DateInput] = None,
        include_metrics: bool = True,
    ) -> SalesDataReport:
        return self.reporter.sales_data(period, start_date, end_date, include_metrics)

    def revenue_report(
        self,
        report_type: Union[ReportType, str],
        start_date: Optional[DateInput] = None,
        end_date: Optional[DateInput] = None,
        **options,
    ) -> RevenueReport:
        return self.reporter.revenue_report(report_type, start_date, end_date, **options)

    # -------------------------------------------------------------------------
    # Data management
    # -------------------------------------------------------------------------

    def export_data(self) -> StoreSnapshot:
        return self.repository.export_data()

    def import_data(self, snapshot: StoreSnapshot) -> None:
        self.repository.import_data(snapshot)

    def reset(self) -> None:
        self.repository.reset()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _find_by_exact_name(self, name: str) -> Optional[Product]:
        wanted = name.strip().casefold()
        for product in self.repository.get_all_products():
            if product.name.strip().casefold() == wanted:
                return product
        return None

    @staticmethod
    def _window(start: Optional[DateInput], end: Optional[DateInput]) -> Optional[DateRange]:
        if start is None and end is None:
            return None
        return custom_range(start, end)

    @staticmethod
    def _low_stock_item(product: Product, alert_level: StockStatus) -> LowStockItem:
        return LowStockItem(
            id=product.id,
            name=product.name,
            current_stock=product.stock,
            category=product.category,
            sku=product.sku,
            price=product.price,
            alert_level=alert_level,
        )
