"""
Store Domain Models

Pydantic models for the catalogue, the sale log and the derived store
metrics. Monetary values are kept in integer cents; the float properties
(``price``, ``total_amount``...) are the presentation view.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from storefront.data.money import from_cents
from storefront.exceptions import InvalidRangeError


class SaleStatus(str, Enum):
    """Order fulfilment status"""
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class StockOperation(str, Enum):
    """Kinds of stock adjustment"""
    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"


def as_naive_local(moment: datetime) -> datetime:
    """Convert a timezone-aware datetime to naive local time; naive values pass through"""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


# =============================================================================
# VALUE OBJECTS
# =============================================================================

class Dimensions(BaseModel):
    """Package dimensions in centimetres"""
    length: float = Field(ge=0)
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class Address(BaseModel):
    """Shipping address"""
    street: str
    city: str
    state: str
    zip_code: str
    country: str


@dataclass(frozen=True)
class DateRange:
    """Inclusive time window over the sale log"""
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", as_naive_local(self.start))
        object.__setattr__(self, "end", as_naive_local(self.end))
        if self.start > self.end:
            raise InvalidRangeError(
                f"Start of range ({self.start.isoformat()}) is after its end ({self.end.isoformat()})",
                value={"start": self.start.isoformat(), "end": self.end.isoformat()},
            )

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    @property
    def duration(self):
        return self.end - self.start


# =============================================================================
# PRODUCTS
# =============================================================================

class Product(BaseModel):
    """Catalogue entry as held by the repository"""

    model_config = ConfigDict(validate_assignment=True)

    id: str
    name: str
    description: str = ""
    price_cents: int = Field(gt=0)
    category: str
    subcategory: Optional[str] = None
    collection: Optional[str] = None
    stock: int = Field(default=0, ge=0)
    is_visible: bool = True
    tags: List[str] = Field(default_factory=list)
    sku: Optional[str] = None
    images: Optional[List[str]] = None
    weight: Optional[float] = None
    dimensions: Optional[Dimensions] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def naive_timestamps(cls, value: datetime) -> datetime:
        return as_naive_local(value)

    @model_validator(mode="after")
    def check_updated_after_created(self) -> "Product":
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not be earlier than created_at")
        return self

    @property
    def price(self) -> float:
        return from_cents(self.price_cents)

    @property
    def inventory_value_cents(self) -> int:
        return self.price_cents * self.stock


class ProductCreate(BaseModel):
    """Fields a caller supplies to create a product"""
    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    price: Decimal = Field(gt=0)
    category: str = Field(min_length=1)
    subcategory: Optional[str] = None
    collection: Optional[str] = None
    stock: int = Field(default=0, ge=0)
    is_visible: bool = True
    tags: List[str] = Field(default_factory=list)
    sku: Optional[str] = None
    images: Optional[List[str]] = None
    weight: Optional[float] = Field(default=None, ge=0)
    dimensions: Optional[Dimensions] = None


class ProductUpdate(BaseModel):
    """Partial update; only fields explicitly set are merged"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0)
    category: Optional[str] = Field(default=None, min_length=1)
    subcategory: Optional[str] = None
    collection: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0)
    is_visible: Optional[bool] = None
    tags: Optional[List[str]] = None
    sku: Optional[str] = None
    images: Optional[List[str]] = None
    weight: Optional[float] = Field(default=None, ge=0)
    dimensions: Optional[Dimensions] = None


class ProductFilters(BaseModel):
    """Conjunctive product filters; unset filters are ignored"""
    category: Optional[str] = None
    collection: Optional[str] = None
    tag: Optional[str] = None
    price_min: Optional[Decimal] = None
    price_max: Optional[Decimal] = None
    in_stock: Optional[bool] = None
    visible: Optional[bool] = None


# =============================================================================
# SALES
# =============================================================================

class Sale(BaseModel):
    """Entry in the append-only sale log"""

    model_config = ConfigDict(frozen=True)

    id: str
    product_id: str
    product_name: str
    quantity: int = Field(gt=0)
    unit_price_cents: int = Field(ge=0)
    total_cents: int = Field(ge=0)
    customer_email: str
    customer_name: Optional[str] = None
    shipping_address: Optional[Address] = None
    status: SaleStatus = SaleStatus.PENDING
    payment_method: str = "credit_card"
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def naive_timestamp(cls, value: datetime) -> datetime:
        return as_naive_local(value)

    @property
    def unit_price(self) -> float:
        return from_cents(self.unit_price_cents)

    @property
    def total_amount(self) -> float:
        return from_cents(self.total_cents)


class SaleCreate(BaseModel):
    """Fields a caller supplies to record a sale; the total is always derived"""
    product_id: str = Field(min_length=1)
    product_name: str
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    customer_email: str = Field(min_length=3)
    customer_name: Optional[str] = None
    shipping_address: Optional[Address] = None
    status: SaleStatus = SaleStatus.PENDING
    payment_method: str = "credit_card"
    timestamp: Optional[datetime] = None

    @field_validator("timestamp")
    @classmethod
    def naive_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        return None if value is None else as_naive_local(value)


class StoreSnapshot(BaseModel):
    """Full copy of the store contents used for export, import and seeding"""
    products: List[Product] = Field(default_factory=list)
    sales: List[Sale] = Field(default_factory=list)


# =============================================================================
# METRICS
# =============================================================================

class TopProduct(BaseModel):
    """Product ranked by revenue"""
    id: str
    name: str
    sales: float


class LowStockAlert(BaseModel):
    id: str
    name: str
    stock: int


class RevenueByPeriod(BaseModel):
    """Revenue for today, this week (from Sunday) and this month"""
    daily: float = 0.0
    weekly: float = 0.0
    monthly: float = 0.0


class CategoryPerformance(BaseModel):
    category: str
    revenue: float
    orders: int


class StoreMetrics(BaseModel):
    """Aggregated view of a sale window plus current stock alerts"""
    total_sales: float
    total_orders: int
    avg_order_value: float
    top_products: List[TopProduct] = Field(default_factory=list)
    low_stock_alerts: List[LowStockAlert] = Field(default_factory=list)
    revenue_by_period: RevenueByPeriod = Field(default_factory=RevenueByPeriod)
    category_performance: List[CategoryPerformance] = Field(default_factory=list)
