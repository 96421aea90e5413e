"""
Test Suite Configuration
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from storefront.config import Settings, StoreSettings
from storefront.data.generators import sample_snapshot
from storefront.data.models import ProductCreate, SaleCreate
from storefront.services.store_service import StoreService
from storefront.store.audit import InMemoryAuditSink
from storefront.store.inventory import InventoryMutator
from storefront.store.repository import StoreRepository

# Wednesday; the calendar week started on Sunday 2025-06-15
FIXED_NOW = datetime(2025, 6, 18, 12, 0, 0)


class FrozenClock:
    """Callable clock that only moves when told to"""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
        store=StoreSettings(seed_sample_data=False, audit_stock_changes=False),
    )


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def repository(clock, audit_sink) -> StoreRepository:
    """Empty repository with a frozen clock and an in-memory audit sink"""
    return StoreRepository(
        inventory=InventoryMutator(audit_sink=audit_sink, clock=clock),
        clock=clock,
    )


@pytest.fixture
def seeded_repository(clock) -> StoreRepository:
    """Repository holding the sample catalogue and sale log"""
    return StoreRepository(initial_data=sample_snapshot(FIXED_NOW), clock=clock)


@pytest.fixture
def service(seeded_repository) -> StoreService:
    return StoreService(seeded_repository, settings=StoreSettings())


@pytest.fixture
def make_product(repository):
    """Factory adding a product to the empty repository"""
    def _make(name: str = "Test Product", price: str = "10.00", category: str = "General", **kwargs):
        return repository.add_product(
            ProductCreate(name=name, price=Decimal(price), category=category, **kwargs)
        )
    return _make


@pytest.fixture
def make_sale(repository):
    """Factory recording a sale in the empty repository"""
    def _make(product, quantity: int = 1, timestamp: datetime = None, **kwargs):
        kwargs.setdefault("customer_email", "buyer@example.com")
        return repository.add_sale(
            SaleCreate(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price=Decimal(product.price_cents) / 100,
                timestamp=timestamp,
                **kwargs,
            )
        )
    return _make
