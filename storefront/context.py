"""
Application Context

Wires settings, the repository, analytics and the service layer into one
object owned by the host process. Each call builds an independent store, so
tests and tenants never share state.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import structlog

from storefront.analytics.aggregator import SalesAggregator
from storefront.analytics.reports import SalesReporter
from storefront.config import Settings, get_settings
from storefront.config.logging import configure_logging
from storefront.data.generators import sample_snapshot
from storefront.data.models import StoreSnapshot
from storefront.services.store_service import StoreService
from storefront.store.audit import LoggingAuditSink
from storefront.store.inventory import InventoryMutator
from storefront.store.repository import StoreRepository

logger = structlog.get_logger(__name__)


@dataclass
class StoreContext:
    settings: Settings
    repository: StoreRepository
    aggregator: SalesAggregator
    service: StoreService

    @property
    def reporter(self) -> SalesReporter:
        return self.service.reporter


def create_context(
    settings: Optional[Settings] = None,
    initial_data: Optional[StoreSnapshot] = None,
    clock: Callable[[], datetime] = datetime.now,
    configure_logs: bool = False,
) -> StoreContext:
    """
    Build a store context.

    Args:
        settings: Application settings (defaults to the cached environment settings)
        initial_data: Starting contents; when omitted the sample catalogue is
            used if ``store.seed_sample_data`` is enabled
        clock: Time source shared by the repository and analytics
        configure_logs: Set up structlog and the root handlers from ``settings``

    Returns:
        StoreContext: Ready-to-use context
    """
    settings = settings or get_settings()
    store_settings = settings.store
    if configure_logs:
        configure_logging(settings)

    if initial_data is None and store_settings.seed_sample_data:
        initial_data = sample_snapshot(clock())

    audit_sink = LoggingAuditSink() if store_settings.audit_stock_changes else None
    repository = StoreRepository(
        initial_data=initial_data,
        inventory=InventoryMutator(audit_sink=audit_sink, clock=clock),
        clock=clock,
    )
    aggregator = SalesAggregator(
        repository,
        low_stock_threshold=store_settings.low_stock_threshold,
        top_products_limit=store_settings.top_products_limit,
        clock=clock,
    )
    service = StoreService(repository, settings=store_settings, aggregator=aggregator)

    logger.info(
        "Store context created",
        environment=settings.app_env,
        products=repository.get_product_count(),
        sales=len(repository.get_sales()),
    )
    return StoreContext(
        settings=settings,
        repository=repository,
        aggregator=aggregator,
        service=service,
    )
