"""
Sales Analytics Module
"""
from .aggregator import SalesAggregator
from .periods import ReportType, SalesPeriod, TimeGrouping
from .reports import RevenueReport, SalesDataReport, SalesReporter

__all__ = [
    "SalesAggregator",
    "SalesReporter",
    "SalesPeriod",
    "ReportType",
    "TimeGrouping",
    "SalesDataReport",
    "RevenueReport",
]
