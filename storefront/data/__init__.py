"""
Domain Models and Seed Data
"""
from .generators import DataGenerator, ProductGenerator, SaleGenerator, sample_snapshot
from .snapshots import load_snapshot, save_snapshot

__all__ = [
    "DataGenerator",
    "ProductGenerator",
    "SaleGenerator",
    "sample_snapshot",
    "load_snapshot",
    "save_snapshot",
]
