"""
Unit Tests - Seed Data, Generators and Snapshots
"""
from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from storefront.data.generators import DataGenerator, ProductGenerator, SaleGenerator, sample_snapshot
from storefront.data.snapshots import load_snapshot, save_snapshot


class TestSampleData:
    """Tests for the built-in sample store"""

    def test_sample_contents(self):
        """Test six products and five sales with derived totals"""
        now = datetime(2025, 6, 18, 12, 0)

        snapshot = sample_snapshot(now)

        assert [p.sku for p in snapshot.products] == ["BTS-001", "LJ-002", "WH-003", "RS-004", "WS-005", "CJ-006"]
        assert len(snapshot.sales) == 5
        assert all(s.total_cents == s.unit_price_cents * s.quantity for s in snapshot.sales)
        assert snapshot.sales[3].timestamp == now - timedelta(hours=2)

    def test_samples_are_fresh_objects(self):
        """Test each call returns independent products"""
        first = sample_snapshot()
        second = sample_snapshot()
        first.products[0].stock = 0

        assert second.products[0].stock == 25


class TestGenerators:
    """Tests for Faker-driven generators"""

    def test_products_are_valid_and_unique(self):
        """Test generated products have positive prices and distinct SKUs"""
        products = ProductGenerator(seed=7).generate(25)

        assert len(products) == 25
        assert all(p.price > 0 for p in products)
        assert len({p.sku for p in products}) == 25

    def test_sales_fall_inside_window(self, make_product):
        """Test generated sales reference the catalogue and are sorted by time"""
        catalogue = [make_product("Mug", stock=5), make_product("Bowl", stock=5)]
        end = datetime(2025, 6, 18)
        start = end - timedelta(days=10)

        sales = SaleGenerator(catalogue, seed=3).generate(30, start, end)

        ids = {p.id for p in catalogue}
        assert all(s.product_id in ids for s in sales)
        assert all(start <= s.timestamp <= end for s in sales)
        assert [s.timestamp for s in sales] == sorted(s.timestamp for s in sales)

    def test_sale_generator_needs_products(self):
        """Test an empty catalogue is rejected"""
        with pytest.raises(ValueError):
            SaleGenerator([])

    def test_populate_goes_through_repository(self, repository):
        """Test population adds products and sales and keeps stock non-negative"""
        snapshot = DataGenerator(seed=1).populate(repository, n_products=8, n_sales=40)

        assert len(snapshot.products) == 8
        assert len(snapshot.sales) == 40
        assert all(p.stock >= 0 for p in repository.get_all_products())


class TestSnapshots:
    """Tests for JSON snapshot files"""

    def test_save_and_load(self, seeded_repository, tmp_path):
        """Test a saved snapshot loads back identical"""
        snapshot = seeded_repository.export_data()

        path = save_snapshot(snapshot, tmp_path / "nested" / "store.json")

        assert path.exists()
        assert load_snapshot(path) == snapshot

    def test_load_invalid_file(self, tmp_path):
        """Test malformed content raises a validation error"""
        path = tmp_path / "bad.json"
        path.write_text('{"products": [{"id": 1}]}', encoding="utf-8")

        with pytest.raises(ValidationError):
            load_snapshot(path)
