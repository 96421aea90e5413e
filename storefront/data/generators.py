"""
Seed and Synthetic Data

Provides:
- The fixed sample catalogue and sale log the store starts with
- Faker-driven product and sale generators for demos and load testing
- A populate helper that pushes generated data through a repository
"""

import random
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

import structlog
from faker import Faker

from storefront.data.models import (
    Address,
    Dimensions,
    Product,
    ProductCreate,
    Sale,
    SaleCreate,
    SaleStatus,
    StoreSnapshot,
)
from storefront.data.money import to_cents

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = [
    ("Clothing", ["Shirts", "Pants", "Dresses", "Jackets"]),
    ("Footwear", ["Running", "Casual", "Boots"]),
    ("Electronics", ["Headphones", "Speakers", "Chargers"]),
    ("Accessories", ["Scarves", "Hats", "Bags"]),
    ("Home", ["Kitchen", "Bedding", "Decor"]),
]

COLLECTIONS = [
    "Summer Collection",
    "Winter Collection",
    "Athletic Collection",
    "Tech Essentials",
    "Essentials",
]

PAYMENT_METHODS = ["credit_card", "debit_card", "paypal", "apple_pay", "google_pay"]

SALE_STATUSES = [
    (SaleStatus.PENDING, 0.10),
    (SaleStatus.PROCESSING, 0.10),
    (SaleStatus.SHIPPED, 0.15),
    (SaleStatus.DELIVERED, 0.60),
    (SaleStatus.CANCELLED, 0.05),
]


# =============================================================================
# SAMPLE DATA
# =============================================================================

def _sample_product(
    id: str,
    name: str,
    description: str,
    price: str,
    category: str,
    collection: str,
    stock: int,
    tags: List[str],
    sku: str,
    images: List[str],
    weight: float,
    dimensions: tuple,
    created_at: datetime,
    updated_at: datetime,
) -> Product:
    length, width, height = dimensions
    return Product(
        id=id,
        name=name,
        description=description,
        price_cents=to_cents(price),
        category=category,
        collection=collection,
        stock=stock,
        tags=tags,
        sku=sku,
        images=images,
        weight=weight,
        dimensions=Dimensions(length=length, width=width, height=height),
        created_at=created_at,
        updated_at=updated_at,
    )


def sample_products() -> List[Product]:
    """The six products the store is seeded with"""
    return [
        _sample_product(
            "12345", "Blue T-Shirt", "Comfortable cotton t-shirt in vibrant blue color",
            "19.99", "Clothing", "Summer Collection", 25,
            ["casual", "cotton", "blue", "t-shirt"], "BTS-001",
            ["blue-tshirt-1.jpg", "blue-tshirt-2.jpg"], 0.2, (70, 50, 1),
            datetime(2024, 1, 15), datetime(2024, 6, 1),
        ),
        _sample_product(
            "12346", "Leather Jacket", "Premium genuine leather jacket with modern fit",
            "249.99", "Clothing", "Winter Collection", 8,
            ["leather", "jacket", "premium", "winter"], "LJ-002",
            ["leather-jacket-1.jpg"], 1.5, (65, 55, 3),
            datetime(2024, 2, 1), datetime(2024, 5, 15),
        ),
        _sample_product(
            "12347", "Wireless Headphones", "High-quality wireless headphones with noise cancellation",
            "199.99", "Electronics", "Tech Essentials", 0,
            ["wireless", "headphones", "audio", "noise-cancellation"], "WH-003",
            ["wireless-headphones-1.jpg", "wireless-headphones-2.jpg"], 0.3, (20, 18, 8),
            datetime(2024, 3, 10), datetime(2024, 6, 5),
        ),
        _sample_product(
            "12348", "Running Shoes", "Lightweight running shoes with superior comfort",
            "129.99", "Footwear", "Athletic Collection", 30,
            ["running", "shoes", "athletic", "comfortable"], "RS-004",
            ["running-shoes-1.jpg"], 0.8, (30, 15, 12),
            datetime(2024, 1, 20), datetime(2024, 5, 20),
        ),
        _sample_product(
            "12349", "Winter Scarf", "Warm wool scarf perfect for cold weather",
            "34.99", "Accessories", "Winter Collection", 5,
            ["scarf", "wool", "winter", "warm"], "WS-005",
            ["winter-scarf-1.jpg"], 0.15, (180, 30, 1),
            datetime(2024, 2, 15), datetime(2024, 5, 25),
        ),
        _sample_product(
            "12350", "Classic Jeans", "Timeless denim jeans with perfect fit",
            "79.99", "Clothing", "Essentials", 40,
            ["jeans", "denim", "classic", "essentials"], "CJ-006",
            ["classic-jeans-1.jpg"], 0.6, (110, 40, 2),
            datetime(2024, 1, 10), datetime(2024, 5, 30),
        ),
    ]


def sample_sales(now: datetime) -> List[Sale]:
    """Five sales placed relative to ``now`` (yesterday, two hours ago, last week)"""
    rows = [
        ("sale-001", "12345", "Blue T-Shirt", 3, "19.99", "john@example.com", "John Doe",
         SaleStatus.DELIVERED, "credit_card", timedelta(days=1)),
        ("sale-002", "12348", "Running Shoes", 1, "129.99", "sarah@example.com", "Sarah Johnson",
         SaleStatus.SHIPPED, "paypal", timedelta(days=1)),
        ("sale-003", "12349", "Winter Scarf", 2, "34.99", "mike@example.com", "Mike Wilson",
         SaleStatus.PROCESSING, "credit_card", timedelta(days=1)),
        ("sale-004", "12346", "Leather Jacket", 1, "249.99", "emma@example.com", "Emma Brown",
         SaleStatus.PENDING, "credit_card", timedelta(hours=2)),
        ("sale-005", "12345", "Blue T-Shirt", 5, "19.99", "alex@example.com", "Alex Garcia",
         SaleStatus.DELIVERED, "debit_card", timedelta(days=7)),
    ]

    sales = []
    for sale_id, product_id, product_name, quantity, price, email, name, status, method, age in rows:
        unit_price_cents = to_cents(price)
        sales.append(Sale(
            id=sale_id,
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            unit_price_cents=unit_price_cents,
            total_cents=unit_price_cents * quantity,
            customer_email=email,
            customer_name=name,
            status=status,
            payment_method=method,
            timestamp=now - age,
        ))
    return sales


def sample_snapshot(now: Optional[datetime] = None) -> StoreSnapshot:
    """Sample catalogue and sale log as a snapshot ready for ``StoreRepository``"""
    return StoreSnapshot(
        products=sample_products(),
        sales=sample_sales(now or datetime.now()),
    )


# =============================================================================
# GENERATORS
# =============================================================================

class ProductGenerator:
    """Generate realistic catalogue entries"""

    def __init__(self, seed: Optional[int] = None):
        self.fake = Faker()
        self.random = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    def generate_one(self) -> ProductCreate:
        category, subcategories = self.random.choice(CATEGORIES)
        subcategory = self.random.choice(subcategories)

        # Price based on category
        base_price = {
            "Clothing": self.random.uniform(15, 300),
            "Footwear": self.random.uniform(40, 250),
            "Electronics": self.random.uniform(20, 800),
            "Accessories": self.random.uniform(10, 120),
            "Home": self.random.uniform(10, 400),
        }[category]

        return ProductCreate(
            name=f"{self.fake.unique.word().title()} {subcategory}",
            description=self.fake.sentence(nb_words=12),
            price=Decimal(str(round(base_price, 2))),
            category=category,
            subcategory=subcategory,
            collection=self.random.choice(COLLECTIONS),
            stock=self.random.randint(0, 200),
            tags=[subcategory.lower()] + self.fake.words(nb=2, unique=True),
            sku=f"SKU-{self.fake.unique.random_number(digits=8, fix_len=True)}",
            weight=round(self.random.uniform(0.1, 5.0), 2),
        )

    def generate(self, n: int = 20) -> List[ProductCreate]:
        """Generate n products"""
        return [self.generate_one() for _ in range(n)]


class SaleGenerator:
    """Generate sales against an existing catalogue"""

    def __init__(self, products: List[Product], seed: Optional[int] = None):
        if not products:
            raise ValueError("SaleGenerator needs at least one product")
        self.products = products
        self.fake = Faker()
        self.random = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    def generate_one(self, start: datetime, end: datetime) -> SaleCreate:
        product = self.random.choice(self.products)
        status = self.random.choices(
            [s[0] for s in SALE_STATUSES],
            weights=[s[1] for s in SALE_STATUSES],
        )[0]
        # Most orders are for one or two units
        quantity = self.random.choices([1, 2, 3, 4, 5], weights=[0.60, 0.25, 0.10, 0.03, 0.02])[0]

        return SaleCreate(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=Decimal(product.price_cents) / 100,
            customer_email=self.fake.email(),
            customer_name=self.fake.name(),
            shipping_address=Address(
                street=self.fake.street_address(),
                city=self.fake.city(),
                state=self.fake.state_abbr(),
                zip_code=self.fake.postcode(),
                country="US",
            ),
            status=status,
            payment_method=self.random.choice(PAYMENT_METHODS),
            timestamp=self.fake.date_time_between(start_date=start, end_date=end),
        )

    def generate(
        self,
        n: int = 50,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[SaleCreate]:
        """Generate n sales, oldest first"""
        end_date = end_date or datetime.now()
        start_date = start_date or end_date - timedelta(days=30)
        sales = [self.generate_one(start_date, end_date) for _ in range(n)]
        return sorted(sales, key=lambda s: s.timestamp)


class DataGenerator:
    """Orchestrates generation into a repository"""

    def __init__(self, seed: Optional[int] = 42):
        self.seed = seed

    def populate(
        self,
        repository,
        n_products: int = 20,
        n_sales: int = 50,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> StoreSnapshot:
        """
        Add generated products, then record generated sales against the whole
        catalogue. Sales go through ``add_sale`` so stock is decremented.

        Returns:
            StoreSnapshot: Store contents after population
        """
        logger.info("Generating store data", products=n_products, sales=n_sales)

        for data in ProductGenerator(seed=self.seed).generate(n_products):
            repository.add_product(data)

        catalogue = repository.get_all_products()
        if n_sales and catalogue:
            generator = SaleGenerator(catalogue, seed=self.seed)
            for data in generator.generate(n_sales, start_date, end_date):
                repository.add_sale(data)

        snapshot = repository.export_data()
        logger.info(
            "Store data generated",
            products=len(snapshot.products),
            sales=len(snapshot.sales),
        )
        return snapshot
