"""
Storefront Assistant
In-memory e-commerce store with inventory management and sales analytics
"""
from .context import StoreContext, create_context

__version__ = "1.0.0"

__all__ = ["StoreContext", "create_context", "__version__"]
