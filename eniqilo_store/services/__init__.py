"""Services"""
from .product_service import ProductService
from .inventory_service import InventoryService

__all__ = [
    'ProductService',
    'InventoryService'
]
