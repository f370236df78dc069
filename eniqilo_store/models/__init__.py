"""Data models"""
from .product import Product, ProductIn, ProductCategory, PRODUCT_CATEGORIES
from .filter import FilterCriteria, DEFAULT_LIMIT, DEFAULT_OFFSET
from .checkout import (
    CheckoutLine,
    CheckoutResult,
    CheckoutError,
    CheckoutErrorKind,
    CheckoutState,
    StockShortfall
)

__all__ = [
    'Product',
    'ProductIn',
    'ProductCategory',
    'PRODUCT_CATEGORIES',
    'FilterCriteria',
    'DEFAULT_LIMIT',
    'DEFAULT_OFFSET',
    'CheckoutLine',
    'CheckoutResult',
    'CheckoutError',
    'CheckoutErrorKind',
    'CheckoutState',
    'StockShortfall'
]
