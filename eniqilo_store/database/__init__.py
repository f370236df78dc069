"""Database access"""
from .database import Database
from .product_repository import ProductRepository
from .query_compiler import CompiledQuery, compile_filter

__all__ = [
    'Database',
    'ProductRepository',
    'CompiledQuery',
    'compile_filter'
]
