# eniqilo_store/services/product_service.py
import logging
from typing import List, Optional
from ..database.product_repository import ProductRepository
from ..database.query_compiler import compile_filter
from ..models.filter import FilterCriteria
from ..models.product import Product, ProductIn

class ProductService:
    def __init__(self, db, repository: Optional[ProductRepository] = None):
        self.db = db
        self.repository = repository or ProductRepository()
        self.logger = logging.getLogger(__name__)

    async def search_products(self, criteria: FilterCriteria) -> List[Product]:
        """List available products matching the criteria"""
        compiled = compile_filter(criteria)
        async with self.db.connection() as conn:
            return await self.repository.query_products(conn, compiled)

    async def list_products(self, criteria: FilterCriteria) -> List[Product]:
        """Staff listing: same filters, unavailable products included"""
        compiled = compile_filter(criteria)
        async with self.db.connection() as conn:
            return await self.repository.query_products(conn, compiled, available_only=False)

    async def create_product(self, product_in: ProductIn) -> Product:
        """Add a new product"""
        product = product_in.new_product()
        async with self.db.transaction() as conn:
            await self.repository.create_product(conn, product)
        self.logger.info(f"Product {product.id} created")
        return product

    async def get_product(self, product_id: str) -> Optional[Product]:
        async with self.db.connection() as conn:
            return await self.repository.get_product(conn, product_id)

    async def update_product(self, product_id: str, product_in: ProductIn) -> Optional[Product]:
        """Replace a product's writable fields; None when the product is absent"""
        async with self.db.transaction() as conn:
            current = await self.repository.get_product(conn, product_id)
            if current is None:
                return None

            product = Product(
                id=current.id,
                created_at=current.created_at,
                **product_in.model_dump()
            )
            await self.repository.update_product(conn, product)

        self.logger.info(f"Product {product_id} updated")
        return product

    async def delete_product(self, product_id: str) -> bool:
        async with self.db.transaction() as conn:
            deleted = await self.repository.delete_product(conn, product_id)
        if deleted:
            self.logger.info(f"Product {product_id} deleted")
        return deleted == 1
