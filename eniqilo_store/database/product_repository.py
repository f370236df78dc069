# eniqilo_store/database/product_repository.py
from typing import List, Optional, Sequence
import asyncpg
from ..errors import StorageError
from ..models.product import Product
from .query_compiler import CompiledQuery

PRODUCT_COLUMNS = """
    id, created_at, name, sku, category, image_urls, notes,
    price, stock, location, is_available
"""

def _affected_rows(status: str) -> int:
    # asyncpg returns command tags such as "UPDATE 1" / "DELETE 0"
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError) as e:
        raise StorageError(f"unexpected command status: {status!r}") from e

class ProductRepository:
    """Product storage port.

    Stateless; every method runs on the connection it is handed, so the
    caller decides the transaction boundary.
    """

    async def read_products_by_ids(self, conn: asyncpg.Connection, ids: Sequence[str],
                                   for_update: bool = False) -> List[Product]:
        """Rows for the given ids, ordered by id; missing ids are simply absent"""
        query = f"""
            SELECT {PRODUCT_COLUMNS}
            FROM products
            WHERE id = ANY($1::varchar[])
            ORDER BY id
        """
        if for_update:
            query += " FOR UPDATE"
        rows = await conn.fetch(query, list(ids))
        return [Product.model_validate(dict(row)) for row in rows]

    async def decrement_stock(self, conn: asyncpg.Connection, product_id: str, quantity: int) -> int:
        """Take quantity off stock; returns 0 when stock would go negative"""
        result = await conn.execute("""
            UPDATE products
            SET stock = stock - $1
            WHERE id = $2 AND stock >= $1
        """, quantity, product_id)
        return _affected_rows(result)

    async def query_products(self, conn: asyncpg.Connection, compiled: CompiledQuery,
                             available_only: bool = True) -> List[Product]:
        """Products matching a compiled filter.

        Customer listings only see available products; staff listings pass
        available_only=False to see every row.
        """
        base_condition = "is_available = true" if available_only else "1=1"
        query = f"""
            SELECT {PRODUCT_COLUMNS}
            FROM products
            WHERE {base_condition}
        """
        query += compiled.render()
        rows = await conn.fetch(query, *compiled.values)
        return [Product.model_validate(dict(row)) for row in rows]

    async def create_product(self, conn: asyncpg.Connection, product: Product) -> None:
        await conn.execute("""
            INSERT INTO products (
                id, created_at, name, sku, category, image_urls,
                notes, price, stock, location, is_available
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
        """,
            product.id,
            product.created_at,
            product.name,
            product.sku,
            product.category.value,
            product.image_urls,
            product.notes,
            product.price,
            product.stock,
            product.location,
            product.is_available
        )

    async def get_product(self, conn: asyncpg.Connection, product_id: str) -> Optional[Product]:
        row = await conn.fetchrow(f"""
            SELECT {PRODUCT_COLUMNS}
            FROM products
            WHERE id = $1
        """, product_id)
        return Product.model_validate(dict(row)) if row else None

    async def update_product(self, conn: asyncpg.Connection, product: Product) -> int:
        """Overwrite every writable column; returns affected row count"""
        result = await conn.execute("""
            UPDATE products
            SET name = $2,
                sku = $3,
                category = $4,
                image_urls = $5,
                notes = $6,
                price = $7,
                stock = $8,
                location = $9,
                is_available = $10
            WHERE id = $1
        """,
            product.id,
            product.name,
            product.sku,
            product.category.value,
            product.image_urls,
            product.notes,
            product.price,
            product.stock,
            product.location,
            product.is_available
        )
        return _affected_rows(result)

    async def delete_product(self, conn: asyncpg.Connection, product_id: str) -> int:
        result = await conn.execute("""
            DELETE FROM products
            WHERE id = $1
        """, product_id)
        return _affected_rows(result)
