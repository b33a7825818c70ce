# fitstore/services/product_service.py
import logging
from typing import List, Union
from uuid import UUID
from ..database.database import DB_ERRORS
from ..errors import PersistenceError, ProductNotFound
from ..models.product import Product, ProductCreate, ProductUpdate
from ..utils.ids import parse_uuid

class ProductService:
    """Catalog reads plus the admin operations that maintain it"""

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def list_active_products(self) -> List[Product]:
        """Purchasable products, newest first"""
        try:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch("""
                    SELECT *
                    FROM digital_products
                    WHERE is_active = true
                    ORDER BY created_at DESC
                """)
        except DB_ERRORS as e:
            self.logger.error(f"Fetching products failed: {e}", exc_info=True)
            raise PersistenceError("Failed to fetch products") from e

        return [Product.model_validate(dict(row)) for row in rows]

    async def get_product(self, product_id: Union[str, UUID],
                          include_inactive: bool = False) -> Product:
        """A single product; inactive ones only when asked for explicitly"""
        pid = parse_uuid(product_id)
        if pid is None:
            raise ProductNotFound()

        try:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    SELECT *
                    FROM digital_products
                    WHERE id = $1 AND (is_active = true OR $2)
                """, pid, include_inactive)
        except DB_ERRORS as e:
            self.logger.error(f"Fetching product {pid} failed: {e}", exc_info=True)
            raise PersistenceError("Failed to fetch product") from e

        if not row:
            raise ProductNotFound()
        return Product.model_validate(dict(row))

    async def list_products(self) -> List[Product]:
        """Every product including deactivated ones"""
        try:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch("""
                    SELECT * FROM digital_products ORDER BY created_at DESC
                """)
        except DB_ERRORS as e:
            self.logger.error(f"Fetching products failed: {e}", exc_info=True)
            raise PersistenceError("Failed to fetch products") from e

        return [Product.model_validate(dict(row)) for row in rows]

    async def add_product(self, data: ProductCreate) -> Product:
        """Create a product"""
        try:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO digital_products (
                        title, description, price, file_path,
                        file_name, download_password, is_active
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7)
                    RETURNING *
                """,
                    data.title,
                    data.description,
                    data.price,
                    data.file_path,
                    data.file_name,
                    data.download_password,
                    data.is_active
                )
        except DB_ERRORS as e:
            self.logger.error(f"Creating product failed: {e}", exc_info=True)
            raise PersistenceError("Failed to create product") from e

        product = Product.model_validate(dict(row))
        self.logger.info(f"Product {product.id} created: {product.title}")
        return product

    async def update_product(self, product_id: Union[str, UUID],
                             data: ProductUpdate) -> Product:
        """Apply the fields that were actually sent"""
        pid = parse_uuid(product_id)
        if pid is None:
            raise ProductNotFound()

        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return await self.get_product(pid, include_inactive=True)

        # Column names come from ProductUpdate's fields only
        assignments = []
        params = []
        param_index = 1
        for column, value in changes.items():
            assignments.append(f"{column} = ${param_index}")
            params.append(value)
            param_index += 1

        query = f"""
            UPDATE digital_products
            SET {', '.join(assignments)},
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ${param_index}
            RETURNING *
        """
        params.append(pid)

        try:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow(query, *params)
        except DB_ERRORS as e:
            self.logger.error(f"Updating product {pid} failed: {e}", exc_info=True)
            raise PersistenceError("Failed to update product") from e

        if not row:
            raise ProductNotFound()

        self.logger.info(f"Product {pid} updated: {', '.join(changes)}")
        return Product.model_validate(dict(row))

    async def deactivate_product(self, product_id: Union[str, UUID]) -> Product:
        """Soft delete; existing orders keep their product"""
        return await self.update_product(product_id, ProductUpdate(is_active=False))

    async def set_product_file(self, product_id: Union[str, UUID], file_path: str,
                               file_name: str) -> Product:
        return await self.update_product(
            product_id,
            ProductUpdate(file_path=file_path, file_name=file_name)
        )

    async def file_in_use(self, file_path: str) -> bool:
        """Whether any product still points at a stored file"""
        try:
            async with self.db.pool.acquire() as conn:
                return await conn.fetchval("""
                    SELECT EXISTS (
                        SELECT 1 FROM digital_products WHERE file_path = $1
                    )
                """, file_path)
        except DB_ERRORS as e:
            self.logger.error(f"Checking references to {file_path} failed: {e}", exc_info=True)
            raise PersistenceError("Failed to check file references") from e
