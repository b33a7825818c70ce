# fitstore/services/order_service.py
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple, Union
from uuid import UUID
from ..config import Config
from ..database.database import DB_ERRORS
from ..errors import OrderNotFound, PersistenceError, ValidationError
from ..models.order import Order, OrderCreate, OrderStatus
from ..utils.ids import parse_uuid
from ..utils.validators import parse_model

# Order columns plus the product fields shown alongside an order
ORDER_WITH_PRODUCT = """
    SELECT o.*,
        p.title AS product_title,
        p.description AS product_description,
        p.file_name AS product_file_name,
        p.download_password AS product_download_password
    FROM orders o
    JOIN digital_products p ON p.id = o.product_id
"""

class OrderService:
    """Order ledger: records purchases and serves them back to buyers"""

    def __init__(self, db, product_service,
                 max_downloads: int = Config.MAX_DOWNLOADS,
                 expiry_days: int = Config.DOWNLOAD_EXPIRY_DAYS):
        self.db = db
        self.product_service = product_service
        self.max_downloads = max_downloads
        self.expiry_window = timedelta(days=expiry_days)
        self.logger = logging.getLogger(__name__)

    async def create_order(self, product_id: Union[str, UUID], customer_name: str,
                           customer_email: str,
                           idempotency_key: Optional[str] = None,
                           now: Optional[datetime] = None) -> Tuple[Order, bool]:
        """Record a purchase; returns the order and whether it is new.

        There is no payment step, so the order is completed immediately. The
        download allowance and expiry are fixed here and never change.
        A repeated idempotency key returns the order created the first time.
        """
        fields = {
            'product_id': product_id,
            'customer_name': customer_name,
            'customer_email': customer_email,
        }
        data = parse_model(OrderCreate, {k: v for k, v in fields.items() if v is not None})
        if idempotency_key is not None:
            idempotency_key = idempotency_key.strip()
            if not idempotency_key or len(idempotency_key) > 255:
                raise ValidationError("Invalid idempotency key")

            # A retry returns the stored order even if the product was taken off sale since
            existing = await self._find_by_idempotency_key(idempotency_key)
            if existing is not None:
                return self._replay(existing, data, idempotency_key), False

        # Raises ProductNotFound for unknown and deactivated products
        product = await self.product_service.get_product(data.product_id)

        now = now or datetime.now(timezone.utc)
        expires_at = now + self.expiry_window

        try:
            async with self.db.pool.acquire() as conn:
                order_id = await conn.fetchval("""
                    INSERT INTO orders (
                        product_id, customer_name, customer_email, order_status,
                        download_count, max_downloads, expires_at,
                        idempotency_key, created_at
                    ) VALUES ($1, $2, $3, $4, 0, $5, $6, $7, $8)
                    ON CONFLICT (idempotency_key) DO NOTHING
                    RETURNING id
                """,
                    product.id,
                    data.customer_name,
                    data.customer_email,
                    OrderStatus.COMPLETED.value,
                    self.max_downloads,
                    expires_at,
                    idempotency_key,
                    now
                )
        except DB_ERRORS as e:
            self.logger.error(f"Creating order for product {product.id} failed: {e}",
                              exc_info=True)
            raise PersistenceError("Failed to create order") from e

        if order_id is None:
            # Lost the insert race to a concurrent submission with the same key
            existing = await self._find_by_idempotency_key(idempotency_key)
            if existing is None:
                raise PersistenceError("Failed to create order")
            return self._replay(existing, data, idempotency_key), False

        order = await self.get_order(order_id)
        self.logger.info(
            f"Order {order.id} created for product {product.id} "
            f"({order.max_downloads} downloads until {order.expires_at.isoformat()})"
        )
        return order, True

    async def get_order(self, order_id: Union[str, UUID]) -> Order:
        """A single order with its product metadata"""
        oid = _parse_order_id(order_id)

        try:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow(ORDER_WITH_PRODUCT + " WHERE o.id = $1", oid)
        except DB_ERRORS as e:
            self.logger.error(f"Fetching order {oid} failed: {e}", exc_info=True)
            raise PersistenceError("Failed to fetch order") from e

        if not row:
            raise OrderNotFound()
        return Order.from_row(row)

    async def list_orders_for_email(self, email: str) -> List[Order]:
        """Every order placed with an email address, newest first"""
        email = (email or '').strip()
        if not email:
            raise ValidationError("Email parameter required")

        try:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch(
                    ORDER_WITH_PRODUCT + """
                    WHERE lower(o.customer_email) = lower($1)
                    ORDER BY o.created_at DESC
                    """,
                    email
                )
        except DB_ERRORS as e:
            self.logger.error(f"Fetching orders failed: {e}", exc_info=True)
            raise PersistenceError("Failed to fetch orders") from e

        return [Order.from_row(row) for row in rows]

    async def _find_by_idempotency_key(self, idempotency_key: str) -> Optional[Order]:
        try:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow(
                    ORDER_WITH_PRODUCT + " WHERE o.idempotency_key = $1",
                    idempotency_key
                )
        except DB_ERRORS as e:
            self.logger.error(f"Fetching order by idempotency key failed: {e}", exc_info=True)
            raise PersistenceError("Failed to fetch order") from e

        return Order.from_row(row) if row else None

    def _replay(self, existing: Order, data: OrderCreate, idempotency_key: str) -> Order:
        if (existing.product_id != data.product_id
                or existing.customer_email.lower() != data.customer_email.lower()
                or existing.customer_name != data.customer_name):
            raise ValidationError("Idempotency key was already used for a different order")
        self.logger.info(f"Replayed order {existing.id} for idempotency key {idempotency_key}")
        return existing

def _parse_order_id(order_id: Union[str, UUID]) -> UUID:
    oid = parse_uuid(order_id)
    if oid is None:
        raise OrderNotFound()
    return oid
