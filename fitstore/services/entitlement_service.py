# fitstore/services/entitlement_service.py
import logging
from datetime import datetime, timezone
from typing import Optional, Union
from uuid import UUID
from ..database.database import DB_ERRORS
from ..errors import PersistenceError
from ..models.download import DenialReason, Entitlement
from ..models.order import Order
from ..utils.ids import parse_uuid

def evaluate_entitlement(order: Optional[Order], now: datetime) -> Entitlement:
    """Decide whether an order may be downloaded at `now`.

    Checks run in a fixed order: completion, expiry, then the download
    allowance. `expires_at` itself is still inside the window.
    """
    if order is None or not order.is_completed:
        return Entitlement.deny(DenialReason.ORDER_NOT_COMPLETED)
    if now > order.expires_at:
        return Entitlement.deny(DenialReason.EXPIRED)
    if order.download_count >= order.max_downloads:
        return Entitlement.deny(DenialReason.LIMIT_EXCEEDED)
    return Entitlement.allow()

class EntitlementService:
    """Entitlement guard for order downloads.

    `check_entitlement` is a read-only answer for the current state.
    `claim_download` is the only writer of `download_count`: it re-applies
    every rule inside a single conditional UPDATE so concurrent callers can
    never push the counter past `max_downloads`.
    """

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def check_entitlement(self, order_id: Union[str, UUID],
                                now: Optional[datetime] = None) -> Entitlement:
        now = now or datetime.now(timezone.utc)
        order = await self._fetch_order(order_id)
        return evaluate_entitlement(order, now)

    async def claim_download(self, order_id: Union[str, UUID],
                             now: Optional[datetime] = None) -> Optional[Order]:
        """Spend one download; the updated order, or None when not entitled"""
        oid = parse_uuid(order_id)
        if oid is None:
            return None
        now = now or datetime.now(timezone.utc)

        try:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    UPDATE orders
                    SET download_count = download_count + 1
                    WHERE id = $1
                    AND order_status = 'completed'
                    AND download_count < max_downloads
                    AND expires_at >= $2
                    RETURNING *
                """, oid, now)
        except DB_ERRORS as e:
            self.logger.error(f"Claiming download for order {oid} failed: {e}", exc_info=True)
            raise PersistenceError("Failed to update download count") from e

        return Order.from_row(row) if row else None

    async def denial_reason(self, order_id: Union[str, UUID],
                            now: Optional[datetime] = None) -> DenialReason:
        """Why a claim did not match, read back after the fact"""
        entitlement = await self.check_entitlement(order_id, now)
        if entitlement.allowed:
            # Lost to a concurrent claim whose effect is no longer visible
            self.logger.warning(f"Claim for order {order_id} missed although entitled")
            return DenialReason.LIMIT_EXCEEDED
        return entitlement.reason

    async def _fetch_order(self, order_id: Union[str, UUID]) -> Optional[Order]:
        oid = parse_uuid(order_id)
        if oid is None:
            return None

        try:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow("SELECT * FROM orders WHERE id = $1", oid)
        except DB_ERRORS as e:
            self.logger.error(f"Fetching order {oid} failed: {e}", exc_info=True)
            raise PersistenceError("Failed to fetch order") from e

        return Order.from_row(row) if row else None
