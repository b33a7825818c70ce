# fitstore/services/audit_service.py
import logging
from typing import List, Optional, Union
from uuid import UUID
from ..database.database import DB_ERRORS
from ..errors import OrderNotFound, PersistenceError
from ..models.download import DownloadLogEntry
from ..utils.ids import parse_uuid

class AuditService:
    """Append-only download log"""

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def record(self, order_id: UUID, ip_address: str,
                     user_agent: str) -> Optional[DownloadLogEntry]:
        """Log a delivered download; failures are logged, never raised"""
        try:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO download_logs (order_id, ip_address, user_agent)
                    VALUES ($1, $2, $3)
                    RETURNING *
                """, order_id, ip_address[:64], user_agent)
        except DB_ERRORS as e:
            self.logger.warning(f"Writing download log for order {order_id} failed: {e}",
                                exc_info=True)
            return None

        return DownloadLogEntry.model_validate(dict(row))

    async def list_for_order(self, order_id: Union[str, UUID]) -> List[DownloadLogEntry]:
        """Download history of an order, oldest first"""
        oid = parse_uuid(order_id)
        if oid is None:
            raise OrderNotFound()

        try:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch("""
                    SELECT *
                    FROM download_logs
                    WHERE order_id = $1
                    ORDER BY created_at, id
                """, oid)
        except DB_ERRORS as e:
            self.logger.error(f"Fetching download logs for order {oid} failed: {e}",
                              exc_info=True)
            raise PersistenceError("Failed to fetch download logs") from e

        return [DownloadLogEntry.model_validate(dict(row)) for row in rows]
