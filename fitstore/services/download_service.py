# fitstore/services/download_service.py
import logging
from datetime import datetime, timezone
from typing import Optional, Tuple, Union
from uuid import UUID
from ..config import Config
from ..database.database import DB_ERRORS
from ..errors import EntitlementDenied, PersistenceError
from ..models.download import DenialReason, DownloadResult
from ..models.order import Order
from ..utils.ids import parse_uuid
from .entitlement_service import evaluate_entitlement

class DownloadService:
    """Serves purchased files while enforcing each order's entitlement.

    A download is spent on attempt: the file is read into memory first, then
    one download is claimed atomically, then the audit row is written. A file
    that cannot be read therefore never costs the buyer a download, but a
    client that drops the connection after the claim has used one.
    """

    def __init__(self, db, entitlement_service, file_service, audit_service,
                 content_type: str = Config.DOWNLOAD_CONTENT_TYPE):
        self.db = db
        self.entitlement_service = entitlement_service
        self.file_service = file_service
        self.audit_service = audit_service
        self.content_type = content_type
        self.logger = logging.getLogger(__name__)

    async def download(self, order_id: Union[str, UUID], requester_ip: str,
                       requester_user_agent: str,
                       now: Optional[datetime] = None) -> DownloadResult:
        now = now or datetime.now(timezone.utc)
        oid = parse_uuid(order_id)

        found = await self._get_order_file(oid) if oid else None
        order, file_path, file_name = found or (None, None, None)

        # Early rejection without touching storage
        entitlement = evaluate_entitlement(order, now)
        if not entitlement.allowed:
            self._log_denial(order_id, entitlement.reason, requester_ip)
            raise EntitlementDenied(entitlement.reason)

        content = await self.file_service.read_file(file_path)

        claimed = await self.entitlement_service.claim_download(oid, now)
        if claimed is None:
            reason = await self.entitlement_service.denial_reason(oid, now)
            self._log_denial(order_id, reason, requester_ip)
            raise EntitlementDenied(reason)

        await self.audit_service.record(oid, requester_ip, requester_user_agent)

        self.logger.info(
            f"Order {oid} downloaded {file_name} "
            f"({claimed.download_count}/{claimed.max_downloads}) from {requester_ip}"
        )
        return DownloadResult(
            order_id=oid,
            file_name=file_name,
            content=content,
            content_type=self.content_type,
            download_count=claimed.download_count,
            max_downloads=claimed.max_downloads
        )

    async def _get_order_file(self, order_id: UUID) -> Optional[Tuple[Order, str, str]]:
        """The order and the storage reference of its product file"""
        try:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    SELECT o.*,
                        p.file_path AS product_file_path,
                        p.file_name AS product_file_name
                    FROM orders o
                    JOIN digital_products p ON p.id = o.product_id
                    WHERE o.id = $1
                """, order_id)
        except DB_ERRORS as e:
            self.logger.error(f"Fetching order {order_id} failed: {e}", exc_info=True)
            raise PersistenceError("Failed to fetch order") from e

        if not row:
            return None

        data = dict(row)
        file_path = data.pop('product_file_path')
        file_name = data.pop('product_file_name')
        return Order.from_row(data), file_path, file_name

    def _log_denial(self, order_id, reason: DenialReason, requester_ip: str):
        self.logger.info(f"Download of order {order_id} denied ({reason.value}) for {requester_ip}")
