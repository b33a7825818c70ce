# fitstore/models/download.py
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID
from pydantic import BaseModel
from .base import StoreModel

class DenialReason(str, Enum):
    ORDER_NOT_COMPLETED = "order_not_completed"
    EXPIRED = "expired"
    LIMIT_EXCEEDED = "limit_exceeded"

class Entitlement(BaseModel):
    """Outcome of an entitlement check; never persisted"""
    allowed: bool
    reason: Optional[DenialReason] = None

    @classmethod
    def allow(cls) -> "Entitlement":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenialReason) -> "Entitlement":
        return cls(allowed=False, reason=reason)

class DownloadLogEntry(StoreModel):
    """Audit row written for every successful download"""
    id: UUID
    order_id: UUID
    ip_address: str
    user_agent: str
    created_at: datetime

class DownloadResult(BaseModel):
    """File bytes handed back to the caller after the download was claimed"""
    order_id: UUID
    file_name: str
    content: bytes
    content_type: str
    download_count: int
    max_downloads: int
