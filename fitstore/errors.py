# fitstore/errors.py
from typing import Optional
from .models.download import DenialReason


class StoreError(Exception):
    """Base error; `message` is safe to show to clients"""
    status: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(StoreError):
    status = 400
    message = "Invalid request"


class Unauthorized(StoreError):
    status = 401
    message = "Admin access required"


class NotFoundError(StoreError):
    status = 404
    message = "Not found"


class ProductNotFound(NotFoundError):
    message = "Product not found or inactive"


class OrderNotFound(NotFoundError):
    message = "Order not found"


class FileMissing(NotFoundError):
    message = "File not found"


class PersistenceError(StoreError):
    """Database unreachable or a statement failed"""


class StorageError(StoreError):
    """File storage failed for a reason other than a missing file"""


class EntitlementDenied(StoreError):
    """A download was refused; an expected outcome, not a fault"""

    STATUS = {
        DenialReason.ORDER_NOT_COMPLETED: 404,
        DenialReason.EXPIRED: 403,
        DenialReason.LIMIT_EXCEEDED: 403,
    }
    MESSAGES = {
        DenialReason.ORDER_NOT_COMPLETED: "Order not found or not completed",
        DenialReason.EXPIRED: "Download link has expired",
        DenialReason.LIMIT_EXCEEDED: "Download limit exceeded",
    }

    def __init__(self, reason: DenialReason):
        self.reason = reason
        self.status = self.STATUS[reason]
        super().__init__(self.MESSAGES[reason])
