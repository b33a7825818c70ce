# fitstore/models/order.py
from datetime import datetime
from enum import Enum
from typing import Optional, Any, Dict, Mapping
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from .base import StoreModel

class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

class OrderCreate(BaseModel):
    """Checkout payload"""
    model_config = ConfigDict(str_strip_whitespace=True)

    product_id: UUID
    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: EmailStr

class ProductSummary(BaseModel):
    """Product fields embedded in an order for display"""
    title: str
    description: Optional[str] = None
    file_name: str
    download_password: Optional[str] = None

# Column aliases produced by OrderService's product join
PRODUCT_COLUMNS = {
    "product_title": "title",
    "product_description": "description",
    "product_file_name": "file_name",
    "product_download_password": "download_password",
}

class Order(StoreModel):
    """Purchase of one digital product"""
    id: UUID
    product_id: UUID
    customer_name: str
    customer_email: str
    order_status: OrderStatus
    download_count: int
    max_downloads: int
    expires_at: datetime
    created_at: datetime
    idempotency_key: Optional[str] = None
    product: Optional[ProductSummary] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Order":
        data = dict(row)
        product = {
            field: data.pop(column)
            for column, field in PRODUCT_COLUMNS.items()
            if column in data
        }
        if product.get("title") is not None:
            data["product"] = ProductSummary(**product)
        return cls(**data)

    def public_dict(self) -> Dict[str, Any]:
        """Order view for buyers; the client's idempotency key stays private"""
        return self.model_dump(mode="json", exclude={"idempotency_key"})

    @property
    def is_completed(self) -> bool:
        return self.order_status == OrderStatus.COMPLETED

    @property
    def downloads_remaining(self) -> int:
        return max(self.max_downloads - self.download_count, 0)
