# fitstore/models/product.py
from decimal import Decimal
from typing import Optional, Dict, Any
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator
from .base import TimeStampedModel

# NOT NULL columns of digital_products that an update may touch
REQUIRED_COLUMNS = ("title", "price", "file_path", "file_name", "is_active")

class Product(TimeStampedModel):
    """Digital product offered in the store"""
    id: UUID
    title: str
    description: Optional[str] = None
    price: Decimal
    file_path: str
    file_name: str
    download_password: Optional[str] = None
    is_active: bool = True

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)

    def public_dict(self) -> Dict[str, Any]:
        """Catalog view; storage path and PDF password stay private"""
        return self.model_dump(mode="json", exclude={"file_path", "download_password"})

class ProductCreate(BaseModel):
    """Admin payload for a new product"""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    file_path: str = Field(min_length=1)
    file_name: str = Field(min_length=1, max_length=255)
    download_password: Optional[str] = Field(default=None, min_length=8, max_length=255)
    is_active: bool = True

class ProductUpdate(BaseModel):
    """Admin payload for a partial product update"""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    file_path: Optional[str] = Field(default=None, min_length=1)
    file_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    download_password: Optional[str] = Field(default=None, min_length=8, max_length=255)
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def reject_null_required(self) -> "ProductUpdate":
        for field in REQUIRED_COLUMNS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self
