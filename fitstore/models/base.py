# fitstore/models/base.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

class StoreModel(BaseModel):
    """Base model for rows read from the database"""
    model_config = ConfigDict(from_attributes=True)

class TimeStampedModel(StoreModel):
    """Base model with timestamp fields"""
    created_at: datetime
    updated_at: Optional[datetime] = None
