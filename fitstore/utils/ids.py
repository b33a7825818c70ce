# fitstore/utils/ids.py
from typing import Optional, Union
from uuid import UUID

def parse_uuid(value: Union[str, UUID, None]) -> Optional[UUID]:
    """Parse an identifier, None when it is not a UUID"""
    if isinstance(value, UUID):
        return value
    if not value:
        return None
    try:
        return UUID(str(value))
    except (ValueError, AttributeError):
        return None
