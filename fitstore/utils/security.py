# fitstore/utils/security.py
import hmac
from typing import Mapping, Optional
from ..config import Config

def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token part of an `Authorization: Bearer <token>` header"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()

def verify_admin_token(token: Optional[str], expected: Optional[str] = None) -> bool:
    """Constant-time comparison against the configured admin token"""
    expected = Config.ADMIN_TOKEN if expected is None else expected
    # An unset admin token disables the admin API
    if not expected or not token:
        return False
    return hmac.compare_digest(token.encode(), expected.encode())

def get_client_ip(headers: Mapping[str, str], remote: Optional[str] = None) -> str:
    """Requester address as seen through a reverse proxy"""
    forwarded = headers.get('X-Forwarded-For', '')
    if forwarded.strip():
        return forwarded.split(',')[0].strip()

    real_ip = headers.get('X-Real-IP', '').strip()
    if real_ip:
        return real_ip

    return remote or 'unknown'

def get_user_agent(headers: Mapping[str, str]) -> str:
    return headers.get('User-Agent', '').strip() or 'unknown'
