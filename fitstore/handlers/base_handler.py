# fitstore/handlers/base_handler.py
import json
import logging
from typing import Any, Optional
from aiohttp import web
from ..config import Config
from ..errors import StoreError, Unauthorized, ValidationError
from ..utils.security import extract_bearer_token, verify_admin_token

logger = logging.getLogger(__name__)

@web.middleware
async def error_middleware(request: web.Request, handler):
    """Render every failure as `{"error": ...}` without internals"""
    try:
        return await handler(request)
    except StoreError as e:
        return web.json_response({"error": e.message}, status=e.status)
    except web.HTTPException as e:
        if e.status < 400:
            raise
        return web.json_response({"error": e.reason}, status=e.status)
    except Exception:
        logger.error(f"Unhandled error in {request.method} {request.path}", exc_info=True)
        return web.json_response({"error": "Internal server error"}, status=500)

class BaseHandler:
    """Base class for HTTP handlers"""

    def __init__(self, admin_token: Optional[str] = None):
        self.admin_token = Config.ADMIN_TOKEN if admin_token is None else admin_token

    @staticmethod
    async def read_json(request: web.Request) -> Any:
        """Request body as JSON"""
        try:
            return await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError("Request body must be valid JSON")

    @staticmethod
    def json(data: Any, status: int = 200) -> web.Response:
        return web.json_response(data, status=status)

    def require_admin(self, request: web.Request):
        """Reject requests without the admin bearer token"""
        token = extract_bearer_token(request.headers.get('Authorization'))
        if not verify_admin_token(token, self.admin_token):
            raise Unauthorized()
