# fitstore/handlers/health_handler.py
import logging
from aiohttp import web
from .base_handler import BaseHandler
from ..database.database import DB_ERRORS

class HealthHandler(BaseHandler):
    """Liveness probe that also checks the database round trip"""

    def __init__(self, db):
        super().__init__()
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def health(self, request: web.Request) -> web.Response:
        try:
            ok = await self.db.ping()
        except DB_ERRORS as e:
            self.logger.error(f"Health check failed: {e}")
            ok = False

        if not ok:
            return self.json({"ok": False, "error": "Database unavailable"}, status=500)
        return self.json({"ok": True})
