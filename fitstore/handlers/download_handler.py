# fitstore/handlers/download_handler.py
from aiohttp import web
from .base_handler import BaseHandler
from ..utils.formatters import attachment_header
from ..utils.security import get_client_ip, get_user_agent

class DownloadHandler(BaseHandler):
    """Delivery of purchased files"""

    def __init__(self, download_service):
        super().__init__()
        self.download_service = download_service

    async def download(self, request: web.Request) -> web.Response:
        """POST /download/{order_id}; each successful call spends one download"""
        result = await self.download_service.download(
            order_id=request.match_info['order_id'],
            requester_ip=get_client_ip(request.headers, request.remote),
            requester_user_agent=get_user_agent(request.headers)
        )

        return web.Response(
            body=result.content,
            content_type=result.content_type,
            headers={
                'Content-Disposition': attachment_header(result.file_name),
                'X-Downloads-Remaining': str(result.max_downloads - result.download_count),
                'Cache-Control': 'no-store',
            }
        )
