# fitstore/handlers/product_handlers.py
from aiohttp import web
from .base_handler import BaseHandler
from ..errors import NotFoundError, ProductNotFound

class ProductHandler(BaseHandler):
    """Public catalog"""

    def __init__(self, product_service):
        super().__init__()
        self.product_service = product_service

    async def list_products(self, request: web.Request) -> web.Response:
        products = await self.product_service.list_active_products()
        return self.json([product.public_dict() for product in products])

    async def get_product(self, request: web.Request) -> web.Response:
        try:
            product = await self.product_service.get_product(request.match_info['product_id'])
        except ProductNotFound:
            raise NotFoundError("Product not found")
        return self.json(product.public_dict())
