# fitstore/handlers/order_handlers.py
from aiohttp import web
from .base_handler import BaseHandler
from ..errors import ValidationError

class OrderHandler(BaseHandler):
    """Checkout and order lookup"""

    def __init__(self, order_service):
        super().__init__()
        self.order_service = order_service

    async def create_order(self, request: web.Request) -> web.Response:
        """POST /orders; 201 for a new order, 200 for an idempotent replay"""
        body = await self.read_json(request)
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")

        order, created = await self.order_service.create_order(
            product_id=body.get('product_id'),
            customer_name=body.get('customer_name'),
            customer_email=body.get('customer_email'),
            idempotency_key=request.headers.get('Idempotency-Key')
        )
        return self.json(order.public_dict(), status=201 if created else 200)

    async def list_orders(self, request: web.Request) -> web.Response:
        orders = await self.order_service.list_orders_for_email(request.query.get('email', ''))
        return self.json([order.public_dict() for order in orders])

    async def get_order(self, request: web.Request) -> web.Response:
        order = await self.order_service.get_order(request.match_info['order_id'])
        return self.json(order.public_dict())
