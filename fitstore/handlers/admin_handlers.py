# fitstore/handlers/admin_handlers.py
from typing import Optional
from aiohttp import web
from .base_handler import BaseHandler
from ..errors import ValidationError
from ..models.product import ProductCreate, ProductUpdate
from ..utils.validators import parse_model

class AdminHandler(BaseHandler):
    """Catalog administration and order audit, behind the admin token"""

    UPLOAD_FIELD = 'file'
    CHUNK_SIZE = 64 * 1024

    def __init__(self, product_service, product_file_service, audit_service,
                 admin_token: Optional[str] = None):
        super().__init__(admin_token)
        self.product_service = product_service
        self.product_file_service = product_file_service
        self.audit_service = audit_service

    async def list_products(self, request: web.Request) -> web.Response:
        self.require_admin(request)
        products = await self.product_service.list_products()
        return self.json([product.model_dump(mode='json') for product in products])

    async def create_product(self, request: web.Request) -> web.Response:
        self.require_admin(request)
        data = parse_model(ProductCreate, await self.read_json(request))
        product = await self.product_service.add_product(data)
        return self.json(product.model_dump(mode='json'), status=201)

    async def update_product(self, request: web.Request) -> web.Response:
        self.require_admin(request)
        data = parse_model(ProductUpdate, await self.read_json(request))
        product = await self.product_service.update_product(
            request.match_info['product_id'], data
        )
        return self.json(product.model_dump(mode='json'))

    async def deactivate_product(self, request: web.Request) -> web.Response:
        """Products are never deleted, only taken off sale"""
        self.require_admin(request)
        product = await self.product_service.deactivate_product(request.match_info['product_id'])
        return self.json(product.model_dump(mode='json'))

    async def upload_product_file(self, request: web.Request) -> web.Response:
        """Multipart upload; the part named `file` becomes the product file"""
        self.require_admin(request)
        if not request.content_type.startswith('multipart/'):
            raise ValidationError("Expected a multipart/form-data upload")

        reader = await request.multipart()
        field = await reader.next()
        while field is not None and field.name != self.UPLOAD_FIELD:
            field = await reader.next()
        if field is None:
            raise ValidationError("Missing file field")

        limit = self.product_file_service.max_file_size
        content = bytearray()
        while True:
            chunk = await field.read_chunk(self.CHUNK_SIZE)
            if not chunk:
                break
            content.extend(chunk)
            if len(content) > limit:
                raise ValidationError("File exceeds the maximum upload size")

        product = await self.product_file_service.add_product_file(
            request.match_info['product_id'], bytes(content), field.filename
        )
        return self.json(product.model_dump(mode='json'))

    async def list_downloads(self, request: web.Request) -> web.Response:
        self.require_admin(request)
        entries = await self.audit_service.list_for_order(request.match_info['order_id'])
        return self.json([entry.model_dump(mode='json') for entry in entries])
