# fitstore/app.py
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional
from aiohttp import web
from .config import Config
from .database.database import Database
from .handlers import (
    error_middleware,
    ProductHandler,
    OrderHandler,
    DownloadHandler,
    AdminHandler,
    HealthHandler
)
from .services.audit_service import AuditService
from .services.download_service import DownloadService
from .services.entitlement_service import EntitlementService
from .services.file_service import FileService
from .services.order_service import OrderService
from .services.product_file_service import ProductFileService
from .services.product_service import ProductService

@dataclass
class StoreServices:
    """Every service, built once around the shared database handle"""
    db: Database
    products: ProductService
    orders: OrderService
    entitlements: EntitlementService
    downloads: DownloadService
    audit: AuditService
    product_files: ProductFileService

def build_services(db: Database, file_service: Optional[FileService] = None) -> StoreServices:
    file_service = file_service or FileService()
    products = ProductService(db)
    entitlements = EntitlementService(db)
    audit = AuditService(db)
    return StoreServices(
        db=db,
        products=products,
        orders=OrderService(db, products),
        entitlements=entitlements,
        downloads=DownloadService(db, entitlements, file_service, audit),
        audit=audit,
        product_files=ProductFileService(products, file_service)
    )

def create_app(services: StoreServices, admin_token: Optional[str] = None) -> web.Application:
    """aiohttp application with every route registered"""
    app = web.Application(middlewares=[error_middleware])

    health = HealthHandler(services.db)
    products = ProductHandler(services.products)
    orders = OrderHandler(services.orders)
    downloads = DownloadHandler(services.downloads)
    admin = AdminHandler(services.products, services.product_files, services.audit,
                         admin_token=admin_token)

    app.router.add_get('/healthz', health.health)

    # Storefront
    app.router.add_get('/products', products.list_products)
    app.router.add_get('/products/{product_id}', products.get_product)
    app.router.add_post('/orders', orders.create_order)
    app.router.add_get('/orders', orders.list_orders)
    app.router.add_get('/orders/{order_id}', orders.get_order)
    app.router.add_post('/download/{order_id}', downloads.download)

    # Administration
    app.router.add_get('/admin/products', admin.list_products)
    app.router.add_post('/admin/products', admin.create_product)
    app.router.add_put('/admin/products/{product_id}', admin.update_product)
    app.router.add_delete('/admin/products/{product_id}', admin.deactivate_product)
    app.router.add_post('/admin/products/{product_id}/file', admin.upload_product_file)
    app.router.add_get('/admin/orders/{order_id}/downloads', admin.list_downloads)

    return app

class StoreApp:
    def __init__(self, db: Optional[Database] = None):
        """Wire the database, services and routes"""
        self.db = db or Database()
        self.services = build_services(self.db)
        self.application = create_app(self.services)
        self.application.on_startup.append(self._on_startup)
        self.application.on_cleanup.append(self._on_cleanup)
        self.logger = logging.getLogger(__name__)

    async def _on_startup(self, app: web.Application):
        await self.db.connect()

    async def _on_cleanup(self, app: web.Application):
        await self.db.close()

    async def start(self, host: str = Config.HOST, port: int = Config.PORT):
        """Serve until the task is cancelled"""
        runner = web.AppRunner(self.application)
        await runner.setup()
        try:
            site = web.TCPSite(runner, host, port)
            await site.start()
            self.logger.info(f"Store listening on http://{host}:{port}")
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()
