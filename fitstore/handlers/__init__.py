# fitstore/handlers/__init__.py
"""HTTP handlers"""
from .base_handler import BaseHandler, error_middleware
from .product_handlers import ProductHandler
from .order_handlers import OrderHandler
from .download_handler import DownloadHandler
from .admin_handlers import AdminHandler
from .health_handler import HealthHandler

__all__ = [
    'BaseHandler',
    'error_middleware',
    'ProductHandler',
    'OrderHandler',
    'DownloadHandler',
    'AdminHandler',
    'HealthHandler'
]
