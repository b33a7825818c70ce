import os
import tempfile
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

# Config reads the environment at import time
os.environ.setdefault("DATABASE_URL", "postgresql://localhost/fitstore_test")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="fitstore-uploads-"))
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="fitstore-logs-"))

import pytest
import pytest_asyncio

from fitstore.app import StoreServices, build_services, create_app
from fitstore.database.database import Database
from fitstore.models.order import Order, OrderStatus, ProductSummary
from fitstore.models.product import Product
from fitstore.services.file_service import FileService

ADMIN_TOKEN = "test-admin-token"
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")


def make_product(**overrides) -> Product:
    data = {
        "id": uuid4(),
        "title": "12-Week Strength Program",
        "description": "Progressive barbell plan",
        "price": Decimal("9.99"),
        "file_path": "strength.pdf",
        "file_name": "strength-program.pdf",
        "download_password": "lift-heavy-2024",
        "is_active": True,
        "created_at": datetime.now(timezone.utc),
    }
    data.update(overrides)
    return Product(**data)


def make_order(**overrides) -> Order:
    now = datetime.now(timezone.utc)
    data = {
        "id": uuid4(),
        "product_id": uuid4(),
        "customer_name": "Jane",
        "customer_email": "jane@x.com",
        "order_status": OrderStatus.COMPLETED,
        "download_count": 0,
        "max_downloads": 5,
        "expires_at": now + timedelta(days=30),
        "created_at": now,
        "product": ProductSummary(
            title="12-Week Strength Program",
            description="Progressive barbell plan",
            file_name="strength-program.pdf",
            download_password="lift-heavy-2024",
        ),
    }
    data.update(overrides)
    return Order(**data)


@pytest.fixture
def mock_services():
    """StoreServices whose members are AsyncMocks"""
    product_files = AsyncMock()
    product_files.max_file_size = 1024
    return StoreServices(
        db=AsyncMock(),
        products=AsyncMock(),
        orders=AsyncMock(),
        entitlements=AsyncMock(),
        downloads=AsyncMock(),
        audit=AsyncMock(),
        product_files=product_files,
    )


@pytest_asyncio.fixture
async def client(aiohttp_client, mock_services):
    app = create_app(mock_services, admin_token=ADMIN_TOKEN)
    return await aiohttp_client(app)


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest_asyncio.fixture
async def pg_db():
    """Migrated, emptied PostgreSQL database; skipped without TEST_DATABASE_URL"""
    if not TEST_DATABASE_URL:
        pytest.skip("TEST_DATABASE_URL not set")

    db = Database(TEST_DATABASE_URL, min_size=1, max_size=10)
    await db.connect()
    async with db.pool.acquire() as conn:
        await conn.execute("TRUNCATE download_logs, orders, digital_products CASCADE")
    try:
        yield db
    finally:
        await db.close()


@pytest.fixture
def storage(tmp_path):
    return FileService(tmp_path / "uploads")


@pytest.fixture
def store(pg_db, storage):
    return build_services(pg_db, storage)
