import io
import zipfile
from unittest.mock import AsyncMock

import pytest

from conftest import make_order, make_product
from fitstore.errors import PersistenceError, ProductNotFound, ValidationError
from fitstore.services import product_file_service
from fitstore.services.download_service import DownloadService
from fitstore.services.product_file_service import ProductFileService

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


def zip_bytes() -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("week-1.txt", "squat 5x5")
    return buffer.getvalue()


@pytest.fixture
def products():
    service = AsyncMock()
    product = make_product()
    service.get_product.return_value = product
    service.set_product_file.side_effect = (
        lambda product_id, file_path, file_name:
        product.model_copy(update={"file_path": file_path, "file_name": file_name})
    )
    service.file_in_use.return_value = False
    return service


@pytest.fixture
def sniff_pdf(monkeypatch):
    monkeypatch.setattr(product_file_service, "detect_mime_type", lambda content: "application/pdf")


def stored_files(storage):
    return sorted(p.name for p in (storage.upload_path / "products").iterdir())


@pytest.mark.asyncio
async def test_upload_is_stored_and_attached(products, storage, sniff_pdf):
    service = ProductFileService(products, storage)

    product = await service.add_product_file(products.get_product.return_value.id, PDF_BYTES,
                                             "C:\\docs\\guide.pdf")

    assert product.file_name == "guide.pdf"
    assert product.file_path.endswith(".pdf")
    assert await storage.read_file(product.file_path) == PDF_BYTES


@pytest.mark.asyncio
async def test_uploaded_file_downloads_as_pdf(products, storage, sniff_pdf):
    product = await ProductFileService(products, storage).add_product_file(
        products.get_product.return_value.id, PDF_BYTES, "guide.pdf"
    )
    order = make_order(product_id=product.id)
    entitlements = AsyncMock()
    entitlements.claim_download.return_value = order.model_copy(update={"download_count": 1})
    downloads = DownloadService(AsyncMock(), entitlements, storage, AsyncMock())
    downloads._get_order_file = AsyncMock(return_value=(order, product.file_path, product.file_name))

    result = await downloads.download(order.id, "203.0.113.7", "pytest")

    assert result.content == PDF_BYTES
    assert result.content_type == "application/pdf"
    assert result.file_name == "guide.pdf"


@pytest.mark.asyncio
async def test_display_name_defaults_to_product_title(products, storage, sniff_pdf):
    service = ProductFileService(products, storage)
    product = await service.add_product_file(products.get_product.return_value.id, PDF_BYTES)
    assert product.file_name == "12-Week Strength Program.pdf"


@pytest.mark.asyncio
@pytest.mark.parametrize("mime_type,content", [
    ("text/html", b"<html></html>"),
    ("application/zip", zip_bytes()),
])
async def test_non_pdf_types_are_rejected(products, storage, monkeypatch, mime_type, content):
    monkeypatch.setattr(product_file_service, "detect_mime_type", lambda data: mime_type)
    service = ProductFileService(products, storage)

    with pytest.raises(ValidationError):
        await service.add_product_file(products.get_product.return_value.id, content, "bundle.zip")
    products.set_product_file.assert_not_awaited()
    assert stored_files(storage) == []


@pytest.mark.asyncio
async def test_zip_archive_is_rejected_by_content(products, storage):
    service = ProductFileService(products, storage)

    with pytest.raises(ValidationError):
        await service.add_product_file(products.get_product.return_value.id, zip_bytes(),
                                       "bundle.pdf")
    assert stored_files(storage) == []


@pytest.mark.asyncio
async def test_size_limits(products, storage, sniff_pdf):
    service = ProductFileService(products, storage, max_file_size=10)

    with pytest.raises(ValidationError):
        await service.add_product_file(products.get_product.return_value.id, b"")
    with pytest.raises(ValidationError):
        await service.add_product_file(products.get_product.return_value.id, PDF_BYTES)


@pytest.mark.asyncio
async def test_unknown_product_writes_nothing(products, storage, sniff_pdf):
    products.get_product.side_effect = ProductNotFound()
    service = ProductFileService(products, storage)

    with pytest.raises(ProductNotFound):
        await service.add_product_file("missing", PDF_BYTES)
    assert stored_files(storage) == []


@pytest.mark.asyncio
async def test_failed_update_removes_stored_file(products, storage, sniff_pdf):
    products.set_product_file.side_effect = PersistenceError("Failed to update product")
    service = ProductFileService(products, storage)

    with pytest.raises(PersistenceError):
        await service.add_product_file(products.get_product.return_value.id, PDF_BYTES)
    assert stored_files(storage) == []


@pytest.mark.asyncio
async def test_replacing_a_file_removes_the_old_one(products, storage, sniff_pdf):
    old = products.get_product.return_value.file_path
    (storage.upload_path / "products" / old).write_bytes(b"%PDF-1.4 old edition")
    service = ProductFileService(products, storage)

    product = await service.add_product_file(products.get_product.return_value.id, PDF_BYTES)

    assert stored_files(storage) == [product.file_path]
    products.file_in_use.assert_awaited_once_with(old)


@pytest.mark.asyncio
async def test_file_shared_with_another_product_is_kept(products, storage, sniff_pdf):
    old = products.get_product.return_value.file_path
    (storage.upload_path / "products" / old).write_bytes(b"%PDF-1.4 shared")
    products.file_in_use.return_value = True
    service = ProductFileService(products, storage)

    product = await service.add_product_file(products.get_product.return_value.id, PDF_BYTES)

    assert stored_files(storage) == sorted([old, product.file_path])


@pytest.mark.asyncio
async def test_old_file_is_kept_when_references_cannot_be_checked(products, storage, sniff_pdf):
    old = products.get_product.return_value.file_path
    (storage.upload_path / "products" / old).write_bytes(b"%PDF-1.4 old edition")
    products.file_in_use.side_effect = PersistenceError("Failed to check file references")
    service = ProductFileService(products, storage)

    product = await service.add_product_file(products.get_product.return_value.id, PDF_BYTES)

    assert product.file_path != old
    assert (storage.upload_path / "products" / old).exists()


def test_libmagic_detects_pdf():
    assert product_file_service.detect_mime_type(PDF_BYTES) == "application/pdf"
