# fitstore/services/product_file_service.py
import logging
import magic
from typing import Optional, Union
from uuid import UUID
from ..config import Config
from ..errors import PersistenceError, StoreError, ValidationError
from ..models.product import Product
from ..utils.formatters import safe_file_name

def detect_mime_type(content: bytes) -> str:
    """MIME type sniffed from the file content with libmagic"""
    return magic.from_buffer(content, mime=True)

class ProductFileService:
    """Attaches uploaded files to products"""

    # Must agree with Config.DOWNLOAD_CONTENT_TYPE
    ALLOWED_EXTENSIONS = {
        'application/pdf': '.pdf',
    }

    def __init__(self, product_service, file_service,
                 max_file_size: int = Config.MAX_UPLOAD_SIZE):
        self.product_service = product_service
        self.file_service = file_service
        self.max_file_size = max_file_size
        self.logger = logging.getLogger(__name__)

    async def add_product_file(self, product_id: Union[str, UUID], content: bytes,
                               original_filename: Optional[str] = None) -> Product:
        """Store an uploaded file and point the product at it"""
        if not content:
            raise ValidationError("Uploaded file is empty")
        if len(content) > self.max_file_size:
            raise ValidationError("File exceeds the maximum upload size")

        mime_type = detect_mime_type(content)
        extension = self.ALLOWED_EXTENSIONS.get(mime_type)
        if extension is None:
            raise ValidationError(f"File type {mime_type} is not allowed")

        # Raises ProductNotFound before anything is written
        previous = await self.product_service.get_product(product_id, include_inactive=True)

        saved = await self.file_service.save_file(content, 'products', extension)
        display_name = safe_file_name(original_filename, default=f"{previous.title}{extension}")

        try:
            product = await self.product_service.set_product_file(
                previous.id, saved['filename'], display_name
            )
        except StoreError:
            # Do not leave an orphaned file behind
            await self.file_service.delete_file(saved['filename'], 'products')
            raise

        self.logger.info(
            f"Stored {saved['size']} bytes ({mime_type}) for product {product.id} "
            f"as {saved['filename']}"
        )

        await self._remove_replaced_file(previous, saved['filename'])
        return product

    async def _remove_replaced_file(self, previous: Product, new_file_path: str):
        """Delete the file a product pointed at before, unless still referenced"""
        if previous.file_path == new_file_path:
            return
        try:
            if await self.product_service.file_in_use(previous.file_path):
                return
        except PersistenceError:
            self.logger.warning(f"Kept {previous.file_path}; could not check other references")
            return
        if await self.file_service.delete_file(previous.file_path, 'products'):
            self.logger.info(f"Removed replaced file {previous.file_path} of product {previous.id}")
