# fitstore/services/file_service.py
import aiofiles
import hashlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any
from ..config import Config
from ..errors import FileMissing, StorageError

class FileService:
    """Product file storage on local disk"""

    FILE_TYPES = ('products', 'temp')

    def __init__(self, upload_dir: Optional[Path] = None):
        self.upload_path = Path(upload_dir or Config.UPLOAD_DIR)
        self.logger = logging.getLogger(__name__)
        self.ensure_directories()

    def ensure_directories(self):
        """Make sure every storage directory exists"""
        for file_type in self.FILE_TYPES:
            (self.upload_path / file_type).mkdir(parents=True, exist_ok=True)

    def resolve_path(self, file_path: str, file_type: str = 'products') -> Path:
        """Map a stored file reference to a path inside the storage root"""
        base = (self.upload_path / file_type).resolve()
        relative = (file_path or '').replace('\\', '/').lstrip('/')
        if not relative:
            raise FileMissing()

        path = (base / relative).resolve()
        # References must not escape their storage directory
        if path != base and base not in path.parents:
            self.logger.warning(f"Rejected file reference outside storage: {file_path!r}")
            raise FileMissing()
        return path

    async def read_file(self, file_path: str, file_type: str = 'products') -> bytes:
        """Read a stored file completely"""
        path = self.resolve_path(file_path, file_type)
        try:
            async with aiofiles.open(path, 'rb') as f:
                return await f.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            self.logger.error(f"Stored file missing: {path}")
            raise FileMissing()
        except OSError as e:
            self.logger.error(f"Reading {path} failed: {e}", exc_info=True)
            raise StorageError("Failed to read file") from e

    async def save_file(self, content: bytes, file_type: str,
                        extension: str) -> Dict[str, Any]:
        """Store bytes under a content-derived unique name"""
        file_hash = hashlib.sha256(content).hexdigest()
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        filename = f"{timestamp}_{file_hash[:8]}{extension}"

        save_path = self.upload_path / file_type / filename

        try:
            async with aiofiles.open(save_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            self.logger.error(f"Writing {save_path} failed: {e}", exc_info=True)
            raise StorageError("Failed to store file") from e

        return {
            'filename': filename,
            'size': len(content),
            'sha256': file_hash,
            'path': str(save_path)
        }

    async def delete_file(self, filename: str, file_type: str) -> bool:
        """Remove a stored file, False when it was not there"""
        try:
            file_path = self.resolve_path(filename, file_type)
        except FileMissing:
            return False

        try:
            if file_path.is_file():
                file_path.unlink()
                return True
            return False
        except OSError as e:
            self.logger.error(f"Deleting {file_path} failed: {e}")
            return False
