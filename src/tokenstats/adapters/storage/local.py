# src/tokenstats/adapters/storage/local.py
"""
Local File Store - Uploads Written to Disk

Stores uploaded bytes in UPLOAD_DIR. The web layer serves that directory
under UPLOAD_URL_PREFIX, so the returned URL is a path on this server.

Files that USE this module:
- tokenstats.app (build_object_store when STORAGE_BACKEND=local)
- tests.test_storage (unit tests)

Files that this module USES:
- tokenstats.adapters.storage.base (ObjectStore interface)
- tokenstats.config (settings for upload directory and URL prefix)
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from tokenstats.adapters.storage.base import ObjectStore
from tokenstats.config import settings
from tokenstats.domain.errors import StorageError
from tokenstats.domain.models import StoredObject

log = logging.getLogger(__name__)


class LocalFileStore(ObjectStore):
    name = "local"

    def __init__(self, upload_dir: Optional[Path] = None, url_prefix: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.url_prefix = (url_prefix if url_prefix is not None else settings.upload_url_prefix).rstrip("/")
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def store(self, data: bytes, content_type: str, filename: str) -> StoredObject:
        """
        Write bytes to UPLOAD_DIR/filename using atomic write.

        Raises:
            StorageError: If the file cannot be written
        """
        if not filename or os.path.basename(filename) != filename:
            raise StorageError(f"Refusing to store under unsafe name {filename!r}")

        target = self.upload_dir / filename
        temp_fd, temp_path = tempfile.mkstemp(suffix=".upload.tmp", dir=str(self.upload_dir))
        try:
            with os.fdopen(temp_fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, str(target))
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            log.error("Failed to write upload %s: %s", target, e)
            raise StorageError(f"Failed to write upload: {e}") from e

        log.info("Stored %d bytes (%s) at %s", len(data), content_type, target)
        return StoredObject(url=f"{self.url_prefix}/{filename}", pathname=filename)

    def delete(self, stored: StoredObject) -> None:
        """Remove UPLOAD_DIR/pathname; a file that is already gone is not an error."""
        if os.path.basename(stored.pathname) != stored.pathname:
            raise StorageError(f"Refusing to delete unsafe name {stored.pathname!r}")
        try:
            (self.upload_dir / stored.pathname).unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError(f"Failed to delete upload: {e}") from e
        log.info("Deleted %s", self.upload_dir / stored.pathname)
