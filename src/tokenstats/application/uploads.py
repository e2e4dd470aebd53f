# src/tokenstats/application/uploads.py
"""
Upload Service - Meme Upload Validation and Storage

Validates an uploaded image, writes its bytes through the configured object
store and records it in the meme store. Validation always happens before the
object store is touched. If the record cannot be saved, the stored bytes
are deleted again.

Files that USE this module:
- tokenstats.adapters.web.routes (POST /api/memes/upload, GET /api/memes)
- tokenstats.app (creates the service)
- tests.test_uploads (unit tests)

Files that this module USES:
- tokenstats.adapters.storage.base (ObjectStore interface)
- tokenstats.adapters.persistence.meme_store (MemeStore)
- tokenstats.shared.validators (sanitize_filename)
"""
from __future__ import annotations

import logging
import mimetypes
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from tokenstats.adapters.persistence.meme_store import MemeStore
from tokenstats.adapters.storage.base import ObjectStore
from tokenstats.domain.errors import StorageError, UploadValidationError
from tokenstats.domain.models import StoredObject, UploadedAsset
from tokenstats.shared.validators import sanitize_filename

log = logging.getLogger(__name__)


class UploadService:
    def __init__(
        self,
        store: ObjectStore,
        records: MemeStore,
        max_bytes: int,
        allowed_types: Iterable[str],
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Initialize upload service.

        Args:
            store: Object store receiving the bytes
            records: Store for upload records
            max_bytes: Largest accepted upload
            allowed_types: Accepted MIME types (e.g., "image/png")
            id_factory: Generates record ids and stored names
            now: Clock for upload timestamps
        """
        self.store = store
        self.records = records
        self.max_bytes = max_bytes
        self.allowed_types = frozenset(t.lower() for t in allowed_types)
        self._id_factory = id_factory
        self._now = now

    def check_metadata(self, filename: Optional[str], content_type: Optional[str]) -> None:
        """
        Reject a missing file or a disallowed type before any bytes are read.

        Raises:
            UploadValidationError: 400
        """
        if not filename:
            raise UploadValidationError("No file uploaded")
        if (content_type or "").lower() not in self.allowed_types:
            raise UploadValidationError(
                f"Only image files are allowed ({', '.join(sorted(self.allowed_types))})"
            )

    def validate(self, filename: Optional[str], content_type: Optional[str], size: int) -> None:
        """
        Reject uploads that must not reach storage.

        Raises:
            UploadValidationError: 400 for a missing file or a non-image type, 413 when too large
        """
        if size == 0:
            raise UploadValidationError("No file uploaded")
        self.check_metadata(filename, content_type)
        if size > self.max_bytes:
            raise UploadValidationError(
                f"File too large (max {self.max_bytes} bytes)", status_code=413
            )

    def upload(self, data: bytes, filename: Optional[str], content_type: Optional[str]) -> UploadedAsset:
        """
        Validate, store and record one upload.

        Args:
            data: File contents
            filename: Original file name sent by the client
            content_type: MIME type sent by the client

        Returns:
            The recorded UploadedAsset

        Raises:
            UploadValidationError: If the upload is rejected
            StorageError: If the object store or record store fails
        """
        self.validate(filename, content_type, len(data))
        content_type = content_type.lower()

        asset_id = self._id_factory()
        stored_name = f"{asset_id}{_extension(filename, content_type)}"
        stored = self.store.store(data, content_type, stored_name)

        asset = UploadedAsset(
            id=asset_id,
            filename=sanitize_filename(filename) or stored_name,
            stored_name=stored_name,
            content_type=content_type,
            size=len(data),
            url=stored.url,
            pathname=stored.pathname,
            uploaded_at=self._now(),
        )
        try:
            self.records.add(asset)
        except StorageError:
            self._discard(stored)
            raise
        log.info("Accepted upload %s (%s, %d bytes) via %s", asset.id, content_type, asset.size,
                 self.store.name)
        return asset

    def _discard(self, stored: StoredObject) -> None:
        """Remove bytes whose record could not be written; log the locator if that fails too."""
        try:
            self.store.delete(stored)
            log.warning("Removed %s after its record could not be saved", stored.url)
        except StorageError as e:
            log.error("Orphaned upload at %s (pathname=%s): %s", stored.url, stored.pathname, e)

    def list(self) -> List[UploadedAsset]:
        """List every recorded upload, newest first."""
        return self.records.list()


def _extension(filename: str, content_type: str) -> str:
    """Pick a file extension from the original name, else from the MIME type."""
    safe = sanitize_filename(filename)
    if "." in safe:
        ext = safe.rsplit(".", 1)[1].lower()
        if ext and ext.isalnum() and len(ext) <= 5:
            return f".{ext}"
    return mimetypes.guess_extension(content_type) or ""
