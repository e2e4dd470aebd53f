# src/tokenstats/adapters/persistence/meme_store.py
"""
Meme Store - Upload Record Persistence

This module keeps the list of accepted meme uploads in a JSON file.
Writes go through a temporary file and an atomic rename so a crash never
leaves a half-written index behind.

Files that USE this module:
- tokenstats.application.uploads (UploadService adds and lists records)
- tokenstats.app (creates the store from settings)
- tests.test_meme_store (unit tests)

Files that this module USES:
- tokenstats.domain.models (UploadedAsset)
- tokenstats.config (settings for the index file path)
"""
from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import List, Optional

from tokenstats.config import settings
from tokenstats.domain.errors import StorageError
from tokenstats.domain.models import UploadedAsset

log = logging.getLogger(__name__)


class MemeStore:
    """JSON-file backed list of UploadedAsset records."""

    def __init__(self, index_file: Optional[Path] = None):
        """
        Initialize meme store.

        Args:
            index_file: Path to the JSON index (defaults to settings.meme_index_file)
        """
        self.path = Path(index_file or settings.meme_index_file)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def add(self, asset: UploadedAsset) -> None:
        """
        Append one record to the index.

        Raises:
            StorageError: If the index cannot be written
        """
        with self._lock:
            records = self._load()
            records.append(asset)
            self._save(records)
        log.info("Recorded meme %s (%s)", asset.id, asset.filename)

    def list(self) -> List[UploadedAsset]:
        """
        Get every record, newest first.

        Returns:
            List of UploadedAsset sorted by upload time descending
        """
        with self._lock:
            records = self._load()
        return sorted(records, key=lambda a: a.uploaded_at, reverse=True)

    def _load(self) -> List[UploadedAsset]:
        """
        Read the index.

        A corrupt file is backed up next to the index and treated as empty.
        Individual malformed records are skipped.
        """
        if not self.path.exists():
            return []

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            backup_path = self.path.with_suffix(".json.corrupt")
            try:
                shutil.copy2(self.path, backup_path)
                self.path.unlink()
                log.warning("Meme index corrupted, backed up to %s: %s", backup_path, e)
            except OSError as backup_error:
                log.error("Failed to back up corrupt meme index: %s", backup_error)
            return []
        except OSError as e:
            raise StorageError(f"Failed to read meme index: {e}") from e

        if not isinstance(data, list):
            log.warning("Meme index is not a list, ignoring its contents")
            return []

        records = []
        for item in data:
            try:
                records.append(UploadedAsset.from_json(item))
            except (KeyError, ValueError, TypeError) as e:
                log.warning("Skipping malformed meme record %r: %s", item, e)
        return records

    def _save(self, records: List[UploadedAsset]) -> None:
        # Atomic write: temp file in the same directory, then rename over the index
        temp_fd, temp_path = tempfile.mkstemp(
            suffix=".json.tmp",
            dir=str(self.path.parent),
            text=True,
        )
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump([r.to_json() for r in records], f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, str(self.path))
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StorageError(f"Failed to save meme index: {e}") from e
