# src/tokenstats/adapters/storage/vercel_blob.py
"""
Vercel Blob Store - Uploads Sent to Vercel Blob Storage

Stores uploaded bytes with a PUT to the Vercel Blob HTTP API and returns the
public URL the service assigns. Deletes go to the API's /delete endpoint.

Files that USE this module:
- tokenstats.app (build_object_store when STORAGE_BACKEND=vercel_blob)
- tests.test_storage (unit tests)

Files that this module USES:
- tokenstats.adapters.storage.base (ObjectStore interface)
- tokenstats.config (settings for token, API URL and timeout)
"""
import logging
from typing import Optional

import requests

from tokenstats.adapters.storage.base import ObjectStore
from tokenstats.config import settings
from tokenstats.domain.errors import StorageError
from tokenstats.domain.models import StoredObject

log = logging.getLogger(__name__)

BLOB_API_VERSION = "7"


class VercelBlobStore(ObjectStore):
    name = "vercel_blob"

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize Vercel Blob store.

        Args:
            token: Read/write token (defaults to settings.blob_read_write_token)
            api_url: Blob API base URL (defaults to settings.blob_api_url)
            timeout: Optional HTTP timeout in seconds (defaults to settings.http_timeout_seconds)

        Raises:
            ValueError: If the token is missing
        """
        self.token = token if token is not None else settings.blob_read_write_token
        if not self.token:
            raise ValueError("BLOB_READ_WRITE_TOKEN is not configured")
        self.api_url = (api_url or settings.blob_api_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds

    def store(self, data: bytes, content_type: str, filename: str) -> StoredObject:
        """
        Upload bytes with public access.

        Expects: {"url": "https://...", "pathname": "<filename>", ...}

        Raises:
            StorageError: On request failure or a response without `url`
        """
        headers = {
            "authorization": f"Bearer {self.token}",
            "x-api-version": BLOB_API_VERSION,
            "x-content-type": content_type,
            "access": "public",
        }
        try:
            resp = requests.put(
                f"{self.api_url}/{filename}",
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            log.error("Vercel Blob upload of %s failed: %s", filename, e)
            raise StorageError(f"Blob upload failed: {e}") from e

        try:
            payload = resp.json()
        except ValueError as e:
            log.error("Vercel Blob returned invalid JSON for %s: %s", filename, e)
            raise StorageError("Blob upload returned invalid JSON") from e

        if not isinstance(payload, dict) or not payload.get("url"):
            raise StorageError("Blob upload response missing 'url'")

        log.info("Uploaded %s to Vercel Blob: %s", filename, payload["url"])
        return StoredObject(url=payload["url"], pathname=payload.get("pathname") or filename)

    def delete(self, stored: StoredObject) -> None:
        """
        Delete a blob by URL.

        Raises:
            StorageError: On request failure
        """
        try:
            resp = requests.post(
                f"{self.api_url}/delete",
                json={"urls": [stored.url]},
                headers={"authorization": f"Bearer {self.token}", "x-api-version": BLOB_API_VERSION},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            log.error("Vercel Blob delete of %s failed: %s", stored.url, e)
            raise StorageError(f"Blob delete failed: {e}") from e
        log.info("Deleted %s from Vercel Blob", stored.url)
