"""
Object Store Tests - Local Files and Vercel Blob

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- tokenstats.adapters.storage (LocalFileStore, VercelBlobStore)
- unittest.mock (Mock for API mocking)
"""
from unittest.mock import Mock, patch

import pytest
import requests

from tokenstats.adapters.storage.local import LocalFileStore
from tokenstats.adapters.storage.vercel_blob import VercelBlobStore
from tokenstats.domain.errors import StorageError
from tokenstats.domain.models import StoredObject


class TestLocalFileStore:
    def test_store_writes_file(self, tmp_path):
        store = LocalFileStore(upload_dir=tmp_path / "uploads", url_prefix="/uploads/")

        stored = store.store(b"\x89PNG", "image/png", "abc.png")

        assert (tmp_path / "uploads" / "abc.png").read_bytes() == b"\x89PNG"
        assert stored.url == "/uploads/abc.png"
        assert stored.pathname == "abc.png"

    def test_rejects_path_components(self, tmp_path):
        store = LocalFileStore(upload_dir=tmp_path, url_prefix="/uploads")
        with pytest.raises(StorageError):
            store.store(b"x", "image/png", "../escape.png")

    def test_delete_removes_file(self, tmp_path):
        store = LocalFileStore(upload_dir=tmp_path, url_prefix="/uploads")
        stored = store.store(b"x", "image/png", "gone.png")

        store.delete(stored)
        store.delete(stored)

        assert not (tmp_path / "gone.png").exists()


class TestVercelBlobStore:
    def test_init_without_token(self):
        with pytest.raises(ValueError, match="BLOB_READ_WRITE_TOKEN"):
            VercelBlobStore(token="")

    @patch('tokenstats.adapters.storage.vercel_blob.requests.put')
    def test_store_success(self, mock_put):
        resp = Mock()
        resp.raise_for_status.return_value = None
        resp.json.return_value = {"url": "https://blob.example.com/abc.png", "pathname": "abc.png"}
        mock_put.return_value = resp

        store = VercelBlobStore(token="tok", api_url="https://blob.example.com/")
        stored = store.store(b"data", "image/png", "abc.png")

        assert stored.url == "https://blob.example.com/abc.png"
        args, kwargs = mock_put.call_args
        assert args[0] == "https://blob.example.com/abc.png"
        assert kwargs["data"] == b"data"
        assert kwargs["headers"]["authorization"] == "Bearer tok"
        assert kwargs["headers"]["x-content-type"] == "image/png"

    @patch('tokenstats.adapters.storage.vercel_blob.requests.put')
    def test_store_failure(self, mock_put):
        mock_put.side_effect = requests.exceptions.ConnectionError("down")
        with pytest.raises(StorageError, match="Blob upload failed"):
            VercelBlobStore(token="tok").store(b"data", "image/png", "abc.png")

    @patch('tokenstats.adapters.storage.vercel_blob.requests.put')
    def test_response_without_url(self, mock_put):
        resp = Mock()
        resp.raise_for_status.return_value = None
        resp.json.return_value = {}
        mock_put.return_value = resp
        with pytest.raises(StorageError, match="missing 'url'"):
            VercelBlobStore(token="tok").store(b"data", "image/png", "abc.png")

    @patch('tokenstats.adapters.storage.vercel_blob.requests.post')
    def test_delete_by_url(self, mock_post):
        mock_post.return_value = Mock(raise_for_status=Mock(return_value=None))

        VercelBlobStore(token="tok", api_url="https://blob.example.com").delete(
            StoredObject(url="https://blob.example.com/abc.png", pathname="abc.png")
        )

        args, kwargs = mock_post.call_args
        assert args[0] == "https://blob.example.com/delete"
        assert kwargs["json"] == {"urls": ["https://blob.example.com/abc.png"]}

    @patch('tokenstats.adapters.storage.vercel_blob.requests.post')
    def test_delete_failure(self, mock_post):
        mock_post.side_effect = requests.exceptions.Timeout("slow")
        with pytest.raises(StorageError, match="Blob delete failed"):
            VercelBlobStore(token="tok").delete(StoredObject(url="https://x/abc.png", pathname="abc.png"))
