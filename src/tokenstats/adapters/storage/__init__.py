"""
Storage Adapters - Object Stores for Uploaded Files

This package contains the object stores an upload can be written to:
the local filesystem or Vercel Blob storage.
"""

from tokenstats.adapters.storage.base import ObjectStore
from tokenstats.adapters.storage.local import LocalFileStore
from tokenstats.adapters.storage.vercel_blob import VercelBlobStore

__all__ = ["ObjectStore", "LocalFileStore", "VercelBlobStore"]
