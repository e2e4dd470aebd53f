# src/tokenstats/adapters/storage/base.py
"""
Object Store Interface

Abstract base class for the places uploaded meme bytes can live.

Files that USE this module:
- tokenstats.adapters.storage.local (LocalFileStore)
- tokenstats.adapters.storage.vercel_blob (VercelBlobStore)
- tokenstats.application.uploads (UploadService depends on the interface only)

Files that this module USES:
- tokenstats.domain.models (StoredObject)
"""
from abc import ABC, abstractmethod

from tokenstats.domain.models import StoredObject


class ObjectStore(ABC):
    name: str = "object_store"

    @abstractmethod
    def store(self, data: bytes, content_type: str, filename: str) -> StoredObject:
        """
        Persist bytes under `filename` and return where they can be fetched.

        Raises:
            StorageError: If the bytes could not be stored
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, stored: StoredObject) -> None:
        """
        Remove a previously stored object.

        Raises:
            StorageError: If the object could not be removed
        """
        raise NotImplementedError
