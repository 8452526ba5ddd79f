"""Image storage on Cloudinary with a database fallback."""

from easel.lib.storage.base import Backend, DeleteResult, StorageBackend, StorageError, StoredFile
from easel.lib.storage.cloudinary import CloudinaryStorageBackend
from easel.lib.storage.database import DatabaseStorageBackend
from easel.lib.storage.gateway import (
    AssetRef,
    BatchUploadResult,
    MediaGateway,
    MigrationResult,
    UploadResult,
)

__all__ = [
    "AssetRef",
    "Backend",
    "BatchUploadResult",
    "CloudinaryStorageBackend",
    "DatabaseStorageBackend",
    "DeleteResult",
    "MediaGateway",
    "MigrationResult",
    "StorageBackend",
    "StorageError",
    "StoredFile",
    "UploadResult",
]
