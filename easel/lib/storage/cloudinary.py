"""Cloudinary CDN storage backend."""

from __future__ import annotations

import asyncio
import io
import logging
from typing import TYPE_CHECKING

import cloudinary.uploader

from easel.lib.storage.base import Backend, DeleteResult, StorageError, StorageResult, StoredFile
from easel.lib.storage.codec import build_delivery_url

if TYPE_CHECKING:
    from easel.config import CloudinaryConfig
    from easel.lib.categories import Category, TransformProfile
    from easel.lib.uploads import UploadedFile

logger = logging.getLogger(__name__)


class CloudinaryStorageBackend:
    """Upload images to Cloudinary, letting the CDN resize them on ingest.

    Credentials travel with every SDK call so several backends with different
    accounts can coexist in one process.
    """

    backend = Backend.REMOTE

    def __init__(self, config: CloudinaryConfig, root_folder: str) -> None:
        self._config = config
        self._root_folder = root_folder

    def _credentials(self) -> dict:
        return {
            "cloud_name": self._config.cloud_name,
            "api_key": self._config.api_key,
            "api_secret": self._config.api_secret,
            "timeout": self._config.timeout,
        }

    async def put(
        self,
        file: UploadedFile,
        category: Category,
        profile: TransformProfile,
        owner_id: str | None = None,
    ) -> StorageResult:
        options = profile.upload_options(self._root_folder)
        options.update(self._credentials())

        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.upload, io.BytesIO(file.data), **options
            )
            url = result["secure_url"]
            public_id = result["public_id"]
        except Exception as exc:
            logger.warning("Cloudinary upload of %s failed: %s", file.filename, exc)
            return StorageError(self.backend, str(exc) or exc.__class__.__name__)

        if not url or not public_id:
            return StorageError(self.backend, "Cloudinary response missing url or public_id")

        return StoredFile(
            backend=self.backend,
            identifier=public_id,
            url=url,
            content_type=file.content_type,
            size=result.get("bytes") or file.size,
            original_name=file.filename,
            category=category.value,
            width=result.get("width"),
            height=result.get("height"),
            format=result.get("format"),
            owner_id=owner_id,
        )

    async def delete(self, identifier: str) -> DeleteResult:
        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.destroy, identifier, **self._credentials()
            )
        except Exception as exc:
            logger.warning("Cloudinary delete of %s failed: %s", identifier, exc)
            return DeleteResult(False, self.backend, str(exc) or exc.__class__.__name__)

        outcome = result.get("result") if isinstance(result, dict) else None
        if outcome != "ok":
            return DeleteResult(False, self.backend, f"Cloudinary returned {outcome!r}")
        return DeleteResult(True, self.backend)

    def get_url(self, identifier: str) -> str:
        return build_delivery_url(identifier, self._config.cloud_name, self._config.cdn_host)
