"""Media gateway: route uploads, deletions and migrations between backends."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Union

from sqlalchemy.exc import SQLAlchemyError

from easel.lib.categories import Category, get_profile, resolve_category
from easel.lib.storage.base import Backend, DeleteResult, StorageError, StoredFile
from easel.lib.storage.cloudinary import CloudinaryStorageBackend
from easel.lib.storage.codec import (
    build_local_url,
    build_optimized_url,
    extract_identifier,
    extract_local_identifier,
    is_remote_url,
)
from easel.lib.storage.database import DatabaseStorageBackend
from easel.lib.uploads import UploadedFile, UploadValidationError, validate_upload

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from easel.config import MediaConfig

logger = logging.getLogger(__name__)


@dataclass
class AssetRef:
    """A previously stored asset, tagged with its backend where known.

    Records created before the backend tag existed carry only a URL; those
    are dispatched by inspecting the URL.
    """

    identifier: str | None = None
    backend: Backend | None = None
    url: str | None = None


AssetReference = Union[str, int, AssetRef, StoredFile]


@dataclass
class UploadResult:
    success: bool
    asset: StoredFile | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        data: dict = {"success": self.success}
        if self.asset is not None:
            data.update(self.asset.to_dict())
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class BatchUploadResult:
    files: list[StoredFile] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.files) and not self.errors

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "files": [f.to_dict() for f in self.files],
            "errors": self.errors,
            "total_uploaded": len(self.files),
            "total_errors": len(self.errors),
        }


@dataclass
class MigrationResult:
    success: bool
    original_id: str | None = None
    url: str | None = None
    identifier: str | None = None
    already_migrated: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "original_id": self.original_id,
            "url": self.url,
            "identifier": self.identifier,
            "already_migrated": self.already_migrated,
            "error": self.error,
        }


class MediaGateway:
    """Single entry point for storing and addressing gallery images.

    Whether the CDN is used is decided once, from the credentials in
    *config*, when the gateway is built. Uploads prefer the CDN and fall back
    to the database; the database is used directly when no credentials are
    configured.
    """

    def __init__(
        self,
        config: MediaConfig,
        session_maker: Callable[[], AsyncSession] | None = None,
        *,
        local: DatabaseStorageBackend | None = None,
        remote: CloudinaryStorageBackend | None = None,
    ) -> None:
        self._config = config
        self._remote_available = config.cloudinary.is_configured

        if local is None:
            if session_maker is None:
                raise ValueError("MediaGateway needs a session_maker or a local backend")
            local = DatabaseStorageBackend(session_maker, config.local_url_prefix)
        self._local = local

        self._remote: CloudinaryStorageBackend | None = None
        if self._remote_available:
            self._remote = remote or CloudinaryStorageBackend(config.cloudinary, config.root_folder)

        logger.info(
            "Media gateway using %s",
            "Cloudinary with database fallback" if self._remote_available else "database storage only",
        )

    @property
    def remote_available(self) -> bool:
        return self._remote_available

    # -- uploads --

    async def upload(
        self,
        file: UploadedFile | None,
        category: str | Category | None = None,
        owner_id: str | None = None,
    ) -> UploadResult:
        """Store one file, preferring the CDN and falling back to the database."""
        if file is None or not file.data:
            return UploadResult(False, error="No file uploaded")

        resolved = resolve_category(category)
        profile = get_profile(resolved)

        remote_error: StorageError | None = None
        if self._remote is not None:
            result = await self._remote.put(file, resolved, profile, owner_id)
            if isinstance(result, StoredFile):
                return UploadResult(True, result)
            remote_error = result
            logger.warning(
                "CDN upload of %s failed, storing in database instead: %s",
                file.filename,
                result.message,
            )

        result = await self._local.put(file, resolved, profile, owner_id)
        if isinstance(result, StoredFile):
            return UploadResult(True, result)

        if remote_error is not None:
            message = (
                f"Image upload failed: CDN error ({remote_error.message}); "
                f"database error ({result.message})"
            )
        else:
            message = f"Image upload failed: {result.message}"
        logger.error("Upload of %s failed on every backend: %s", file.filename, message)
        return UploadResult(False, error=message)

    async def upload_multiple(
        self,
        files: list[UploadedFile],
        category: str | Category | None = None,
        owner_id: str | None = None,
    ) -> BatchUploadResult:
        """Validate and upload files concurrently, reporting each outcome.

        One failing file never aborts the batch, and files already stored
        stay in place.
        """
        batch = BatchUploadResult()
        if not files:
            batch.errors.append({"filename": None, "error": "No files uploaded"})
            return batch

        async def upload_one(file: UploadedFile) -> UploadResult:
            try:
                validate_upload(file, self._config.max_upload_size, self._config.allowed_types)
            except UploadValidationError as exc:
                return UploadResult(False, error=str(exc))
            try:
                return await self.upload(file, category, owner_id)
            except Exception as exc:
                logger.exception("Batch upload of %s failed", file.filename)
                return UploadResult(False, error=str(exc) or exc.__class__.__name__)

        results = await asyncio.gather(*(upload_one(f) for f in files))

        for file, result in zip(files, results):
            if result.success and result.asset is not None:
                batch.files.append(result.asset)
            else:
                batch.errors.append({"filename": file.filename, "error": result.error})
        return batch

    # -- addressing --

    def resolve_reference(self, ref: AssetReference) -> tuple[Backend | None, str | None, str | None]:
        """Work out ``(backend, identifier, url)`` for an asset reference."""
        if isinstance(ref, StoredFile):
            return ref.backend, ref.identifier, ref.url

        if isinstance(ref, AssetRef):
            if ref.backend is not None:
                identifier = ref.identifier
                if identifier is None and ref.url:
                    identifier = self._identifier_from_url(ref.backend, ref.url)
                return ref.backend, identifier, ref.url
            if ref.url:
                return self.resolve_reference(ref.url)
            if ref.identifier is not None:
                return self.resolve_reference(ref.identifier)
            return None, None, None

        if isinstance(ref, int):
            return Backend.LOCAL, str(ref), None

        if isinstance(ref, str):
            if is_remote_url(ref, self._config.cloudinary.cdn_host):
                return Backend.REMOTE, self._identifier_from_url(Backend.REMOTE, ref), ref
            if ref.isdigit():
                return Backend.LOCAL, ref, None
            local_id = extract_local_identifier(ref, self._config.local_url_prefix)
            if local_id is not None:
                return Backend.LOCAL, local_id, ref

        return None, None, None

    def _identifier_from_url(self, backend: Backend, url: str) -> str | None:
        if backend is Backend.REMOTE:
            return extract_identifier(url, self._config.root_folder, self._config.cloudinary.cdn_host)
        return extract_local_identifier(url, self._config.local_url_prefix)

    def get_delivery_url(self, ref: AssetReference) -> str | None:
        """Return the URL an asset is served from."""
        if isinstance(ref, str):
            return build_local_url(ref, self._config.local_url_prefix) if ref.isdigit() else ref

        backend, identifier, url = self.resolve_reference(ref)
        if url:
            return url
        if identifier is None:
            return None
        if backend is Backend.LOCAL:
            return self._local.get_url(identifier)
        if backend is Backend.REMOTE and self._remote is not None:
            return self._remote.get_url(identifier)
        return None

    def get_optimized_url(
        self,
        ref: AssetReference,
        width: int | None = None,
        height: int | None = None,
        crop: str | None = None,
        quality: str | int | None = "auto",
        format: str | None = "auto",
    ) -> str | None:
        """CDN URL with delivery transformations; other assets get their plain URL."""
        backend, identifier, _ = self.resolve_reference(ref)
        cloud_name = self._config.cloudinary.cloud_name
        if backend is Backend.REMOTE and identifier and cloud_name:
            return build_optimized_url(
                identifier,
                cloud_name,
                self._config.cloudinary.cdn_host,
                width=width,
                height=height,
                crop=crop,
                quality=quality,
                format=format,
            )
        return self.get_delivery_url(ref)

    # -- deletion --

    async def delete_asset(self, ref: AssetReference) -> DeleteResult:
        """Remove an asset's bytes from the backend that owns them.

        Failures are reported in the result; nothing else is rolled back.
        """
        backend, identifier, _ = self.resolve_reference(ref)

        if backend is Backend.REMOTE:
            if identifier is None:
                return DeleteResult(False, Backend.REMOTE, "Invalid CDN URL")
            if self._remote is None:
                return DeleteResult(False, Backend.REMOTE, "CDN backend is not configured")
            return await self._remote.delete(identifier)

        if backend is Backend.LOCAL and identifier is not None:
            return await self._local.delete(identifier)

        return DeleteResult(False, None, "Unrecognised asset reference")

    # -- migration --

    async def migrate(
        self,
        file_id: str | int,
        category: str | Category | None = None,
    ) -> MigrationResult:
        """Copy a database-stored image to the CDN and repoint its row.

        The stored bytes are kept; :meth:`cleanup_migrated` drops them later.
        A row that already points at the CDN is reported as migrated without
        uploading it again.
        """
        original_id = str(file_id)
        if self._remote is None:
            return MigrationResult(False, original_id, error="CDN backend is not configured")
        if not original_id.isdigit():
            return MigrationResult(False, original_id, error=f"Invalid file id {original_id!r}")

        try:
            record = await self._local.read(original_id)
        except SQLAlchemyError as exc:
            logger.error("Could not load file %s for migration: %s", original_id, exc)
            return MigrationResult(False, original_id, error=str(exc))

        if record is None:
            return MigrationResult(False, original_id, error="Image not found in database")

        if record.is_migrated:
            return MigrationResult(
                True,
                original_id,
                url=record.remote_url,
                identifier=record.remote_identifier,
                already_migrated=True,
            )

        if not record.file_data:
            return MigrationResult(False, original_id, error="Image data not found in database")

        file = UploadedFile(
            data=record.file_data,
            content_type=record.mime_type,
            filename=record.original_name,
        )
        resolved = resolve_category(category or record.category)
        result = await self._remote.put(file, resolved, get_profile(resolved), record.uploaded_by)
        if isinstance(result, StorageError):
            logger.error("Migration of file %s failed: %s", original_id, result.message)
            return MigrationResult(False, original_id, error=result.message)

        try:
            repointed = await self._local.repoint(original_id, result)
        except SQLAlchemyError as exc:
            logger.error(
                "File %s uploaded to %s but its row could not be updated: %s",
                original_id,
                result.url,
                exc,
            )
            return MigrationResult(False, original_id, url=result.url, identifier=result.identifier, error=str(exc))

        if not repointed:
            logger.error(
                "File %s uploaded to %s but its row no longer exists", original_id, result.url
            )
            return MigrationResult(
                False,
                original_id,
                url=result.url,
                identifier=result.identifier,
                error="Image not found in database",
            )

        logger.info("Migrated file %s to %s", original_id, result.identifier)
        return MigrationResult(True, original_id, url=result.url, identifier=result.identifier)

    async def cleanup_migrated(self, file_id: str | int | None = None) -> int:
        """Drop database bytes already copied to the CDN. Returns rows purged."""
        count = await self._local.purge(str(file_id) if file_id is not None else None)
        if count:
            logger.info("Purged stored bytes of %d migrated file(s)", count)
        return count
