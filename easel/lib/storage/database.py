"""Relational database storage backend (bytes in the ``uploaded_files`` table)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from sqlalchemy.exc import SQLAlchemyError

from easel.db.services import file_service
from easel.lib.imaging import probe_image
from easel.lib.storage.base import Backend, DeleteResult, StorageError, StorageResult, StoredFile
from easel.lib.storage.codec import build_local_url

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from easel.db.models.uploaded_file import UploadedFile as UploadedFileRecord
    from easel.lib.categories import Category, TransformProfile
    from easel.lib.uploads import UploadedFile

logger = logging.getLogger(__name__)


class DatabaseStorageBackend:
    """Store image bytes in a binary column, addressed by the row id.

    Each call opens its own session, so concurrent uploads insert independent
    rows without sharing a connection.
    """

    backend = Backend.LOCAL

    def __init__(
        self,
        session_maker: Callable[[], AsyncSession],
        url_prefix: str = "/api/files",
    ) -> None:
        self._session_maker = session_maker
        self._url_prefix = url_prefix

    async def put(
        self,
        file: UploadedFile,
        category: Category,
        profile: TransformProfile,
        owner_id: str | None = None,
    ) -> StorageResult:
        probed = probe_image(file.data)
        width, height, fmt = probed if probed else (None, None, None)

        try:
            async with self._session_maker() as session:
                record = await file_service.create_file(
                    session,
                    original_name=file.filename,
                    data=file.data,
                    mime_type=file.content_type,
                    category=category.value,
                    uploaded_by=owner_id,
                    width=width,
                    height=height,
                )
        except SQLAlchemyError as exc:
            logger.error("Database upload of %s failed: %s", file.filename, exc)
            return StorageError(self.backend, str(exc))

        return StoredFile(
            backend=self.backend,
            identifier=str(record.id),
            url=self.get_url(str(record.id)),
            content_type=file.content_type,
            size=file.size,
            original_name=file.filename,
            category=category.value,
            width=width,
            height=height,
            format=fmt,
            owner_id=owner_id,
        )

    async def delete(self, identifier: str) -> DeleteResult:
        if not str(identifier).isdigit():
            return DeleteResult(False, self.backend, f"Invalid file id {identifier!r}")
        try:
            async with self._session_maker() as session:
                deleted = await file_service.delete_file(session, int(identifier))
        except SQLAlchemyError as exc:
            logger.error("Database delete of %s failed: %s", identifier, exc)
            return DeleteResult(False, self.backend, str(exc))

        if not deleted:
            return DeleteResult(False, self.backend, "File not found")
        return DeleteResult(True, self.backend)

    async def read(self, identifier: str) -> UploadedFileRecord | None:
        """Load a row together with its byte payload."""
        async with self._session_maker() as session:
            return await file_service.get_file_by_id(session, int(identifier), with_data=True)

    async def repoint(self, identifier: str, stored: StoredFile) -> bool:
        """Record the CDN location of a migrated row."""
        async with self._session_maker() as session:
            return await file_service.mark_migrated(
                session, int(identifier), stored.url, stored.identifier
            )

    async def purge(self, identifier: str | None = None) -> int:
        """Drop stored bytes that are superseded by a CDN copy."""
        async with self._session_maker() as session:
            return await file_service.purge_migrated_data(
                session, int(identifier) if identifier is not None else None
            )

    def get_url(self, identifier: str) -> str:
        return build_local_url(identifier, self._url_prefix)
