"""Serve images stored in the database."""

from __future__ import annotations

from litestar import Controller, get
from litestar.exceptions import NotFoundException
from litestar.response import Redirect, Response
from sqlalchemy.ext.asyncio import AsyncSession

from easel.db.services import file_service


class FilesController(Controller):
    """Raw bytes and metadata of ``uploaded_files`` rows."""

    path = "/api/files"

    @get("/")
    async def list_files(
        self,
        db_session: AsyncSession,
        category: str | None = None,
        page: int = 1,
        per_page: int = 50,
    ) -> list[dict]:
        offset = (max(page, 1) - 1) * per_page
        records = await file_service.list_files(db_session, category=category, limit=per_page, offset=offset)
        return [_metadata(record) for record in records]

    @get("/stats")
    async def file_stats(self, db_session: AsyncSession) -> list[dict]:
        return await file_service.get_file_stats(db_session)

    @get("/{file_id:int}")
    async def get_file(self, db_session: AsyncSession, file_id: int) -> Response:
        record = await file_service.get_file_by_id(db_session, file_id, with_data=True)
        if record is None:
            raise NotFoundException("File not found")

        # Migrated rows are read from the CDN from now on
        if record.remote_url:
            return Redirect(path=record.remote_url, status_code=302)

        if not record.file_data:
            raise NotFoundException("File not found")

        return Response(
            content=record.file_data,
            media_type=record.mime_type,
            headers={"Content-Disposition": f'inline; filename="{record.original_name}"'},
        )

    @get("/{file_id:int}/metadata")
    async def get_file_metadata(self, db_session: AsyncSession, file_id: int) -> dict:
        record = await file_service.get_file_by_id(db_session, file_id)
        if record is None:
            raise NotFoundException("File not found")
        return _metadata(record)


def _metadata(record) -> dict:
    return {
        "id": record.id,
        "original_name": record.original_name,
        "filename": record.filename,
        "file_size": record.file_size,
        "mime_type": record.mime_type,
        "category": record.category,
        "uploaded_by": record.uploaded_by,
        "width": record.width,
        "height": record.height,
        "remote_url": record.remote_url,
        "migration_status": record.migration_status,
        "created_at": record.created_at.isoformat() if record.created_at else None,
    }
