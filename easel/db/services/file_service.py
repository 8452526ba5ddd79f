"""Uploaded file service: insert, fetch, repoint and delete byte-store rows."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from easel.db.models.uploaded_file import MigrationStatus, UploadedFile


def generate_unique_filename(original_name: str) -> str:
    """Prefix an upload's name with a random UUID to keep it unique."""
    return f"{uuid.uuid4()}-{original_name}"


async def create_file(
    db_session: AsyncSession,
    original_name: str,
    data: bytes,
    mime_type: str,
    category: str = "gallery",
    uploaded_by: str | None = None,
    width: int | None = None,
    height: int | None = None,
) -> UploadedFile:
    """Insert a new row holding the raw bytes and return it with its id."""
    record = UploadedFile(
        original_name=original_name,
        filename=generate_unique_filename(original_name),
        file_data=data,
        file_size=len(data),
        mime_type=mime_type,
        category=category,
        uploaded_by=uploaded_by,
        width=width,
        height=height,
    )
    db_session.add(record)
    await db_session.commit()
    await db_session.refresh(record)
    return record


async def get_file_by_id(
    db_session: AsyncSession,
    file_id: int,
    with_data: bool = False,
) -> UploadedFile | None:
    """Fetch a row by id. The byte payload is only loaded when *with_data* is set."""
    query = select(UploadedFile).where(UploadedFile.id == file_id)
    if with_data:
        query = query.options(undefer(UploadedFile.file_data))
    result = await db_session.execute(query)
    return result.scalar_one_or_none()


async def list_files(
    db_session: AsyncSession,
    category: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[UploadedFile]:
    """List rows newest first, optionally filtered by category."""
    query = select(UploadedFile)
    if category is not None:
        query = query.where(UploadedFile.category == category)
    query = query.order_by(UploadedFile.created_at.desc())
    if offset:
        query = query.offset(offset)
    query = query.limit(limit)

    result = await db_session.execute(query)
    return list(result.scalars().all())


async def get_file_stats(db_session: AsyncSession) -> list[dict]:
    """Count and size totals per category."""
    result = await db_session.execute(
        select(
            UploadedFile.category,
            func.count().label("count"),
            func.sum(UploadedFile.file_size).label("total_size"),
        )
        .group_by(UploadedFile.category)
        .order_by(func.count().desc())
    )
    return [
        {"category": row.category, "count": row.count, "total_size": row.total_size or 0}
        for row in result.all()
    ]


async def mark_migrated(
    db_session: AsyncSession,
    file_id: int,
    remote_url: str,
    remote_identifier: str,
) -> bool:
    """Point a row at its CDN copy. The stored bytes are left in place."""
    result = await db_session.execute(
        update(UploadedFile)
        .where(UploadedFile.id == file_id)
        .values(
            remote_url=remote_url,
            remote_identifier=remote_identifier,
            migration_status=MigrationStatus.MIGRATED.value,
            migrated_at=datetime.now(UTC),
        )
    )
    await db_session.commit()
    return (result.rowcount or 0) > 0


async def purge_migrated_data(
    db_session: AsyncSession,
    file_id: int | None = None,
) -> int:
    """Drop the byte payload of migrated rows and mark them purged.

    Returns the number of rows affected.
    """
    query = (
        update(UploadedFile)
        .where(UploadedFile.migration_status == MigrationStatus.MIGRATED.value)
        .values(file_data=None, migration_status=MigrationStatus.PURGED.value)
    )
    if file_id is not None:
        query = query.where(UploadedFile.id == file_id)
    result = await db_session.execute(query)
    await db_session.commit()
    return result.rowcount or 0


async def delete_file(db_session: AsyncSession, file_id: int) -> bool:
    """Delete a row. Returns True when a row was removed."""
    result = await db_session.execute(
        delete(UploadedFile).where(UploadedFile.id == file_id)
    )
    await db_session.commit()
    return (result.rowcount or 0) > 0
