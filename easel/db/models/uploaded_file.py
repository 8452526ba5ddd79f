"""Uploaded file model for the database byte store."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Integer, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from easel.db.base import Base


class MigrationStatus(str, Enum):
    """Where the authoritative bytes of a database-stored file live."""

    LOCAL = "local"
    MIGRATED = "migrated"
    PURGED = "purged"


class UploadedFile(Base):
    """An image stored as a binary column, optionally repointed to the CDN."""

    __tablename__ = "uploaded_files"

    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    filename: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    file_data: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True, deferred=True)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(128), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="gallery", index=True)
    uploaded_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Pointer to the CDN copy once migrated
    remote_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    remote_identifier: Mapped[str | None] = mapped_column(String(512), nullable=True)
    migration_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=MigrationStatus.LOCAL.value, index=True
    )
    migrated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_migrated(self) -> bool:
        return self.migration_status != MigrationStatus.LOCAL.value
