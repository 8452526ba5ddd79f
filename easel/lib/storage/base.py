"""Storage backend protocol and common types."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from easel.lib.categories import Category, TransformProfile
    from easel.lib.uploads import UploadedFile


class Backend(str, Enum):
    """The two places an asset's bytes can live."""

    REMOTE = "remote"
    LOCAL = "local"


@dataclass
class StoredFile:
    """An asset successfully written to a backend."""

    backend: Backend
    identifier: str
    url: str
    content_type: str
    size: int
    original_name: str = ""
    category: str = "gallery"
    width: int | None = None
    height: int | None = None
    format: str | None = None
    owner_id: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["backend"] = self.backend.value
        return data


@dataclass
class StorageError:
    """A backend call that did not succeed."""

    backend: Backend
    message: str


StorageResult = Union[StoredFile, StorageError]


@dataclass
class DeleteResult:
    success: bool
    backend: Backend | None
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "backend": self.backend.value if self.backend else None,
            "error": self.error,
        }


@runtime_checkable
class StorageBackend(Protocol):
    """Interface shared by the CDN and database backends.

    Backend calls never raise for provider or transport failures; they return
    a :class:`StorageError` instead so callers can branch on the outcome.
    """

    backend: Backend

    async def put(
        self,
        file: UploadedFile,
        category: Category,
        profile: TransformProfile,
        owner_id: str | None = None,
    ) -> StorageResult:
        """Store the upload and describe where it landed."""
        ...

    async def delete(self, identifier: str) -> DeleteResult:
        """Remove the bytes addressed by *identifier*."""
        ...

    def get_url(self, identifier: str) -> str:
        """Return the plain delivery URL for *identifier*."""
        ...
