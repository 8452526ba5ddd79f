"""Shared pytest fixtures."""

import io
import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from easel.config import CloudinaryConfig, MediaConfig
from easel.db.base import Base
from easel.lib.storage import CloudinaryStorageBackend, DatabaseStorageBackend
from easel.lib.uploads import UploadedFile


def make_png(width: int = 60, height: int = 60) -> bytes:
    """Build a PNG of random pixels (roughly 10KB at the default size)."""
    img = Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def png_upload(png_bytes):
    return UploadedFile(data=png_bytes, content_type="image/png", filename="sunset.png")


@pytest.fixture
def cloudinary_config():
    return CloudinaryConfig(
        cloud_name="gallery-demo",
        api_key="123456789",
        api_secret="shh",
    )


@pytest.fixture
def media_config(cloudinary_config):
    """Media config with CDN credentials present."""
    return MediaConfig(cloudinary=cloudinary_config, root_folder="easel")


@pytest.fixture
def local_only_config():
    """Media config with no CDN credentials."""
    return MediaConfig(
        cloudinary=CloudinaryConfig(cloud_name="", api_key="", api_secret=""),
        root_folder="easel",
    )


@pytest.fixture
def mock_remote():
    """Cloudinary backend double; async methods are AsyncMocks."""
    remote = MagicMock(spec=CloudinaryStorageBackend)
    remote.put = AsyncMock()
    remote.delete = AsyncMock()
    return remote


@pytest.fixture
def mock_local():
    """Database backend double; async methods are AsyncMocks."""
    local = MagicMock(spec=DatabaseStorageBackend)
    local.put = AsyncMock()
    local.delete = AsyncMock()
    local.read = AsyncMock()
    local.repoint = AsyncMock(return_value=True)
    local.purge = AsyncMock(return_value=0)
    return local


@pytest.fixture
async def sqlite_engine(tmp_path):
    import easel.db.models  # noqa: F401

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'easel-test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(sqlite_engine):
    return async_sessionmaker(sqlite_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def temp_app_yaml(tmp_path):
    """Create a temporary app.yaml file for testing."""
    config_path = tmp_path / "app.yaml"

    def _create_config(config: dict):
        with open(config_path, "w") as f:
            yaml.safe_dump(config, f)
        return config_path

    return _create_config
