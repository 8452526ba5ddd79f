import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file early so env vars are available for YAML interpolation
_env_file = Path(__file__).parent.parent / ".env"
load_dotenv(_env_file)

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")

ALLOWED_IMAGE_TYPES = [
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
]


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def get_config_path() -> Path:
    """Return the app.yaml path, honouring ``EASEL_CONFIG``."""
    override = os.environ.get("EASEL_CONFIG")
    if override:
        return Path(override)
    return Path.cwd() / "app.yaml"


def load_app_config() -> dict:
    """Load and parse app.yaml with environment variable interpolation."""
    config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"app.yaml not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = "sqlite+aiosqlite:///./easel.db"
    pool_size: int = 5
    pool_overflow: int = 10
    pool_timeout: int = 30
    echo: bool = False
    create_all: bool = True


class CloudinaryConfig(BaseSettings):
    """Credentials for the Cloudinary CDN backend.

    Read from ``CLOUDINARY_*`` environment variables unless app.yaml sets them.
    Leaving any credential empty is a valid configuration: every upload then
    goes to the database store.
    """

    model_config = SettingsConfigDict(env_prefix="CLOUDINARY_", extra="ignore")

    cloud_name: str = ""
    api_key: str = ""
    api_secret: str = ""
    cdn_host: str = "res.cloudinary.com"
    timeout: int = 60

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


class MediaConfig(BaseModel):
    """Media gateway configuration."""

    cloudinary: CloudinaryConfig = Field(default_factory=CloudinaryConfig)
    root_folder: str = "easel"
    local_url_prefix: str = "/api/files"
    max_upload_size: int = 4 * 1024 * 1024
    max_batch_files: int = 10
    allowed_types: list[str] = Field(default_factory=lambda: list(ALLOWED_IMAGE_TYPES))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EASEL_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = False

    # Loaded from app.yaml
    db: DatabaseConfig = DatabaseConfig()
    media: MediaConfig = Field(default_factory=MediaConfig)


@lru_cache
def get_settings() -> Settings:
    """Load settings from .env and app.yaml."""
    base_settings = Settings()

    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return base_settings

    updates = {}

    if "db" in app_config:
        updates["db"] = DatabaseConfig(**app_config["db"])

    if "media" in app_config:
        updates["media"] = MediaConfig(**app_config["media"])

    if "debug" in app_config:
        updates["debug"] = bool(app_config["debug"])

    if updates:
        return base_settings.model_copy(update=updates)

    return base_settings
