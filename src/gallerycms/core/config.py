"""Configuration management for the Gallery CMS.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the GALLERYCMS_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (GALLERYCMS_* prefix)
2. .env file in the project root
3. Default values defined in GalleryCmsConfig

Example .env file:
    GALLERYCMS_DATA_DIR=data
    GALLERYCMS_MEDIA_DIR=media
    GALLERYCMS_SERVER_PORT=7860
    GALLERYCMS_DIRTY_WARMUP_SECONDS=0.5

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Both the API server and the editor client read from it unless they are handed
an explicit instance (tests always pass their own).

Usage Example
-------------
    from gallerycms.core.config import config

    print(config.database_path)
    print(config.api_base_url)

Directory Management
--------------------
The configuration automatically creates required directories on initialization:
- data_dir: Holds the SQLite content database
- media_dir: Holds uploaded image files, one subdirectory per collection
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GalleryCmsConfig(BaseSettings):
    """Main configuration for the Gallery CMS.

    Attributes
    ----------
    Paths:
        data_dir : Path
            Directory holding the SQLite database
        media_dir : Path
            Directory for uploaded images (served at ``/media``)
        database_name : str
            File name of the SQLite database inside ``data_dir``

    Server Settings:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Port for uvicorn (1024-65535)
        seed_on_startup : bool
            Insert the starter page settings when the database is empty

    Upload Settings:
        max_upload_bytes : int
            Largest accepted image upload
        allowed_image_types : list[str]
            Accepted image formats as reported by Pillow (lowercase)

    Taxonomy Settings:
        default_categories : list[str]
            Category registry created with a fresh database

    Editor Settings:
        api_base_url : str
            Base URL the editor client talks to
        dirty_warmup_seconds : float
            Window after mount during which edits are treated as the
            rich-text editor's own initialisation output

    Examples
    --------
        >>> custom_config = GalleryCmsConfig(
        ...     data_dir="/tmp/cms-data",
        ...     media_dir="/tmp/cms-media",
        ...     dirty_warmup_seconds=0.0,
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GALLERYCMS_",
        case_sensitive=False,
    )

    # Paths
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the SQLite content database",
    )
    media_dir: Path = Field(
        default=Path("media"),
        description="Directory for uploaded image files",
    )
    database_name: str = Field(
        default="gallerycms.db",
        description="SQLite database file name inside data_dir",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    seed_on_startup: bool = Field(
        default=True,
        description="Seed starter page settings into an empty database",
    )

    # Upload settings
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted size of a single uploaded image",
        ge=1,
    )
    allowed_image_types: list[str] = Field(
        default=["jpeg", "png", "gif", "webp"],
        description="Image formats accepted on upload",
    )

    # Taxonomy settings
    default_categories: list[str] = Field(
        default=["general", "hero", "gallery", "blog", "uncategorized"],
        description="Category registry for a fresh database",
    )

    # Editor settings
    api_base_url: str = Field(
        default="http://127.0.0.1:7860",
        description="Base URL of the CMS API used by the editor client",
    )
    dirty_warmup_seconds: float = Field(
        default=0.5,
        description="Warm-up window after mount during which edits never mark the page dirty",
        ge=0.0,
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.media_dir.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        """Full path of the SQLite database file."""
        return self.data_dir / self.database_name


# Global configuration instance
# Loads values from environment variables (GALLERYCMS_* prefix) and .env file.
config = GalleryCmsConfig()
