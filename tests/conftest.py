"""Shared pytest fixtures for Gallery CMS tests."""

import io
import shutil
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Generator

import httpx
import pytest
import pytest_asyncio
from PIL import Image

from gallerycms.api.main import create_app
from gallerycms.core.asset_db import AssetDB
from gallerycms.core.config import GalleryCmsConfig
from gallerycms.core.database import ContentDatabase
from gallerycms.core.settings_db import SettingsDB
from gallerycms.core.taxonomy_db import TaxonomyDB
from gallerycms.editor.client import CmsClient
from gallerycms.editor.models import Setting
from gallerycms.editor.notifications import Notifier


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> GalleryCmsConfig:
    """Create a test configuration with temporary directories.

    Seeding is disabled so each test starts from an empty settings table;
    the warm-up window is zero so dirty tracking reacts immediately.
    """
    return GalleryCmsConfig(
        data_dir=temp_dir / "data",
        media_dir=temp_dir / "media",
        seed_on_startup=False,
        dirty_warmup_seconds=0.0,
        _env_file=None,
    )


@pytest.fixture
def content_db(test_config: GalleryCmsConfig) -> ContentDatabase:
    """Fresh database with the default category registry."""
    return ContentDatabase(test_config.database_path, test_config.default_categories)


@pytest.fixture
def settings_db(content_db: ContentDatabase) -> SettingsDB:
    return SettingsDB(content_db)


@pytest.fixture
def asset_db(content_db: ContentDatabase) -> AssetDB:
    return AssetDB(content_db)


@pytest.fixture
def taxonomy_db(content_db: ContentDatabase) -> TaxonomyDB:
    return TaxonomyDB(content_db)


@pytest.fixture
def app(test_config: GalleryCmsConfig):
    """FastAPI application bound to the temporary configuration."""
    return create_app(test_config)


@pytest_asyncio.fixture
async def http_client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client that calls the application in-process."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def cms_client(http_client: httpx.AsyncClient) -> CmsClient:
    """Editor API client wired to the in-process application."""
    return CmsClient(http=http_client)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


def make_image_bytes(fmt: str = "PNG", size: tuple[int, int] = (4, 3), color: str = "red") -> bytes:
    """Encode a tiny solid-colour image."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes("JPEG", size=(8, 6), color="blue")


def make_setting(setting_id: int, key: str, value: str = "", setting_type: str = "text",
                 section: str = "faq", page: str = "contact") -> Setting:
    """Build a client-side setting for parser and tracker tests."""
    return Setting(id=setting_id, page=page, section=section, key=key, type=setting_type, value=value)


def make_record(asset_id: int, order: int, is_primary: bool = False, category: str = "uncategorized") -> dict:
    """Build an asset record as the API returns it."""
    return {
        "id": asset_id,
        "collection": "sunrise",
        "filename": f"image-{asset_id}.png",
        "original_name": f"image-{asset_id}.png",
        "order": order,
        "is_primary": is_primary,
        "category": category,
        "alt_text": "",
        "width": 4,
        "height": 3,
        "file_size": 100,
        "rendition_urls": {"original": f"/media/sunrise/image-{asset_id}.png"},
    }


@pytest.fixture
def setting_factory():
    """Return :func:`make_setting` for tests that build settings inline."""
    return make_setting


@pytest.fixture
def record_factory():
    """Return :func:`make_record` for tests that build asset records inline."""
    return make_record


@pytest.fixture
def image_factory():
    """Return :func:`make_image_bytes` for tests that need several images."""
    return make_image_bytes
