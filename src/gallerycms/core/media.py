"""Media file helpers for uploaded collection images.

Image bytes live under ``media_dir/<collection>/``; the database only keeps
the file name.  Because files can also be removed by hand, the asset layer
reconciles its rows against this directory (see
:meth:`gallerycms.core.asset_db.AssetDB.reconcile`).

Rendition generation (thumbnails, resizing) is handled outside this service;
an asset's rendition map only carries the original file here.
"""

from __future__ import annotations

import io
import logging
import re
import uuid
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import InvalidOperationError

logger = logging.getLogger(__name__)

_COLLECTION_NAME = re.compile(r"[a-z0-9][a-z0-9_-]{0,63}")
_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


class InvalidUploadError(InvalidOperationError):
    """An uploaded file is not an acceptable image."""

    pass


def validate_collection_name(collection: str) -> str:
    """Ensure a collection name is safe to use as a directory name.

    Raises:
        InvalidOperationError: If the name could escape the media directory
    """
    if not _COLLECTION_NAME.fullmatch(collection):
        raise InvalidOperationError(f"Invalid collection name: {collection!r}")
    return collection


def slugify(text: str) -> str:
    """Lowercase ``text`` and collapse anything non-alphanumeric into dashes."""
    slug = _SLUG_CHARS.sub("-", text.lower()).strip("-")
    return slug[:60] or "image"


def inspect_image(data: bytes, allowed_types: list[str], max_bytes: int) -> tuple[str, int, int]:
    """Check that ``data`` is an allowed image and read its dimensions.

    Args:
        data: Raw upload bytes
        allowed_types: Accepted Pillow format names, lowercase
        max_bytes: Largest accepted upload

    Returns:
        Tuple of ``(format, width, height)``

    Raises:
        InvalidUploadError: If the file is empty, too large, unreadable, or
            of a format that is not allowed
    """
    if not data:
        raise InvalidUploadError("Uploaded file is empty")
    if len(data) > max_bytes:
        raise InvalidUploadError(
            f"Uploaded file is too large ({len(data)} bytes). Maximum is {max_bytes} bytes."
        )

    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = (image.format or "").lower()
            width, height = image.size
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidUploadError("Uploaded file is not a readable image") from e

    if image_format not in allowed_types:
        raise InvalidUploadError(f"Image type '{image_format}' is not allowed")

    return image_format, width, height


def store_file(media_dir: Path, collection: str, original_name: str, data: bytes, image_format: str) -> str:
    """Write upload bytes to the collection directory.

    Returns:
        The generated file name (unique per upload)
    """
    extension = "jpg" if image_format == "jpeg" else image_format
    stem = slugify(Path(original_name).stem)
    filename = f"{stem}-{uuid.uuid4().hex[:12]}.{extension}"

    directory = media_dir / validate_collection_name(collection)
    directory.mkdir(parents=True, exist_ok=True)
    (directory / filename).write_bytes(data)

    logger.debug(f"Stored {original_name} as {collection}/{filename}")
    return filename


def delete_file(media_dir: Path, collection: str, filename: str) -> None:
    """Remove a stored file if it still exists."""
    filepath = media_dir / validate_collection_name(collection) / filename
    if filepath.exists():
        filepath.unlink()
        logger.debug(f"Deleted media file {collection}/{filename}")


def file_exists(media_dir: Path, collection: str, filename: str) -> bool:
    """Check whether an asset's file is still present on disk."""
    return (media_dir / collection / filename).exists()


def rendition_urls(collection: str, filename: str) -> dict[str, str]:
    """Build the public URLs for an asset's renditions."""
    return {"original": f"/media/{collection}/{filename}"}
