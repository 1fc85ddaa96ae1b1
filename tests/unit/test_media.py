"""Tests for gallerycms.core.media — upload inspection and file storage."""

from __future__ import annotations

import pytest

from gallerycms.core.errors import InvalidOperationError
from gallerycms.core.media import (
    InvalidUploadError,
    delete_file,
    file_exists,
    inspect_image,
    slugify,
    store_file,
    validate_collection_name,
)

ALLOWED = ["jpeg", "png", "gif", "webp"]


class TestInspectImage:
    def test_png_dimensions(self, png_bytes):
        assert inspect_image(png_bytes, ALLOWED, 1024 * 1024) == ("png", 4, 3)

    def test_jpeg_dimensions(self, jpeg_bytes):
        assert inspect_image(jpeg_bytes, ALLOWED, 1024 * 1024) == ("jpeg", 8, 6)

    def test_not_an_image(self):
        with pytest.raises(InvalidUploadError):
            inspect_image(b"plain text", ALLOWED, 1024)

    def test_empty(self):
        with pytest.raises(InvalidUploadError):
            inspect_image(b"", ALLOWED, 1024)

    def test_too_large(self, png_bytes):
        with pytest.raises(InvalidUploadError):
            inspect_image(png_bytes, ALLOWED, len(png_bytes) - 1)

    def test_disallowed_format(self, image_factory):
        with pytest.raises(InvalidUploadError):
            inspect_image(image_factory("BMP"), ALLOWED, 1024 * 1024)

    def test_upload_error_is_invalid_operation(self):
        assert issubclass(InvalidUploadError, InvalidOperationError)


class TestCollectionNames:
    @pytest.mark.parametrize("name", ["sunrise", "artwork-12", "a_b", "0"])
    def test_valid(self, name):
        assert validate_collection_name(name) == name

    @pytest.mark.parametrize("name", ["", "../x", "Upper", "a/b", "-leading", "x" * 65])
    def test_invalid(self, name):
        with pytest.raises(InvalidOperationError):
            validate_collection_name(name)


class TestFiles:
    def test_slugify(self):
        assert slugify("My Sunrise (final).PNG") == "my-sunrise-final-png"
        assert slugify("***") == "image"

    def test_store_and_delete(self, test_config, png_bytes):
        filename = store_file(test_config.media_dir, "sunrise", "My Sunrise.png", png_bytes, "png")

        assert filename.startswith("my-sunrise-")
        assert filename.endswith(".png")
        assert file_exists(test_config.media_dir, "sunrise", filename)

        delete_file(test_config.media_dir, "sunrise", filename)
        assert not file_exists(test_config.media_dir, "sunrise", filename)

    def test_jpeg_extension(self, test_config, jpeg_bytes):
        filename = store_file(test_config.media_dir, "sunrise", "photo.jpeg", jpeg_bytes, "jpeg")
        assert filename.endswith(".jpg")

    def test_names_are_unique(self, test_config, png_bytes):
        first = store_file(test_config.media_dir, "sunrise", "a.png", png_bytes, "png")
        second = store_file(test_config.media_dir, "sunrise", "a.png", png_bytes, "png")
        assert first != second

    def test_delete_missing_file_is_quiet(self, test_config):
        delete_file(test_config.media_dir, "sunrise", "gone.png")
