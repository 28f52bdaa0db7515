"""Tests for input image loading."""

import pytest

from picset.errors.exceptions import InvalidInputError
from picset.utils.image import load_image


class TestLoadImage:
    def test_reads_bytes(self, tmp_path, sample_image_bytes):
        path = tmp_path / "pixel.png"
        path.write_bytes(sample_image_bytes)
        assert load_image(path) == sample_image_bytes

    @pytest.mark.parametrize("name", ["photo", "photo.avif", "photo.jfif", "PHOTO.JPG"])
    def test_any_file_name_is_read(self, tmp_path, sample_image_bytes, name):
        path = tmp_path / name
        path.write_bytes(sample_image_bytes)
        assert load_image(str(path)) == sample_image_bytes

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidInputError, match="File not found"):
            load_image(tmp_path / "missing.png")

    def test_directory(self, tmp_path):
        folder = tmp_path / "dir.png"
        folder.mkdir()
        with pytest.raises(InvalidInputError, match="Not a file"):
            load_image(folder)
