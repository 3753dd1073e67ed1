"""
conftest.py

Test configuration for bingwall tests.

Defines Pytest fixtures for supplying test data to tests across the entire
test suite. Fixtures used within only a single module are defined
directly in that module. Conftest.py should only be used for universal
fixtures to avoid unnecessary performance hit.

Test images are generated with Pillow rather than stored in the repository.
"""

import io
import os
from pathlib import Path

import pytest
from PIL import Image


@pytest.fixture(scope="session")
def image_bytes() -> bytes:
    """
    Return the bytes of a small but valid JPEG image, standing in for a downloaded wallpaper.
    """

    buffer = io.BytesIO()
    Image.new("RGB", (32, 18), color=(30, 90, 160)).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def test_image(tmp_path, image_bytes) -> Path:
    """
    Returns the Path of a valid JPEG image written to the test's temporary directory.
    """

    file_path = tmp_path / "test_image.jpg"
    file_path.write_bytes(image_bytes)
    return file_path


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    """
    Returns an empty, existing wallpaper cache directory.
    """

    directory = tmp_path / "BingWallpapers"
    directory.mkdir()
    return directory


@pytest.fixture
def make_dated_files():
    """
    Factory fixture. Create count files in a directory with strictly increasing modification
    times (the first file is the oldest) and return their paths in creation order.
    """

    def inner(directory: Path, count: int, start: int = 1_600_000_000) -> list[Path]:
        files = []
        for day in range(count):
            file = directory / f"bing_2023-10-{day + 1:02d}.jpg"
            file.write_bytes(b"jpeg")
            mtime = start + day * 86_400
            os.utime(file, (mtime, mtime))
            files.append(file)
        return files

    return inner
