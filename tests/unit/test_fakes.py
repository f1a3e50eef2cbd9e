"""Tests for fake implementations to ensure they work correctly."""

import io
import os
import time
from datetime import datetime

import pytest
from PIL import Image

from photo_meta_fixer.core.exceptions import LibraryError
from photo_meta_fixer.core.models import Album, ResourceType
from photo_meta_fixer.testing.fakes import (
    FakeLogger,
    FakePhotoLibrary,
    create_test_image,
    setup_test_library,
    write_fake_exiftool,
)


class TestFakePhotoLibrary:
    """Tests for FakePhotoLibrary to ensure it behaves correctly."""

    def test_create_album(self):
        """Test album creation."""
        library = FakePhotoLibrary()

        album = library.create_album("Trips")

        assert album.album.title == "Trips"
        assert album.album.local_identifier == "album-Trips"
        assert library.fetch_albums() == [album.album]

    def test_albums_sorted_by_title(self):
        """Test album ordering."""
        library = FakePhotoLibrary()
        library.create_album("Zoo")
        library.create_album("Beach")

        titles = [a.title for a in library.fetch_albums()]

        assert titles == ["Beach", "Zoo"]

    def test_fetch_photos_undated_first(self):
        """Test that assets without creation date come first."""
        library = FakePhotoLibrary()
        album = library.create_album("Trips")
        library.add_asset(album, "LATE", creation_date=datetime(2022, 1, 1))
        library.add_asset(album, "NONE", creation_date=None)
        library.add_asset(album, "EARLY", creation_date=datetime(2020, 1, 1))

        ids = [a.local_identifier for a in library.fetch_photos(album.album)]

        assert ids == ["NONE", "EARLY", "LATE"]

    def test_fetch_photos_unknown_album(self):
        """Test fetching photos of an album the library does not hold."""
        library = FakePhotoLibrary()

        with pytest.raises(LibraryError, match="not found"):
            library.fetch_photos(Album(local_identifier="missing"))

    def test_asset_resources(self):
        """Test resources follow the asset's configured types."""
        library = FakePhotoLibrary()
        album = library.create_album("Trips")
        asset = library.add_asset(
            album,
            "A",
            resource_types=(ResourceType.ADJUSTMENT_DATA, ResourceType.PHOTO),
            original_filename="IMG_7.HEIC",
        )

        resources = library.asset_resources(asset.ref)

        assert [r.type for r in resources] == [ResourceType.ADJUSTMENT_DATA, ResourceType.PHOTO]
        assert all(r.original_filename == "IMG_7.HEIC" for r in resources)

    def test_write_resource_data(self, tmp_path):
        """Test that bytes are written and the call recorded."""
        library = FakePhotoLibrary()
        album = library.create_album("Trips")
        asset = library.add_asset(album, "A", data=b"payload")
        destination = tmp_path / "out.jpg"

        library.write_resource_data(library.asset_resources(asset.ref)[0], destination)

        assert destination.read_bytes() == b"payload"
        assert library.write_calls == [("A", destination, True)]

    def test_remote_asset_without_network(self, tmp_path):
        """Test that remote assets need network access."""
        library = FakePhotoLibrary()
        album = library.create_album("Trips")
        asset = library.add_asset(album, "A", is_local=False)
        resource = library.asset_resources(asset.ref)[0]

        with pytest.raises(LibraryError, match="Network access"):
            library.write_resource_data(resource, tmp_path / "out.jpg", network_access_allowed=False)

    def test_asset_error(self, tmp_path):
        """Test per-asset injected errors."""
        library = FakePhotoLibrary()
        album = library.create_album("Trips")
        asset = library.add_asset(album, "A", error=OSError("disk gone"))

        with pytest.raises(OSError, match="disk gone"):
            library.write_resource_data(library.asset_resources(asset.ref)[0], tmp_path / "x")
        assert not (tmp_path / "x").exists()

    def test_failure_mode(self):
        """Test failure mode simulation."""
        library = FakePhotoLibrary()
        library.set_failure_mode(True, "Library offline")

        with pytest.raises(LibraryError, match="Library offline"):
            library.fetch_albums()

        library.set_failure_mode(False)
        assert library.fetch_albums() == []

    def test_delay_simulation(self, tmp_path):
        """Test delay simulation on writes."""
        library = FakePhotoLibrary()
        album = library.create_album("Trips")
        asset = library.add_asset(album, "A")
        library.set_delay(0.05)

        start = time.time()
        library.write_resource_data(library.asset_resources(asset.ref)[0], tmp_path / "x")

        assert time.time() - start >= 0.04

    def test_request_thumbnail(self):
        """Test thumbnails for image and non-image data."""
        library = FakePhotoLibrary()
        album = library.create_album("Trips")
        image_asset = library.add_asset(album, "IMG", data=create_test_image(200, 100))
        bogus_asset = library.add_asset(album, "BOGUS", data=b"not an image")

        thumb = library.request_thumbnail(image_asset.ref, (50, 50))

        assert thumb is not None
        assert max(thumb.size) == 50
        assert library.request_thumbnail(bogus_asset.ref, (50, 50)) is None


class TestFakeLogger:
    """Tests for FakeLogger."""

    def test_logging_methods(self):
        """Test all logging methods."""
        logger = FakeLogger()

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")

        assert [log["level"] for log in logger.get_logs()] == ["DEBUG", "INFO", "WARNING", "ERROR"]

    def test_log_filtering(self):
        """Test log filtering by level."""
        logger = FakeLogger()
        logger.info("Info 1")
        logger.error("Error 1")
        logger.info("Info 2")

        assert [log["message"] for log in logger.get_logs("INFO")] == ["Info 1", "Info 2"]

    def test_log_clearing(self):
        """Test log clearing."""
        logger = FakeLogger()
        logger.info("Test message")

        logger.clear_logs()

        assert logger.get_logs() == []

    def test_log_with_kwargs(self):
        """Test logging with additional kwargs."""
        logger = FakeLogger()

        logger.info("Processing", None, item_count=10)

        assert logger.get_logs()[0]["item_count"] == 10


class TestUtilityFunctions:
    """Tests for utility functions."""

    def test_create_test_image(self):
        """Test test image creation."""
        image_data = create_test_image(64, 32, "PNG")

        with Image.open(io.BytesIO(image_data)) as img:
            assert img.size == (64, 32)
            assert img.format == "PNG"

    def test_setup_test_library(self):
        """Test the prepared library."""
        library = setup_test_library()

        albums = library.fetch_albums()
        holidays = next(a for a in albums if a.title == "Holidays")
        photos = library.fetch_photos(holidays)

        assert [a.title for a in albums] == ["Archive", "Holidays"]
        assert len(photos) == 3
        assert photos[2].modification_date is None

    def test_write_fake_exiftool(self, tmp_path):
        """Test the fake tool's layout and permissions."""
        script = write_fake_exiftool(tmp_path / "res", with_support_library=True)

        assert script == tmp_path / "res" / "exiftool"
        assert os.access(script, os.X_OK)
        assert (tmp_path / "res" / "Image-ExifTool" / "lib").is_dir()

    def test_write_fake_exiftool_not_executable(self, tmp_path):
        """Test a fake tool that cannot be launched."""
        script = write_fake_exiftool(tmp_path / "res", executable=False)

        assert script.is_file()
        assert not os.access(script, os.X_OK)
