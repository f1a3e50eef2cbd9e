"""Tests for date formatting and image helpers."""

import io
import os
from datetime import datetime, timedelta, timezone

import pytest
from PIL import Image

from photo_meta_fixer.core.image_utils import (
    file_birth_time,
    format_display_date,
    format_exif_date,
    make_thumbnail,
    parse_exif_datetime,
    read_capture_date,
    to_local,
)
from photo_meta_fixer.testing.fakes import create_test_image


class TestFormatExifDate:
    """Tests for format_exif_date."""

    def test_naive_datetime_used_as_is(self):
        """Test that naive datetimes keep their wall-clock components."""
        assert format_exif_date(datetime(2021, 5, 1, 10, 0, 0)) == "2021:05:01 10:00:00"

    @pytest.mark.parametrize(
        "value, expected",
        [
            (datetime(2003, 1, 2, 3, 4, 5), "2003:01:02 03:04:05"),
            (datetime(999, 1, 2, 3, 4, 5), "0999:01:02 03:04:05"),
            (datetime(42, 12, 31, 23, 59, 59), "0042:12:31 23:59:59"),
        ],
    )
    def test_zero_padding(self, value, expected):
        """Test padding of every component, the year to four digits."""
        assert format_exif_date(value) == expected

    def test_aware_datetime_uses_local_time(self):
        """Test that aware datetimes are rendered in local time."""
        moment = datetime(2021, 5, 1, 10, 0, 0, tzinfo=timezone(timedelta(hours=5)))
        expected = moment.astimezone().strftime("%Y:%m:%d %H:%M:%S")

        assert format_exif_date(moment) == expected

    def test_to_local_strips_tzinfo(self):
        """Test that to_local returns a naive datetime."""
        moment = datetime(2021, 5, 1, 10, 0, 0, tzinfo=timezone.utc)

        assert to_local(moment).tzinfo is None


class TestFormatDisplayDate:
    """Tests for format_display_date."""

    def test_unknown(self):
        """Test the placeholder for missing dates."""
        assert format_display_date(None) == "Unknown"
        assert format_display_date(None, unknown="n/a") == "n/a"

    def test_known(self):
        """Test that a date is rendered with its time."""
        text = format_display_date(datetime(2021, 5, 1, 10, 0, 0))

        assert "2021" in text
        assert "10:00:00" in text


class TestParseExifDatetime:
    """Tests for parse_exif_datetime."""

    def test_valid(self):
        """Test parsing of a standard EXIF date."""
        assert parse_exif_datetime("2021:05:01 10:00:00") == datetime(2021, 5, 1, 10, 0, 0)

    def test_bytes_and_padding(self):
        """Test byte values and NUL padding."""
        assert parse_exif_datetime(b"2021:05:01 10:00:00\x00") == datetime(2021, 5, 1, 10, 0, 0)

    def test_invalid_values(self):
        """Test values that are not usable dates."""
        assert parse_exif_datetime(None) is None
        assert parse_exif_datetime("") is None
        assert parse_exif_datetime("0000:00:00 00:00:00") is None
        assert parse_exif_datetime("yesterday") is None
        assert parse_exif_datetime(12345) is None


class TestReadCaptureDate:
    """Tests for read_capture_date."""

    def test_image_without_exif(self, tmp_path):
        """Test that an image without EXIF has no capture date."""
        path = tmp_path / "plain.jpg"
        path.write_bytes(create_test_image(20, 20))

        assert read_capture_date(path) is None

    def test_not_an_image(self, tmp_path):
        """Test that unreadable files have no capture date."""
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"not an image")

        assert read_capture_date(path) is None


class TestFileBirthTime:
    """Tests for file_birth_time."""

    def test_follows_platform_support(self, tmp_path):
        """Test birth time is returned only where the platform records it."""
        path = tmp_path / "file.txt"
        path.write_text("x")
        stat_result = os.stat(path)

        result = file_birth_time(stat_result)

        if hasattr(stat_result, "st_birthtime"):
            assert isinstance(result, datetime)
        else:
            assert result is None


class TestMakeThumbnail:
    """Tests for make_thumbnail."""

    def test_fills_target_box(self):
        """Test that the thumbnail fills the requested size."""
        image = Image.open(io.BytesIO(create_test_image(300, 150)))

        thumb = make_thumbnail(image, (100, 100))

        assert thumb.size == (100, 100)
        assert thumb.mode == "RGB"

    def test_converts_palette_images(self):
        """Test that non-RGB modes are converted."""
        image = Image.new("L", (50, 80), color=128)

        thumb = make_thumbnail(image, (40, 40))

        assert thumb.size == (40, 40)
        assert thumb.mode == "RGB"
