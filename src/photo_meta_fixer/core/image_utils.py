"""Date formatting and Pillow helpers for PhotoMetaFixer."""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, ImageOps

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
DISPLAY_DATE_FORMAT = "%d %b %Y %H:%M:%S"

EXIF_IFD_POINTER = 0x8769
TAG_DATETIME_ORIGINAL = 36867
TAG_CREATE_DATE = 36868


def to_local(value: datetime) -> datetime:
    """Return the local wall-clock representation of ``value``.

    Naive datetimes are taken to already be local; aware ones are converted
    to the local zone and stripped of tzinfo.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def format_exif_date(value: datetime) -> str:
    """Format a timestamp the way exiftool expects date tags.

    Built field by field: ``%Y`` is not zero-padded to four digits on every
    platform.
    """
    v = to_local(value)
    return (
        f"{v.year:04d}:{v.month:02d}:{v.day:02d} "
        f"{v.hour:02d}:{v.minute:02d}:{v.second:02d}"
    )


def format_display_date(value: Optional[datetime], unknown: str = "Unknown") -> str:
    """Medium-length date for listings."""
    if value is None:
        return unknown
    return to_local(value).strftime(DISPLAY_DATE_FORMAT)


def parse_exif_datetime(raw: object) -> Optional[datetime]:
    """
    Parse an EXIF date string such as ``2021:05:01 10:00:00``.

    Returns None for empty, blank-filled ("0000:00:00 00:00:00") or
    malformed values.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("ascii", errors="ignore")
    if not isinstance(raw, str):
        return None
    text = raw.strip().rstrip("\x00")
    if not text:
        return None
    try:
        return datetime.strptime(text[:19], EXIF_DATE_FORMAT)
    except ValueError:
        return None


def read_capture_date(path: Path) -> Optional[datetime]:
    """Read DateTimeOriginal (or CreateDate) from an image file, if any."""
    try:
        with Image.open(path) as img:
            exif = img.getexif()
    except (OSError, SyntaxError):
        return None

    exif_ifd = exif.get_ifd(EXIF_IFD_POINTER)
    for tag in (TAG_DATETIME_ORIGINAL, TAG_CREATE_DATE):
        parsed = parse_exif_datetime(exif_ifd.get(tag))
        if parsed is not None:
            return parsed
    return None


def file_birth_time(stat_result: os.stat_result) -> Optional[datetime]:
    """Creation time of a file where the platform records one."""
    birth = getattr(stat_result, "st_birthtime", None)
    if birth is None:
        return None
    return datetime.fromtimestamp(birth)


def make_thumbnail(img: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Aspect-fill ``img`` into a box of ``size``, cropping the overflow."""
    thumb = ImageOps.fit(ImageOps.exif_transpose(img), size)
    if thumb.mode not in ("RGB", "RGBA"):
        thumb = thumb.convert("RGB")
    return thumb
