"""Testing utilities and fakes for PhotoMetaFixer."""

from .fakes import (
    FakeAlbum,
    FakeAsset,
    FakeLogger,
    FakePhotoLibrary,
    create_test_image,
    setup_test_library,
    write_fake_exiftool,
)

__all__ = [
    "FakeAlbum",
    "FakeAsset",
    "FakeLogger",
    "FakePhotoLibrary",
    "create_test_image",
    "setup_test_library",
    "write_fake_exiftool",
]
