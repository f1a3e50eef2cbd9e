"""Core models, services and utilities for PhotoMetaFixer."""

from .logging_config import get_logger, setup_logger
from .exceptions import (
    PhotoMetaFixerError,
    ConfigurationError,
    LibraryError,
    ExportError,
    ExportErrorKind,
    ResourceNotFoundError,
    ExportFailedError,
    DateNotFoundError,
    ExifToolNotFoundError,
    ExifToolExecutionFailedError,
    ExifToolLaunchFailedError,
)
from .models import (
    Album,
    AssetRef,
    AssetResource,
    BatchJob,
    BatchReport,
    DateSource,
    FixerConfig,
    ItemOutcome,
    ResourceType,
)
from .image_utils import format_display_date, format_exif_date

__all__ = [
    "Album",
    "AssetRef",
    "AssetResource",
    "BatchJob",
    "BatchReport",
    "DateSource",
    "FixerConfig",
    "ItemOutcome",
    "ResourceType",
    "format_display_date",
    "format_exif_date",
    "setup_logger",
    "get_logger",
    "PhotoMetaFixerError",
    "ConfigurationError",
    "LibraryError",
    "ExportError",
    "ExportErrorKind",
    "ResourceNotFoundError",
    "ExportFailedError",
    "DateNotFoundError",
    "ExifToolNotFoundError",
    "ExifToolExecutionFailedError",
    "ExifToolLaunchFailedError",
]
