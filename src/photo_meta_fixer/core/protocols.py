"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, List, Optional, Protocol, Tuple

from PIL import Image

from .models import Album, AssetRef, AssetResource, BatchJob, BatchReport, DateSource, ItemOutcome


class PhotoLibraryProtocol(Protocol):
    """Protocol for the photo library the fixer reads from."""

    def fetch_albums(self) -> List[Album]:
        """Return albums sorted by display title."""
        ...

    def fetch_photos(self, album: Album) -> List[AssetRef]:
        """Return image assets of an album, oldest creation date first."""
        ...

    def asset_resources(self, asset: AssetRef) -> List[AssetResource]:
        """List the files attached to an asset."""
        ...

    def write_resource_data(
        self,
        resource: AssetResource,
        destination: Path,
        network_access_allowed: bool = True,
    ) -> None:
        """Write a resource's bytes to ``destination``, blocking until done."""
        ...

    def request_thumbnail(
        self, asset: AssetRef, target_size: Tuple[int, int]
    ) -> Optional[Image.Image]:
        """Render a bounded preview of an asset."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...


ProgressCallback = Callable[[str], None]


class ExportService(ABC):
    """Abstract service for processing one asset."""

    @abstractmethod
    def export_asset(self, asset: AssetRef, date_source: DateSource) -> ItemOutcome:
        """Rewrite the capture dates of a single asset."""
        ...


class BatchProcessor(ABC):
    """Abstract batch processor."""

    @abstractmethod
    def process_batch(
        self, job: BatchJob, on_progress: Optional[ProgressCallback] = None
    ) -> BatchReport:
        """Process every asset of a job and return the report."""
        ...
