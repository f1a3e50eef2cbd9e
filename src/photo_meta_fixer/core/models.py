"""Shared data models for PhotoMetaFixer."""

import tempfile
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ExportErrorKind

DEFAULT_RESOURCES_DIR = Path(__file__).resolve().parent.parent / "resources"
EXIFTOOL_NAME = "exiftool"
SUPPORT_LIBRARY_SUBPATH = Path("Image-ExifTool") / "lib"


class DateSource(str, Enum):
    """Which of an asset's two timestamps is written to the EXIF fields."""

    CREATION = "creation"
    MODIFICATION = "modification"

    @property
    def label(self) -> str:
        if self is DateSource.CREATION:
            return "Original creation date"
        return "Modification date (adjusted?)"


class ResourceType(str, Enum):
    """Kind of file backing an asset."""

    PHOTO = "photo"
    ADJUSTMENT_DATA = "adjustment_data"
    VIDEO = "video"


class Album(BaseModel):
    """A photo album in the library."""

    local_identifier: str
    title: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title or "Untitled album"


class AssetRef(BaseModel):
    """A library photo, referenced by its stable identifier."""

    local_identifier: str
    creation_date: Optional[datetime] = None
    modification_date: Optional[datetime] = None
    filename: Optional[str] = None

    def date_for(self, source: DateSource) -> Optional[datetime]:
        if source is DateSource.CREATION:
            return self.creation_date
        return self.modification_date

    def short_id(self, length: int = 8) -> str:
        return self.local_identifier[:length]


class AssetResource(BaseModel):
    """One file attached to an asset."""

    asset_id: str
    type: ResourceType
    original_filename: str
    location: str = ""
    is_local: bool = True


class BatchJob(BaseModel):
    """An ordered, fixed set of assets and the date source to apply."""

    model_config = ConfigDict(frozen=True)

    assets: Tuple[AssetRef, ...]
    date_source: DateSource = DateSource.CREATION

    @property
    def size(self) -> int:
        return len(self.assets)


class ItemOutcome(BaseModel):
    """Result of processing a single asset."""

    asset_id: str
    success: bool = False
    info: str = ""
    detail: str = ""
    error_kind: Optional[ExportErrorKind] = None
    error_message: str = ""
    exit_code: Optional[int] = None
    temp_path: Optional[Path] = None
    output_path: Optional[Path] = None
    processing_time: float = 0.0


class BatchReport(BaseModel):
    """Running tally of a batch, with its final human-readable summary."""

    success_count: int = 0
    failure_count: int = 0
    failures: List[str] = Field(default_factory=list)
    outcomes: List[ItemOutcome] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count

    def record(self, outcome: ItemOutcome, id_prefix: str) -> None:
        self.outcomes.append(outcome)
        if outcome.success:
            self.success_count += 1
        else:
            self.failure_count += 1
            self.failures.append(f"{id_prefix}: {outcome.error_message}")

    def summary(self) -> str:
        message = f"{self.success_count} successes."
        if self.failure_count > 0:
            message += f" {self.failure_count} error(s)."
        if self.failures:
            message += "\nErrors:\n" + "\n".join(self.failures)
        return message


class FixerConfig(BaseModel):
    """Configuration for a PhotoMetaFixer session."""

    library_root: Path
    resources_dir: Path = DEFAULT_RESOURCES_DIR
    temp_dir: Optional[Path] = None
    output_dir: Optional[Path] = None
    id_prefix_length: int = Field(default=8, ge=1)
    thumbnail_size: int = Field(default=100, ge=1)
    debug: bool = False

    @property
    def exiftool_path(self) -> Path:
        return self.resources_dir / EXIFTOOL_NAME

    @property
    def support_library_dir(self) -> Path:
        return self.resources_dir / SUPPORT_LIBRARY_SUBPATH

    @property
    def effective_temp_dir(self) -> Path:
        return self.temp_dir or Path(tempfile.gettempdir())
