"""Photo library backed by a directory tree: one sub-directory per album."""

import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import Image

from .exceptions import LibraryError, with_error_handling
from .image_utils import file_birth_time, make_thumbnail, read_capture_date
from .models import Album, AssetRef, AssetResource, ResourceType
from .protocols import LoggerProtocol

IMAGE_EXTENSIONS = (
    ".jpg",
    ".jpeg",
    ".png",
    ".heic",
    ".heif",
    ".tif",
    ".tiff",
    ".dng",
    ".webp",
)
ADJUSTMENT_EXTENSION = ".aae"

_ID_NAMESPACE = uuid.UUID("7f3c9b8e-2a41-4d59-9d0e-5b7a6c1e4f20")


def identifier_for(relative_path: str) -> str:
    """Stable identifier for a library-relative path."""
    return str(uuid.uuid5(_ID_NAMESPACE, relative_path)).upper()


def _creation_sort_key(asset: AssetRef) -> Tuple[bool, datetime, str]:
    # Assets without a creation date sort first
    return (
        asset.creation_date is not None,
        asset.creation_date or datetime.min,
        asset.filename or "",
    )


class DirectoryPhotoLibrary:
    """Library whose albums are the immediate sub-directories of ``root``."""

    def __init__(self, root: Path, logger: LoggerProtocol):
        self._root = root
        self._logger = logger
        self._asset_paths: Dict[str, Path] = {}
        self._album_paths: Dict[str, Path] = {}

    @property
    def root(self) -> Path:
        return self._root

    @with_error_handling
    def fetch_albums(self) -> List[Album]:
        if not self._root.is_dir():
            raise LibraryError(f"Library root {self._root} is not a directory")

        albums = []
        for path in self._root.iterdir():
            if path.is_dir() and not path.name.startswith("."):
                album = Album(local_identifier=identifier_for(path.name), title=path.name)
                self._album_paths[album.local_identifier] = path
                albums.append(album)

        albums.sort(key=lambda a: a.display_title)
        self._logger.debug(f"Found {len(albums)} albums in {self._root}")
        return albums

    @with_error_handling
    def fetch_photos(self, album: Album) -> List[AssetRef]:
        album_path = self._album_path(album)
        assets = []
        for path in album_path.iterdir():
            if not path.is_file() or path.suffix.lower() not in IMAGE_EXTENSIONS:
                continue
            relative = path.relative_to(self._root).as_posix()
            stat_result = path.stat()
            asset = AssetRef(
                local_identifier=identifier_for(relative),
                creation_date=read_capture_date(path) or file_birth_time(stat_result),
                modification_date=datetime.fromtimestamp(stat_result.st_mtime),
                filename=path.name,
            )
            self._asset_paths[asset.local_identifier] = path
            assets.append(asset)

        assets.sort(key=_creation_sort_key)
        self._logger.debug(f"Found {len(assets)} photos in album {album.display_title}")
        return assets

    def asset_resources(self, asset: AssetRef) -> List[AssetResource]:
        path = self._asset_paths.get(asset.local_identifier)
        if path is None or not path.exists():
            return []

        resources = [
            AssetResource(
                asset_id=asset.local_identifier,
                type=ResourceType.PHOTO,
                original_filename=path.name,
                location=str(path),
            )
        ]
        for candidate in (
            path.with_suffix(ADJUSTMENT_EXTENSION),
            path.with_suffix(ADJUSTMENT_EXTENSION.upper()),
        ):
            if candidate.is_file():
                resources.append(
                    AssetResource(
                        asset_id=asset.local_identifier,
                        type=ResourceType.ADJUSTMENT_DATA,
                        original_filename=candidate.name,
                        location=str(candidate),
                    )
                )
                break
        return resources

    @with_error_handling
    def write_resource_data(
        self,
        resource: AssetResource,
        destination: Path,
        network_access_allowed: bool = True,
    ) -> None:
        # Everything is local, so network access never matters here
        shutil.copyfile(resource.location, destination)

    def request_thumbnail(
        self, asset: AssetRef, target_size: Tuple[int, int]
    ) -> Optional[Image.Image]:
        path = self._asset_paths.get(asset.local_identifier)
        if path is None:
            return None
        try:
            with Image.open(path) as img:
                return make_thumbnail(img, target_size)
        except (OSError, SyntaxError) as e:
            self._logger.warning(f"Thumbnail failed for {asset.local_identifier}: {e}")
            return None

    def _album_path(self, album: Album) -> Path:
        path = self._album_paths.get(album.local_identifier)
        if path is None:
            if album.title is None:
                raise LibraryError(f"Unknown album {album.local_identifier}")
            path = self._root / album.title
        if not path.is_dir():
            raise LibraryError(f"Album {album.display_title} not found")
        return path
