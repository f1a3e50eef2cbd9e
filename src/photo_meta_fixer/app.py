"""Application controller: UI state plus the handlers that drive the pipeline."""

import queue
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Callable, List, Optional, Set

from PIL import Image

from .core.exceptions import LibraryError
from .core.image_utils import format_exif_date
from .core.models import Album, AssetRef, BatchJob, BatchReport, DateSource
from .core.protocols import LoggerProtocol, PhotoLibraryProtocol
from .core.services import ProcessingOrchestrator

ERROR_MARKERS = ("Erreur", "échoué", "Error", "error(s)")


def is_error_message(message: str) -> bool:
    """Whether a status message should be shown with error highlighting."""
    return any(marker in message for marker in ERROR_MARKERS)


@dataclass
class AppState:
    """Everything the user-facing surface renders."""

    albums: List[Album] = field(default_factory=list)
    selected_album: Optional[Album] = None
    photos: List[AssetRef] = field(default_factory=list)
    selected_ids: Set[str] = field(default_factory=set)
    process_message: str = ""
    is_loading_albums: bool = False
    is_loading_photos: bool = False
    is_processing: bool = False
    date_source: DateSource = DateSource.CREATION


class PhotoMetaFixerApp:
    """
    Explicit event handlers over an AppState.

    Batches run on a single background worker. State changes produced while a
    batch runs are queued and applied on the caller's thread by
    ``process_pending_events`` (or ``wait_for_batch``).
    """

    def __init__(
        self,
        library: PhotoLibraryProtocol,
        orchestrator: ProcessingOrchestrator,
        logger: LoggerProtocol,
        thumbnail_size: int = 100,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.state = AppState()
        self._library = library
        self._orchestrator = orchestrator
        self._logger = logger
        self._thumbnail_size = thumbnail_size
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="exif-worker"
        )
        self._events: "queue.Queue[Callable[[], None]]" = queue.Queue()

    def __enter__(self) -> "PhotoMetaFixerApp":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    # Library browsing

    def load_albums(self) -> None:
        self.state.is_loading_albums = True
        self.state.albums = []
        try:
            self.state.albums = self._library.fetch_albums()
        except LibraryError as e:
            self.state.process_message = f"Error loading albums: {e}"
        finally:
            self.state.is_loading_albums = False

    def find_album(self, title_or_id: str) -> Optional[Album]:
        for album in self.state.albums:
            if title_or_id in (album.title, album.local_identifier):
                return album
        return None

    def select_album(self, album: Optional[Album]) -> None:
        self.state.selected_album = album
        self.state.photos = []
        self.state.selected_ids = set()
        self.state.process_message = ""
        if album is not None:
            self._fetch_photos(album)

    def refresh_photo_list(self) -> None:
        album = self.state.selected_album
        if album is None or self.state.is_loading_photos:
            return
        self._logger.info(f"Refreshing photo list for album {album.display_title}")
        self.state.process_message = ""
        self._fetch_photos(album)

    def _fetch_photos(self, album: Album) -> None:
        self.state.is_loading_photos = True
        self.state.photos = []
        try:
            self.state.photos = self._library.fetch_photos(album)
        except LibraryError as e:
            self.state.process_message = f"Error loading photos: {e}"
        finally:
            self.state.is_loading_photos = False

        known_ids = {asset.local_identifier for asset in self.state.photos}
        self.state.selected_ids &= known_ids

    # Selection

    def toggle_selection(self, asset_id: str) -> None:
        if asset_id in self.state.selected_ids:
            self.state.selected_ids.discard(asset_id)
        else:
            self.state.selected_ids.add(asset_id)

    @property
    def all_selected(self) -> bool:
        return self.state.selected_ids == {a.local_identifier for a in self.state.photos}

    def toggle_select_all(self) -> None:
        if self.all_selected:
            self.state.selected_ids = set()
        else:
            self.state.selected_ids = {a.local_identifier for a in self.state.photos}

    @property
    def select_all_label(self) -> str:
        return "Deselect all" if self.all_selected else "Select all"

    def set_date_source(self, source: DateSource) -> None:
        self.state.date_source = source

    def date_to_apply(self, asset: AssetRef) -> Optional[datetime]:
        return asset.date_for(self.state.date_source)

    def preview_text(self, asset: AssetRef) -> str:
        when = self.date_to_apply(asset)
        if when is None:
            return "Will apply: source date unknown"
        return f"Will apply ({self.state.date_source.label[:4]}): {format_exif_date(when)}"

    def thumbnail(self, asset: AssetRef) -> Image.Image:
        size = (self._thumbnail_size, self._thumbnail_size)
        image = self._library.request_thumbnail(asset, size)
        if image is None:
            self._logger.warning(f"Thumbnail unavailable for {asset.local_identifier}")
            return Image.new("RGB", size, "lightgray")
        return image

    # Batch processing

    @property
    def can_apply(self) -> bool:
        return bool(self.state.selected_ids) and not self.state.is_processing

    @property
    def apply_label(self) -> str:
        return f"Modify EXIF for {len(self.state.selected_ids)} selected photo(s)"

    @property
    def status_is_error(self) -> bool:
        return is_error_message(self.state.process_message)

    def apply(self) -> Optional["Future[BatchReport]"]:
        """Start a batch over the selected photos, in album order."""
        if not self.can_apply:
            return None

        job = BatchJob(
            assets=tuple(
                a for a in self.state.photos if a.local_identifier in self.state.selected_ids
            ),
            date_source=self.state.date_source,
        )
        self.state.is_processing = True
        self.state.process_message = ProcessingOrchestrator.start_message(job)
        return self._executor.submit(self._run_batch, job)

    def _run_batch(self, job: BatchJob) -> BatchReport:
        try:
            report = self._orchestrator.run(job, on_progress=self._post_message)
        except Exception as e:
            self._post(partial(self._finish_batch, f"Error: batch aborted: {e}"))
            raise
        self._post(partial(self._finish_batch, report.summary()))
        return report

    def _finish_batch(self, message: str) -> None:
        self.state.process_message = message
        self.state.is_processing = False

    def _set_message(self, message: str) -> None:
        self.state.process_message = message

    def _post_message(self, message: str) -> None:
        self._post(partial(self._set_message, message))

    def _post(self, update: Callable[[], None]) -> None:
        self._events.put(update)

    def process_pending_events(
        self, on_update: Optional[Callable[[str], None]] = None
    ) -> int:
        """
        Apply queued state updates on the calling thread.

        ``on_update`` receives the status message after every applied update.
        Returns the number of updates applied.
        """
        applied = 0
        while True:
            try:
                update = self._events.get_nowait()
            except queue.Empty:
                return applied
            update()
            applied += 1
            if on_update is not None:
                on_update(self.state.process_message)

    def wait_for_batch(
        self,
        future: "Future[BatchReport]",
        on_update: Optional[Callable[[str], None]] = None,
        poll_interval: float = 0.05,
    ) -> BatchReport:
        """Poll a running batch, applying its updates until it finishes."""
        while True:
            # Every update is queued before the future resolves
            done = future.done()
            self.process_pending_events(on_update)
            if done:
                break
            time.sleep(poll_interval)
        return future.result()
