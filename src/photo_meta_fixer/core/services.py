"""Service implementations for the export and metadata rewrite pipeline."""

import os
import shutil
import subprocess
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .error_handling import BatchOperationContextManager, remove_quietly
from .exceptions import (
    DateNotFoundError,
    ExifToolExecutionFailedError,
    ExifToolLaunchFailedError,
    ExifToolNotFoundError,
    ExportError,
    ExportFailedError,
    ResourceNotFoundError,
    clean_tool_detail,
)
from .image_utils import format_exif_date
from .models import (
    EXIFTOOL_NAME,
    SUPPORT_LIBRARY_SUBPATH,
    AssetRef,
    BatchJob,
    BatchReport,
    DateSource,
    ItemOutcome,
    ResourceType,
)
from .observability import LogContext, MetricsCollector, PerformanceMetrics
from .protocols import (
    BatchProcessor,
    ExportService,
    LoggerProtocol,
    PhotoLibraryProtocol,
    ProgressCallback,
)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class AssetMaterializer:
    """Copies an asset's primary photo resource into a fresh temp file."""

    def __init__(
        self,
        library: PhotoLibraryProtocol,
        logger: LoggerProtocol,
        temp_dir: Path,
    ):
        self._library = library
        self._logger = logger
        self._temp_dir = temp_dir

    def materialize(self, asset: AssetRef) -> Path:
        """
        Write the asset's first photo resource to a new temp file.

        Blocks until the library reports completion. Network access is allowed
        so assets that only live in a remote store are fetched.

        Raises:
            ResourceNotFoundError: The asset has no photo resource.
            ExportFailedError: The library failed to produce the bytes.
        """
        try:
            resources = self._library.asset_resources(asset)
        except Exception as e:  # noqa: BLE001
            raise ExportFailedError(str(e)) from e

        photo = next((r for r in resources if r.type is ResourceType.PHOTO), None)
        if photo is None:
            raise ResourceNotFoundError()

        suffix = Path(photo.original_filename).suffix or ".jpg"
        temp_path = self._temp_dir / f"{uuid.uuid4()}_temp{suffix}"

        try:
            self._library.write_resource_data(
                photo, temp_path, network_access_allowed=True
            )
        except Exception as e:  # noqa: BLE001
            if isinstance(e, PermissionError) or isinstance(e.__cause__, PermissionError):
                self._logger.warning(
                    "Photo library access denied: check that the library grants full access"
                )
            remove_quietly(temp_path)
            raise ExportFailedError(str(e)) from e

        return temp_path


class ExifToolLocator:
    """Finds the bundled exiftool and the environment to run it with."""

    def __init__(self, resources_dir: Path, logger: LoggerProtocol):
        self._resources_dir = resources_dir
        self._logger = logger

    @property
    def executable_path(self) -> Path:
        return self._resources_dir / EXIFTOOL_NAME

    @property
    def support_library_dir(self) -> Path:
        return self._resources_dir / SUPPORT_LIBRARY_SUBPATH

    def locate(self) -> Path:
        path = self.executable_path
        if not path.is_file():
            raise ExifToolNotFoundError()
        return path

    def environment(self) -> Dict[str, str]:
        env = dict(os.environ)
        lib_dir = self.support_library_dir
        if lib_dir.is_dir():
            env["PERL5LIB"] = str(lib_dir)
        else:
            self._logger.warning(f"Support library directory {lib_dir} not found")
        return env


@dataclass
class ToolRun:
    """Exit status and trimmed stderr of one exiftool invocation."""

    exit_code: int
    stderr: str


class MetadataRewriteService:
    """Sets the three capture-date tags of a file through exiftool."""

    def __init__(
        self,
        locator: ExifToolLocator,
        logger: LoggerProtocol,
        runner: Optional[Runner] = None,
    ):
        self._locator = locator
        self._logger = logger
        self._runner = runner or subprocess.run

    @staticmethod
    def build_arguments(formatted_date: str, path: Path) -> List[str]:
        return [
            "-overwrite_original",
            f"-DateTimeOriginal={formatted_date}",
            f"-CreateDate={formatted_date}",
            f"-ModifyDate={formatted_date}",
            str(path),
        ]

    def rewrite(self, path: Path, when: datetime) -> ToolRun:
        """
        Run exiftool on ``path`` and classify the result.

        Raises:
            ExifToolNotFoundError: The bundled executable is missing.
            ExifToolLaunchFailedError: The process could not be started.
            ExifToolExecutionFailedError: The process exited non-zero.
        """
        tool = self._locator.locate()
        formatted = format_exif_date(when)
        command = [str(tool), *self.build_arguments(formatted, path)]
        env = self._locator.environment()

        self._logger.debug(f"Running {' '.join(command)}")
        try:
            completed = self._runner(
                command,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                stdin=subprocess.DEVNULL,
                env=env,
            )
        except OSError as e:
            raise ExifToolLaunchFailedError(str(e)) from e

        stderr = (completed.stderr or "").strip()
        if completed.returncode != 0:
            raise ExifToolExecutionFailedError(completed.returncode, stderr)
        return ToolRun(exit_code=completed.returncode, stderr=stderr)


class MetadataExportService(ExportService):
    """Runs one asset through materialize, rewrite and classify."""

    def __init__(
        self,
        materializer: AssetMaterializer,
        rewriter: MetadataRewriteService,
        logger: LoggerProtocol,
        id_prefix_length: int = 8,
    ):
        self._materializer = materializer
        self._rewriter = rewriter
        self._logger = logger
        self._id_prefix_length = id_prefix_length

    def export_asset(self, asset: AssetRef, date_source: DateSource) -> ItemOutcome:
        """Process a single asset; every ExportError becomes a failed outcome."""
        start_time = time.time()
        short_id = asset.short_id(self._id_prefix_length)
        log_context = LogContext(
            correlation_id=f"asset_{short_id}_{int(start_time * 1000)}",
            operation="export_asset",
            component="metadata_export_service",
        ).with_metadata(asset_id=short_id, date_source=date_source.value)

        outcome = ItemOutcome(asset_id=asset.local_identifier)
        temp_path: Optional[Path] = None
        succeeded = False

        try:
            when = asset.date_for(date_source)
            if when is None:
                raise DateNotFoundError()

            self._logger.debug("Materializing asset", log_context.with_operation("materialize"))
            temp_path = self._materializer.materialize(asset)

            self._logger.debug("Rewriting capture dates", log_context.with_operation("rewrite"))
            run = self._rewriter.rewrite(temp_path, when)

            outcome.success = True
            outcome.exit_code = run.exit_code
            outcome.detail = clean_tool_detail(run.stderr)
            outcome.info = f"EXIF mis à jour pour {temp_path.name}"
            # Kept for the completion handler
            outcome.temp_path = temp_path
            succeeded = True
            self._logger.info("Capture dates rewritten", log_context)

        except ExportError as e:
            outcome.success = False
            outcome.error_kind = e.kind
            outcome.error_message = str(e)
            outcome.detail = e.detail
            outcome.exit_code = getattr(e, "exit_code", None)
            self._logger.error("Asset export failed", log_context.with_metadata(error=str(e)))

        finally:
            # Any non-success exit drops the temp file
            if not succeeded:
                remove_quietly(temp_path)

        outcome.processing_time = time.time() - start_time
        return outcome


class SerialBatchProcessor(BatchProcessor):
    """Processes a job's assets one at a time, in order."""

    def __init__(
        self,
        export_service: ExportService,
        logger: LoggerProtocol,
        id_prefix_length: int = 8,
        output_dir: Optional[Path] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._export_service = export_service
        self._logger = logger
        self._id_prefix_length = id_prefix_length
        self._output_dir = output_dir
        self._metrics_collector = metrics_collector

    def process_batch(
        self, job: BatchJob, on_progress: Optional[ProgressCallback] = None
    ) -> BatchReport:
        """Process batch of assets serially; item i+1 starts after item i is recorded."""
        report = BatchReport()
        total = job.size

        with BatchOperationContextManager(
            operation_name=f"Capture date rewrite ({job.date_source.value})",
            logger=self._logger,
        ) as batch_manager:
            for index, asset in enumerate(job.assets):
                short_id = asset.short_id(self._id_prefix_length)
                if on_progress is not None:
                    on_progress(f"Processing [{index + 1}/{total}]: {short_id}...")

                start_time = time.time()
                outcome = self._export_service.export_asset(asset, job.date_source)
                self.complete(asset, outcome)
                report.record(outcome, short_id)

                if not outcome.success:
                    batch_manager.add_error(outcome.error_message, item_identifier=short_id)

                if self._metrics_collector is not None:
                    self._metrics_collector.record_metric(
                        PerformanceMetrics(
                            operation="export_asset",
                            start_time=start_time,
                            end_time=time.time(),
                            success=outcome.success,
                            error_message=outcome.error_message or None,
                        )
                    )

        return report

    def complete(self, asset: AssetRef, outcome: ItemOutcome) -> None:
        """Completion handler: keep the rewritten file in output_dir or drop it."""
        temp_path = outcome.temp_path
        if temp_path is None:
            return

        if self._output_dir is not None and outcome.success:
            name = asset.filename or temp_path.name
            destination = self._output_dir / f"{asset.short_id(self._id_prefix_length)}_{name}"
            try:
                self._output_dir.mkdir(parents=True, exist_ok=True)
                shutil.move(str(temp_path), str(destination))
                outcome.output_path = destination
            except OSError as e:
                self._logger.error(f"Could not move {temp_path.name} to {destination}: {e}")
                remove_quietly(temp_path)
        else:
            remove_quietly(temp_path)


class ProcessingOrchestrator:
    """Runs a batch job and reports start, progress and the final summary."""

    def __init__(
        self,
        batch_processor: BatchProcessor,
        logger: LoggerProtocol,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._batch_processor = batch_processor
        self._logger = logger
        self._metrics_collector = metrics_collector

    @staticmethod
    def start_message(job: BatchJob) -> str:
        return (
            f"Starting processing for {job.size} photo(s) "
            f"using [{job.date_source.label}]..."
        )

    def run(
        self, job: BatchJob, on_progress: Optional[ProgressCallback] = None
    ) -> BatchReport:
        """Process all assets of ``job``; never raises for per-item failures."""
        start_time = time.time()
        if self._metrics_collector is not None:
            self._metrics_collector.clear_metrics()
        if on_progress is not None:
            on_progress(self.start_message(job))
        self._logger.info(self.start_message(job))

        report = self._batch_processor.process_batch(job, on_progress)

        total_time = time.time() - start_time
        stats: Dict[str, Any] = {}
        if self._metrics_collector is not None:
            stats = self._metrics_collector.get_summary("export_asset")
        self._logger.info(
            f"Batch finished in {total_time:.1f}s: "
            f"{report.success_count} succeeded, {report.failure_count} failed",
            None,
            **stats,
        )
        return report
