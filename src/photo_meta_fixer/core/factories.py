"""Factory classes for creating configured service instances."""

from typing import Optional

from .library import DirectoryPhotoLibrary
from .models import FixerConfig
from .observability import MetricsCollector, StructuredLogger
from .protocols import LoggerProtocol, PhotoLibraryProtocol
from .services import (
    AssetMaterializer,
    ExifToolLocator,
    MetadataExportService,
    MetadataRewriteService,
    ProcessingOrchestrator,
    Runner,
    SerialBatchProcessor,
)


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, debug: bool = False) -> StructuredLogger:
        """Create a configured logger instance."""
        return StructuredLogger(name, debug=debug)


class LibraryFactory:
    """Factory for creating photo library instances."""

    @staticmethod
    def create_library(
        config: FixerConfig, logger: Optional[LoggerProtocol] = None
    ) -> DirectoryPhotoLibrary:
        if logger is None:
            logger = LoggerFactory.create_logger("photo-meta-fixer.library", config.debug)
        return DirectoryPhotoLibrary(config.library_root, logger)


class ProcessingPipelineFactory:
    """Factory for creating the complete processing pipeline."""

    @staticmethod
    def create_pipeline(
        config: FixerConfig,
        library: PhotoLibraryProtocol,
        logger: Optional[LoggerProtocol] = None,
        runner: Optional[Runner] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> ProcessingOrchestrator:
        """Create a fully configured processing pipeline."""
        if logger is None:
            logger = LoggerFactory.create_logger("photo-meta-fixer.pipeline", config.debug)
        if metrics_collector is None:
            metrics_collector = MetricsCollector()

        materializer = AssetMaterializer(library, logger, config.effective_temp_dir)
        locator = ExifToolLocator(config.resources_dir, logger)
        rewriter = MetadataRewriteService(locator, logger, runner=runner)
        export_service = MetadataExportService(
            materializer, rewriter, logger, id_prefix_length=config.id_prefix_length
        )
        batch_processor = SerialBatchProcessor(
            export_service,
            logger,
            id_prefix_length=config.id_prefix_length,
            output_dir=config.output_dir,
            metrics_collector=metrics_collector,
        )

        return ProcessingOrchestrator(
            batch_processor=batch_processor,
            logger=logger,
            metrics_collector=metrics_collector,
        )
