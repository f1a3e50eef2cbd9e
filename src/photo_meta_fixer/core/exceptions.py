"""Exception hierarchy for PhotoMetaFixer, including the per-item export errors."""

from __future__ import annotations

from enum import Enum
from functools import wraps
from typing import Any, Callable, TypeVar

from .logging_config import get_logger

BENIGN_TOOL_CONFIRMATION = "1 image files updated"


class PhotoMetaFixerError(Exception):
    """Base exception for all PhotoMetaFixer errors."""


class ConfigurationError(PhotoMetaFixerError):
    """Error raised for invalid configuration options."""


class LibraryError(PhotoMetaFixerError):
    """Error raised by a photo library collaborator."""


class ExportErrorKind(str, Enum):
    """The six ways processing a single asset can fail."""

    RESOURCE_NOT_FOUND = "resource_not_found"
    EXPORT_FAILED = "export_failed"
    DATE_NOT_FOUND = "date_not_found"
    EXIFTOOL_NOT_FOUND = "exiftool_not_found"
    EXIFTOOL_EXECUTION_FAILED = "exiftool_execution_failed"
    EXIFTOOL_LAUNCH_FAILED = "exiftool_launch_failed"


def clean_tool_detail(details: str) -> str:
    """Hide the tool's own success confirmation when it shows up as a diagnostic."""
    return "" if BENIGN_TOOL_CONFIRMATION in details else details


class ExportError(PhotoMetaFixerError):
    """Base class for errors recorded against a single asset.

    ``str(error)`` is the localized description shown to the user.
    """

    kind: ExportErrorKind
    detail: str = ""

    @property
    def localized_description(self) -> str:
        return str(self)


class ResourceNotFoundError(ExportError):
    """The asset has no resource of type photo."""

    kind = ExportErrorKind.RESOURCE_NOT_FOUND

    def __init__(self) -> None:
        super().__init__("Ressource photo non trouvée.")


class ExportFailedError(ExportError):
    """The library could not write the photo resource to disk."""

    kind = ExportErrorKind.EXPORT_FAILED

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"L'export initial du fichier a échoué: {detail}")


class DateNotFoundError(ExportError):
    """The selected date source is missing on the asset."""

    kind = ExportErrorKind.DATE_NOT_FOUND

    def __init__(self) -> None:
        super().__init__(
            "La date source sélectionnée est introuvable pour cet élément."
        )


class ExifToolNotFoundError(ExportError):
    """The bundled exiftool executable does not exist."""

    kind = ExportErrorKind.EXIFTOOL_NOT_FOUND

    def __init__(self) -> None:
        super().__init__("L'outil ExifTool intégré n'a pas été trouvé.")


class ExifToolExecutionFailedError(ExportError):
    """exiftool ran but exited with a non-zero status."""

    kind = ExportErrorKind.EXIFTOOL_EXECUTION_FAILED

    def __init__(self, exit_code: int, detail: str) -> None:
        self.exit_code = exit_code
        self.detail = detail
        message = f"L'exécution d'ExifTool a échoué (code: {exit_code})."
        shown = clean_tool_detail(detail)
        if shown:
            message += f" Détails: {shown}"
        super().__init__(message)


class ExifToolLaunchFailedError(ExportError):
    """exiftool could not be started at all."""

    kind = ExportErrorKind.EXIFTOOL_LAUNCH_FAILED

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Le lancement d'ExifTool a échoué: {detail}")


F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(func: F) -> F:
    """Log failures and wrap anything unexpected in a LibraryError."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:  # type: ignore[override]
        logger = get_logger("photo-meta-fixer.library")
        try:
            return func(*args, **kwargs)
        except PhotoMetaFixerError:
            logger.error(f"Library error in {func.__name__}", exc_info=True)
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Unhandled error in {func.__name__}: {exc}", exc_info=True)
            raise LibraryError(str(exc)) from exc

    return wrapper  # type: ignore[return-value]
