# src/photo_meta_fixer/core/error_handling.py

import logging
from pathlib import Path
from typing import Dict, List, Optional

from .protocols import LoggerProtocol


def remove_quietly(path: Optional[Path], logger: Optional[logging.Logger] = None) -> None:
    """Best-effort removal of a temp file; a failed removal is only logged."""
    if path is None:
        return
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        (logger or logging.getLogger(__name__)).warning(
            f"Could not remove temporary file {path}: {e}"
        )


class BatchOperationContextManager:
    """
    Context manager for batch operations to collect and summarize errors.

    ``logger`` may be a plain ``logging.Logger`` or any LoggerProtocol
    implementation; only message-only calls are made on it.
    """
    def __init__(self, operation_name: str = "Batch Operation", logger: Optional[LoggerProtocol] = None):
        self.operation_name = operation_name
        self.errors: List[Dict[str, str]] = []
        self.logger: LoggerProtocol = logger or logging.getLogger(
            self.__class__.__module__ + '.' + self.__class__.__name__
        )

    def __enter__(self) -> "BatchOperationContextManager":
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                self.logger.error(
                    f"  Error {i+1}/{len(self.errors)} for item '{error_detail['item']}': {error_detail['error']}"
                )
        elif exc_type:
            # The exception itself propagates with its traceback
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: "
                f"{exc_type.__name__}: {exc_val}"
            )
        else:
            self.logger.info(f"{self.operation_name} completed successfully.")

        # Never suppress exceptions raised inside the block
        return False

    def add_error(self, error_message: str, item_identifier: str = "Unknown item") -> None:
        """
        Report an error for a specific item within the 'with' block.

        Args:
            error_message (str): The error message or exception string.
            item_identifier (str): A string identifying the item that failed.
        """
        self.errors.append({"item": item_identifier, "error": str(error_message)})
        self.logger.debug(f"Error added for item '{item_identifier}' in {self.operation_name}: {error_message}")
