"""Tests for logging configuration."""

import logging
import os
import sys
from unittest.mock import patch

from photo_meta_fixer.core.logging_config import (
    configure_logging,
    get_logger,
    logger,
    setup_logger,
)
from photo_meta_fixer.core.models import FixerConfig


class TestSetupLogger:
    """Tests for setup_logger function."""

    def test_setup_logger_default_level(self):
        """Test that INFO is used when nothing else is configured."""
        with patch.dict(os.environ, {}, clear=True):
            test_logger = setup_logger(name="pmf-test-default")
            assert test_logger.level == logging.INFO

    def test_setup_logger_explicit_level(self):
        """Test that an explicit level wins."""
        test_logger = setup_logger(name="pmf-test-explicit", level="debug")
        assert test_logger.level == logging.DEBUG

    def test_setup_logger_env_level(self):
        """Test LOG_LEVEL environment variable."""
        with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
            test_logger = setup_logger(name="pmf-test-env-level")
            assert test_logger.level == logging.WARNING

    def test_setup_logger_invalid_env_level_falls_back(self):
        """Test that an unknown level falls back to INFO."""
        with patch.dict(os.environ, {"LOG_LEVEL": "LOUD"}):
            test_logger = setup_logger(name="pmf-test-bad-level")
            assert test_logger.level == logging.INFO

    def test_setup_logger_simple_format(self):
        """Test LOG_FORMAT=simple selects the short format."""
        with patch.dict(os.environ, {"LOG_FORMAT": "simple"}):
            test_logger = setup_logger(name="pmf-test-simple", format_type="structured")
            format_string = test_logger.handlers[0].formatter._fmt
            assert "%(filename)s" not in format_string

    def test_setup_logger_structured_format(self):
        """Test the structured format includes source location."""
        with patch.dict(os.environ, {}, clear=True):
            test_logger = setup_logger(name="pmf-test-structured")
            format_string = test_logger.handlers[0].formatter._fmt
            assert "%(filename)s" in format_string
            assert "%(funcName)s" in format_string

    def test_setup_logger_no_duplicate_handlers(self):
        """Test that repeated setup does not add handlers."""
        first = setup_logger(name="pmf-test-dupes")
        second = setup_logger(name="pmf-test-dupes")

        assert first is second
        assert len(first.handlers) == 1

    def test_setup_logger_handler_uses_stdout(self):
        """Test that logger handler uses stdout."""
        test_logger = setup_logger(name="pmf-test-stdout")
        assert test_logger.handlers[0].stream is sys.stdout


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_default_name(self):
        """Test get_logger with default name."""
        assert get_logger().name == "photo-meta-fixer"

    def test_get_logger_returns_configured_logger(self):
        """Test that get_logger returns a configured, non-propagating logger."""
        test_logger = get_logger(name="pmf-test-configured")
        assert len(test_logger.handlers) == 1
        assert not test_logger.propagate


class TestConfigureLogging:
    """Tests for configure_logging and the debug switch."""

    def test_debug_overrides_level(self):
        """Test that debug wins over an explicit level and LOG_LEVEL."""
        with patch.dict(os.environ, {"LOG_LEVEL": "ERROR"}):
            test_logger = setup_logger(name="pmf-test-debug-flag", level="WARNING", debug=True)
        assert test_logger.level == logging.DEBUG

    def test_debug_session(self, tmp_path):
        """Test that a debug config lowers both loggers and reports tool locations."""
        root = logging.getLogger()
        previous = root.level
        config = FixerConfig(
            library_root=tmp_path, resources_dir=tmp_path / "res", debug=True
        )
        try:
            with patch.object(logging.Logger, "debug") as mock_debug:
                test_logger = configure_logging(config, name="pmf-test-session-debug")
            assert test_logger.level == logging.DEBUG
            assert root.level == logging.DEBUG
            messages = [call[0][0] for call in mock_debug.call_args_list]
            assert f"exiftool: {tmp_path / 'res' / 'exiftool'}" in messages
            assert f"Photo library: {tmp_path}" in messages
        finally:
            root.setLevel(previous)

    def test_normal_session(self, tmp_path):
        """Test that a non-debug config leaves the root logger alone."""
        root = logging.getLogger()
        previous = root.level
        config = FixerConfig(library_root=tmp_path)

        with patch.dict(os.environ, {}, clear=True):
            test_logger = configure_logging(config, name="pmf-test-session-info")

        assert test_logger.level == logging.INFO
        assert root.level == previous


def test_default_logger_exists():
    """Test that the module-level logger is configured."""
    assert isinstance(logger, logging.Logger)
    assert logger.name == "photo-meta-fixer"
    assert not logger.propagate
