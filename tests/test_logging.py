"""Tests for toolbocks.logging module."""

import logging

from toolbocks.logging import disable_debug, enable_debug, logger


class TestEnableDebug:
    def test_enable_debug_sets_level(self):
        """Test that enable_debug sets DEBUG level."""
        try:
            enable_debug()
            assert logger.level == logging.DEBUG
        finally:
            disable_debug()

    def test_enable_debug_adds_one_handler(self):
        """Test that repeated calls do not stack handlers."""
        before = len(logger.handlers)
        try:
            enable_debug()
            enable_debug()
            assert len(logger.handlers) == before + 1
        finally:
            disable_debug()
        assert len(logger.handlers) == before

    def test_handler_format(self):
        """Test that debug output is prefixed with the library name."""
        try:
            enable_debug()
            formatter = logger.handlers[-1].formatter
            record = logging.LogRecord(
                "toolbocks", logging.DEBUG, __file__, 1, "hello", None, None
            )
            assert formatter.format(record) == "[toolbocks] DEBUG: hello"
        finally:
            disable_debug()

    def test_logger_name(self):
        """Test that logger has correct name."""
        assert logger.name == "toolbocks"

    def test_null_handler_installed(self):
        """Test that the library is silent by default."""
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)
