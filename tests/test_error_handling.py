"""Tests for error translation and logging setup."""

import errno
import logging
import tempfile
import shutil
from pathlib import Path

import pytest

from workroom.core.config import LoggingConfig
from workroom.core.error_handler import ErrorHandler, safe_path_operation
from workroom.core.exceptions import (
    AlreadyExistsError, FileSystemError, PathNotFoundError, PermissionDeniedError
)
from workroom.core.logging_config import AUDIT_LOGGER_NAME, LoggingManager


class TestErrorHandler:
    """Test mapping OSError to workroom exceptions."""

    def setup_method(self):
        self.handler = ErrorHandler()

    def test_errno_mapping(self):
        cases = [
            (errno.EACCES, PermissionDeniedError),
            (errno.EPERM, PermissionDeniedError),
            (errno.ENOENT, PathNotFoundError),
            (errno.EEXIST, AlreadyExistsError),
            (errno.EIO, FileSystemError),
        ]
        for code, expected in cases:
            error = OSError(code, "failure", "/some/path")
            with pytest.raises(expected) as exc_info:
                self.handler.handle_file_system_error(error, None)
            assert exc_info.value.path == Path("/some/path")
            assert exc_info.value.__cause__ is error

    def test_fallback_path(self):
        with pytest.raises(FileSystemError) as exc_info:
            self.handler.handle_file_system_error(OSError(errno.ENOSPC, "full"), "/disk")
        assert exc_info.value.path == Path("/disk")

    def test_decorator(self):
        @safe_path_operation
        def read(path):
            raise FileNotFoundError(errno.ENOENT, "missing", str(path))

        with pytest.raises(PathNotFoundError):
            read(Path("/missing"))

    def test_decorator_passes_results(self):
        @safe_path_operation
        def double(value):
            return value * 2

        assert double(4) == 8


class TestLoggingManager:
    """Test log handler setup."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.root_handlers = list(logging.getLogger().handlers)
        self.root_level = logging.getLogger().level

    def teardown_method(self):
        for name in ("", AUDIT_LOGGER_NAME):
            logger = logging.getLogger(name)
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
        root = logging.getLogger()
        for handler in self.root_handlers:
            root.addHandler(handler)
        root.setLevel(self.root_level)
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def test_file_and_audit_handlers(self):
        config = LoggingConfig(file_path=self.temp_dir / "logs" / "workroom.log", console_enabled=False)
        manager = LoggingManager(config)

        assert set(manager.handlers) == {"file", "audit"}
        logging.getLogger(AUDIT_LOGGER_NAME).info("create project /projects/show")
        manager.handlers["audit"].flush()

        audit_text = (self.temp_dir / "logs" / "audit.log").read_text()
        assert "AUDIT - create project /projects/show" in audit_text
        assert not logging.getLogger(AUDIT_LOGGER_NAME).propagate

    def test_no_audit_without_file_logging(self):
        config = LoggingConfig(file_enabled=False, console_enabled=True)
        manager = LoggingManager(config)
        assert set(manager.handlers) == {"console"}

    def test_set_level(self):
        config = LoggingConfig(file_enabled=False)
        manager = LoggingManager(config)
        manager.set_level("warning")
        assert logging.getLogger().level == logging.WARNING
        manager.set_level("loud")
        assert logging.getLogger().level == logging.WARNING
