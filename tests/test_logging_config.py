"""Tests for logging configuration."""

import logging
import logging.handlers
from pathlib import Path

import pytest

from clockmock.logging_config import (
    LoggerType,
    WallClockFilter,
    create_console_logger,
    create_null_logger,
    logger_factory,
    setup_logger,
)


FROZEN_EPOCH = 1620743400


@pytest.fixture(autouse=True)
def restore_clockmock_logger():
    """Put the package logger back the way the test found it."""
    logger = logging.getLogger('clockmock')
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestSetupLogger:
    """Test suite for setup_logger function."""

    def test_setup_logger__creates_log_file_at_specified_path(self, tmp_path):
        """Test that setup_logger creates log file at the specified path."""
        log_file = tmp_path / 'test_logs' / 'clockmock.log'

        logger = setup_logger(log_file)

        assert logger.name == 'clockmock'
        assert logger.level == logging.DEBUG
        assert log_file.parent.exists()

        file_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert Path(file_handlers[0].baseFilename) == log_file

    def test_setup_logger__clears_existing_handlers(self, tmp_path):
        """Test that setup_logger clears existing handlers before adding new ones."""
        clockmock_logger = logging.getLogger('clockmock')
        clockmock_logger.handlers.clear()
        clockmock_logger.addHandler(logging.StreamHandler())
        clockmock_logger.addHandler(logging.NullHandler())

        logger = setup_logger(tmp_path / 'clockmock.log')

        # Console + file
        assert len(logger.handlers) == 2
        assert logger is clockmock_logger

    def test_setup_logger__console_warning_file_debug(self, tmp_path):
        """Console handler shows only problems by default, the file gets everything."""
        logger = setup_logger(tmp_path / 'clockmock.log')

        console_handlers = [
            h for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        file_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]

        assert console_handlers[0].level == logging.WARNING
        assert file_handlers[0].level == logging.DEBUG
        assert file_handlers[0].maxBytes == 1024 * 1024
        assert file_handlers[0].backupCount == 3

    def test_setup_logger__engine_messages_reach_file(self, tmp_path):
        """Child loggers such as clockmock.engine propagate into the file."""
        log_file = tmp_path / 'clockmock.log'
        logger = setup_logger(log_file)

        logging.getLogger('clockmock.engine').debug("Clock frozen at test")
        for handler in logger.handlers:
            handler.flush()

        assert "Clock frozen at test" in log_file.read_text()


class TestLoggerFactory:
    """Test suite for logger_factory."""

    def test_logger_factory__null__discards_messages(self):
        logger = logger_factory(LoggerType.NULL)

        assert logger is create_null_logger()
        assert logger.propagate is False
        assert all(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_logger_factory__console__uses_requested_level(self):
        logger = logger_factory(LoggerType.CONSOLE, level=logging.DEBUG)

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.DEBUG

    def test_logger_factory__default_without_log_file__raises(self):
        with pytest.raises(ValueError, match="log_file is required"):
            logger_factory(LoggerType.DEFAULT)

    def test_logger_factory__default_with_log_file__sets_up_file_logger(self, tmp_path):
        logger = logger_factory(LoggerType.DEFAULT, log_file=tmp_path / 'clockmock.log')
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)

    def test_create_console_logger__default_level_is_warning(self):
        assert create_console_logger().level == logging.WARNING

    def test_logger_factory__default_with_level__console_follows_level(self, tmp_path):
        logger = logger_factory(LoggerType.DEFAULT, log_file=tmp_path / 'clockmock.log', level=logging.DEBUG)

        console_handlers = [
            h for h in logger.handlers
            if not isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert console_handlers[0].level == logging.DEBUG

    def test_logger_factory__console_debug__shows_engine_messages(self, capsys):
        logger_factory(LoggerType.CONSOLE, level=logging.DEBUG)

        logging.getLogger('clockmock.engine').debug("Clock reset to real time")

        assert "DEBUG clockmock.engine: Clock reset to real time" in capsys.readouterr().err


class TestWallClockFilter:
    """Test suite for WallClockFilter."""

    def test_filter__frozen_timestamp__restamped_with_real_time(self):
        record = logging.makeLogRecord({"msg": "frozen", "created": FROZEN_EPOCH, "msecs": 0.0})

        assert WallClockFilter().filter(record) is True
        assert record.created > FROZEN_EPOCH + 86400

    def test_setup_logger__while_frozen__file_shows_real_date(self, tmp_path, engine):
        log_file = tmp_path / 'clockmock.log'
        logger = setup_logger(log_file)

        engine.freeze("2021-05-11T14:30:00Z")
        logger.debug("logged while frozen")
        engine.reset()
        for handler in logger.handlers:
            handler.flush()

        [line] = [line for line in log_file.read_text().splitlines() if line.endswith("logged while frozen")]
        assert not line.startswith("2021-05-11")
