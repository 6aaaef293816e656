"""
Unit tests for the logger helpers.
"""

import pytest
import logging
import os
import tempfile
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.logger import attach_log_file, get_logger


def _detach(log_path: Path) -> None:
    """Remove the attached file handler from every logger."""
    target = os.path.abspath(log_path)
    for logger in list(logging.Logger.manager.loggerDict.values()):
        if not isinstance(logger, logging.Logger):
            continue
        for handler in list(logger.handlers):
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
                logger.removeHandler(handler)
                handler.close()


class TestAttachLogFile:
    """Tests for attach_log_file."""

    def test_registered_loggers_write_to_attached_file(self):
        first = get_logger("AttachTestFirst")
        second = get_logger("AttachTestSecond")

        with tempfile.TemporaryDirectory() as tmpdir:
            log_path = Path(tmpdir) / "nested" / "run.log"
            assert attach_log_file(str(log_path)) == log_path

            first.info("first entry")
            second.debug("second entry")
            for logger in (first, second):
                for handler in logger.handlers:
                    handler.flush()

            content = log_path.read_text(encoding="utf-8")
            assert "| INFO     | AttachTestFirst | first entry" in content
            assert "| DEBUG    | AttachTestSecond | second entry" in content

            _detach(log_path)

    def test_attaching_twice_adds_one_handler(self):
        logger = get_logger("AttachTestTwice")

        with tempfile.TemporaryDirectory() as tmpdir:
            log_path = Path(tmpdir) / "run.log"
            attach_log_file(str(log_path))
            attach_log_file(str(log_path))

            matching = [
                h for h in logger.handlers
                if isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_path)
            ]
            assert len(matching) == 1
            _detach(log_path)

    def test_unopenable_path_returns_none(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = Path(tmpdir) / "file"
            blocker.write_text("x", encoding="utf-8")
            assert attach_log_file(str(blocker / "run.log")) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
