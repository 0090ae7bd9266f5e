"""Unit tests for the console logger."""

import pytest

from pyzev import create_logger


def test_quiet_logger_only_warns(capsys: pytest.CaptureFixture) -> None:
    """Test a non-verbose logger drops progress lines and keeps warnings."""
    logger = create_logger(verbose=False, name="Reader")
    logger.debug("offsets")
    logger.info("progress")
    logger.warning("empty event")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == "[pyzev] [Reader] Warning: empty event\n"
    assert not logger.verbose


def test_verbose_and_debug_levels(capsys: pytest.CaptureFixture) -> None:
    """Test verbose shows info, debug adds layout details."""
    create_logger(verbose=True, name="Writer").debug("hidden")
    create_logger(verbose=True).info("shown")
    create_logger(verbose=False, name="Writer", debug=True).debug("offsets")

    assert capsys.readouterr().out == "[pyzev] shown\n[pyzev] [Writer] DEBUG: offsets\n"
