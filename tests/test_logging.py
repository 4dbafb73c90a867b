"""Tests for the console loggers."""

import io

import pytest
from chix8 import StackOverflow
from chix8.logging import ConsoleLogger, RunLogger


def make_logger(cls=ConsoleLogger, **kwargs):
    stream = io.StringIO()
    return cls(stream=stream, show_timestamps=False, **kwargs), stream


def test_level_filtering():
    logger, stream = make_logger(log_level="WARNING")

    logger.info("hidden")
    logger.warning("shown")
    logger.error("also shown")

    output = stream.getvalue()
    assert "hidden" not in output
    assert "[ WARNING][chix8] shown" in output
    assert "also shown" in output


def test_no_colors_on_plain_stream():
    logger, stream = make_logger()
    logger.info("plain")
    assert "\033[" not in stream.getvalue()


def test_unknown_level():
    with pytest.raises(ValueError, match="Unknown log level"):
        ConsoleLogger(log_level="LOUD")


def test_run_logger_messages():
    logger, stream = make_logger(RunLogger, log_level="DEBUG")

    logger.log_run_start("pong.ch8", {"scale": 10})
    logger.log_fault(StackOverflow(0x2A0, 0x22A0))
    logger.log_run_end(1400, 2.0)

    output = stream.getvalue()
    assert "Loaded ROM: pong.ch8" in output
    assert "scale: 10" in output
    assert "Machine halted: call stack overflow at pc=0x2A0 (word 0x22A0: CALL 0x2A0)" in output
    assert "Executed 1,400 cycles in 2.0s (700 Hz)" in output
