import io

import pytest

from octavm import create_state
from octavm.logging import ConsoleLogger, MachineLogger


def make_logger(cls=ConsoleLogger, **kwargs):
    stream = io.StringIO()
    logger = cls(stream=stream, show_timestamps=False, **kwargs)
    return logger, stream


def test_messages_below_level_are_dropped():
    logger, stream = make_logger(log_level="WARNING")
    logger.info("hidden")
    logger.warning("shown")

    lines = stream.getvalue().splitlines()
    assert lines == ["[ WARNING][octavm] shown"]


def test_no_colors_on_non_terminal_stream():
    logger, _ = make_logger(use_colors=True)
    assert not logger.use_colors


def test_unknown_level_rejected():
    with pytest.raises(ValueError):
        ConsoleLogger(log_level="LOUD")


def test_crash_report_includes_registers():
    logger, stream = make_logger(MachineLogger)
    state = create_state()
    state = state.replace(V=state.V.at[0xA].set(0x3C))
    logger.log_crash(RuntimeError("boom"), state)

    out = stream.getvalue()
    assert "RuntimeError: boom" in out
    assert "PC: 0x200" in out
    assert "VA:3C" in out


def test_halt_report():
    logger, stream = make_logger(MachineLogger)
    logger.log_halt("stopped", 1000, 2.0)
    assert "Halted (stopped) after 1,000 instructions, 2.00s, 500 ips" in stream.getvalue()
