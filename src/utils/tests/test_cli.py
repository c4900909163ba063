"""
Tests for the shared CLI helpers.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from utils.cli import Spinner, ask_yes_no, configure_cli_logger


class FakeClock:
    """Clock returning preset times, one per call."""

    def __init__(self, *times: float) -> None:
        self.times = list(times)

    def __call__(self) -> float:
        return self.times.pop(0) if len(self.times) > 1 else self.times[0]


class FakeTerminal(io.StringIO):
    def isatty(self) -> bool:
        return True


def test_spinner_redraws_message_and_elapsed_time() -> None:
    """A shorter message is padded so no text of the previous one remains."""

    stream = io.StringIO()
    spinner = Spinner(
        "Listing repositories of org",
        stream=stream,
        enabled=False,
        clock=FakeClock(10.0, 12.0, 15.0),
    )

    with spinner:
        spinner.render("|")
        spinner.update("Inspecting a")
        spinner.render("/")

    first = "Listing repositories of org | 2s"
    second = "Inspecting a / 5s"
    assert stream.getvalue() == (
        f"\r{first}\r{second}" + " " * (len(first) - len(second))
    )


def test_spinner_is_silent_off_terminal(caplog) -> None:
    """Redirected output gets no animation, only a log record."""

    stream = io.StringIO()

    with caplog.at_level(logging.INFO, logger="utils.cli"):
        with Spinner("Listing", stream=stream, clock=FakeClock(1.0, 3.5)):
            pass

    assert stream.getvalue() == ""
    assert "Listing: 2.5s" in caplog.text


def test_spinner_clears_its_line_on_terminal() -> None:
    """The animation thread stops and the line is blanked on exit."""

    stream = FakeTerminal()
    spinner = Spinner("Listing", stream=stream, interval=0.01)

    with spinner:
        assert spinner.enabled

    assert spinner._thread is None
    assert stream.getvalue().endswith("\r")


def test_ask_yes_no_repeats_until_answered() -> None:
    """Unknown answers are asked again; an empty line aborts."""

    answers = iter(["maybe", "Y"])

    assert ask_yes_no("Continue?", input_fn=lambda prompt: next(answers)) is True
    assert ask_yes_no("Continue?", input_fn=lambda prompt: "no") is False
    assert ask_yes_no("Continue?", input_fn=lambda prompt: "") is None


def test_configure_cli_logger_writes_log_file(tmp_path: Path) -> None:
    """INFO records reach the log file even when the console is quiet."""

    log_file = tmp_path / "logs" / "run.log"
    logger = configure_cli_logger("devsetup_test", log_file=log_file)

    logging.getLogger("devsetup_test.child").info("fetched %s", "archive")
    for handler in logger.handlers:
        handler.flush()

    assert "INFO fetched archive" in log_file.read_text(encoding="utf-8")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
