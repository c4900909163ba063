"""CLI helper utilities for shared argparse patterns.

This module centralizes the command-line pieces shared by the
``compare_tables`` and ``devsetup`` entry points so that:

- Verbosity and log-file flags behave the same in every tool.
- Logger wiring lives in one place instead of being repeated per command.
- Slow network steps can show a spinner with the elapsed time.
"""

from __future__ import annotations

import argparse
import itertools
import logging
import sys
import threading
import time
from pathlib import Path
from typing import Callable, Optional, TextIO

LOGGER = logging.getLogger(__name__)


def add_verbose_argument(parser: argparse.ArgumentParser) -> None:
    """Add a shared ``--verbose/-v`` flag enabling INFO-level console logs."""

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose logging",
    )


def add_log_file_argument(parser: argparse.ArgumentParser) -> None:
    """Add a shared ``--log-file`` argument for a detailed log on disk.

    Parameters
    ----------
    parser:
        Target argument parser.
    """

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write a detailed log (INFO and above) to this file.",
    )


def configure_cli_logger(
    name: str,
    *,
    verbose: bool = False,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Attach console and optional file handlers to the logger ``name``.

    Parameters
    ----------
    name:
        Logger name; usually the package name so module loggers propagate to
        it.
    verbose:
        When ``True`` the console handler shows INFO messages, otherwise only
        warnings and errors.
    log_file:
        Optional path receiving timestamped INFO-level records.

    Returns
    -------
    logging.Logger
        The configured logger.
    """

    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch = logging.StreamHandler()
    ch.setLevel(logging.INFO if verbose else logging.WARNING)
    ch.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(ch)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.INFO)
        fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        logger.addHandler(fh)
    return logger


def ask_yes_no(
    question: str, *, input_fn: Callable[[str], str] = input
) -> Optional[bool]:
    """Ask a yes/no question on the terminal.

    Returns ``True`` or ``False`` for an answer and ``None`` when the user
    aborts with an empty line or end of input.
    """

    while True:
        try:
            answer = input_fn(f"{question} [y/n] ").strip().lower()
        except EOFError:
            return None
        if not answer:
            return None
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False


class Spinner:
    """Single-line progress indicator for waits of unknown length.

    While active, one line of the form ``<message> <frame> <seconds>s`` is
    redrawn on ``stream``. The message can be replaced with :meth:`update`,
    e.g. to name the item currently being processed. Nothing is drawn when
    the stream is not a terminal, but the elapsed time is still logged at
    INFO level on ``logger`` when the block exits.
    """

    frames = "|/-\\"

    def __init__(
        self,
        message: str,
        *,
        stream: Optional[TextIO] = None,
        interval: float = 0.2,
        enabled: Optional[bool] = None,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger = LOGGER,
    ) -> None:
        self.message = message
        self.stream = stream if stream is not None else sys.stderr
        self.interval = interval
        self.enabled = self.stream.isatty() if enabled is None else enabled
        self.clock = clock
        self.logger = logger
        self.started: Optional[float] = None
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._width = 0

    @property
    def elapsed(self) -> float:
        """Seconds since the block was entered, or ``0.0`` before that."""

        return 0.0 if self.started is None else self.clock() - self.started

    def update(self, message: str) -> None:
        """Replace the message shown on the next redraw."""

        with self._lock:
            self.message = message

    def render(self, frame: str) -> None:
        """Redraw the line once, padding over a longer previous line."""

        with self._lock:
            line = f"{self.message} {frame} {self.elapsed:.0f}s"
            padding = " " * max(self._width - len(line), 0)
            self._width = len(line)
            self.stream.write(f"\r{line}{padding}")
            self.stream.flush()

    def _animate(self) -> None:
        for frame in itertools.cycle(self.frames):
            if self._stop.is_set():
                break
            self.render(frame)
            self._stop.wait(self.interval)

    def __enter__(self) -> "Spinner":
        self.started = self.clock()
        if self.enabled:
            self._thread = threading.Thread(target=self._animate, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._thread is not None:
            self._stop.set()
            self._thread.join()
            self._thread = None
            self.stream.write("\r" + " " * self._width + "\r")
            self.stream.flush()
        self.logger.info("%s: %.1fs", self.message, self.elapsed)


__all__ = [
    "add_log_file_argument",
    "add_verbose_argument",
    "ask_yes_no",
    "configure_cli_logger",
    "Spinner",
]
