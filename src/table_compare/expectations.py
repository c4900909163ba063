"""Assertion collaborators that receive table comparison outcomes.

An expectation is any callable taking ``(condition, message)``. The default,
:func:`raise_on_failure`, raises an ``AssertionError`` subclass so pytest and
unittest both report a failed comparison as an ordinary test failure.
:class:`RecordingExpectation` keeps every outcome instead, which is useful for
soft assertions that should not stop a test early.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol, Tuple


class Expectation(Protocol):
    """Callable that records or enforces one boolean expectation."""

    def __call__(self, condition: bool, message: str) -> None: ...


class TableMismatchError(AssertionError):
    """Raised by :func:`raise_on_failure` when a comparison fails."""


def raise_on_failure(condition: bool, message: str) -> None:
    """Raise :class:`TableMismatchError` with ``message`` unless ``condition``."""

    if not condition:
        raise TableMismatchError(message)


@dataclass
class RecordingExpectation:
    """Expectation that stores outcomes rather than raising."""

    outcomes: List[Tuple[bool, str]] = field(default_factory=list)

    def __call__(self, condition: bool, message: str) -> None:
        self.outcomes.append((bool(condition), message))

    @property
    def failures(self) -> List[str]:
        """Return the messages of every failed expectation."""

        return [message for ok, message in self.outcomes if not ok]

    @property
    def passed(self) -> bool:
        return all(ok for ok, _ in self.outcomes)


__all__ = [
    "Expectation",
    "RecordingExpectation",
    "TableMismatchError",
    "raise_on_failure",
]
