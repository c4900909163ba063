"""Utility helper package shared by the command-line tools.

Submodules
----------
cli
    Shared argparse, logging and terminal helpers for the console scripts.
"""

from __future__ import annotations

__all__ = [
    "cli",
]
