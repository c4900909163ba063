"""Normalisation helpers that turn result tables into annotated cell vectors.

A results table is flattened row by row into a list of :class:`AnnotatedCell`
records. Each record keeps three views of one cell:

- ``value``: the rounded, stringified value used for matching.
- ``full_value``: the unrounded value as a string, used for reporting and for
  detecting unicode artefacts.
- ``column``: the originating column name when the table carries names.

The vectors are rebuilt for every comparison and never shared between calls.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

PRECISION_DIGITS = 4
FULL_PRECISION_DIGITS = 15
UNICODE_MARKER = "<unicode>"


class RaggedTableError(ValueError):
    """Raised when the rows of a table do not all have the same width."""


@dataclass(frozen=True)
class AnnotatedCell:
    """One flattened table cell with its matching and reporting values."""

    value: str
    full_value: str
    column: Optional[str] = None


def is_numeric_cell(value: Any) -> bool:
    """Return ``True`` when ``value`` should be compared after rounding.

    Logical values (``bool`` and ``numpy.bool_``) are treated as text so that
    ``True`` never matches ``1``.
    """

    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, numbers.Real)


def signif(value: float, digits: int) -> float:
    """Return ``value`` rounded to ``digits`` significant digits."""

    return float(f"{value:.{digits}g}")


def round_to_precision(value: Any) -> Any:
    """Round a numeric cell to four decimals and then four significant digits.

    Non-numeric cells are returned unchanged. A result of negative zero is
    returned as ``0.0``.
    """

    if not is_numeric_cell(value):
        return value
    rounded = signif(round(float(value), PRECISION_DIGITS), PRECISION_DIGITS)
    # Small negatives round to -0.0, which would print as "-0".
    return rounded + 0.0


def format_cell(value: Any) -> str:
    """Return the string form of a cell, using ``%.15g`` for numbers.

    Negative zero is written as ``0``.
    """

    if is_numeric_cell(value):
        return f"{float(value) + 0.0:.{FULL_PRECISION_DIGITS}g}"
    return str(value)


def is_unicode_mismatch(text: str) -> bool:
    """Return whether ``text`` carries the unicode-mismatch marker."""

    return UNICODE_MARKER in text


def exclude_unicode_mismatches(values: Sequence[str]) -> List[str]:
    """Return ``values`` without the entries carrying the unicode marker."""

    return [value for value in values if not is_unicode_mismatch(value)]


def _is_row(element: Any) -> bool:
    if isinstance(element, (str, bytes)):
        return False
    return isinstance(element, (Mapping, Sequence, np.ndarray))


def _column_mapping_rows(table: Mapping) -> List[List[tuple]]:
    names = [str(name) for name in table]
    columns = [
        list(column) if _is_row(column) else [column] for column in table.values()
    ]
    lengths = {len(column) for column in columns}
    if len(lengths) > 1:
        detail = ", ".join(
            f"{name}={len(column)}" for name, column in zip(names, columns)
        )
        raise RaggedTableError(
            f"Columns have different lengths ({detail}); "
            "tables must be rectangular."
        )
    return [list(zip(names, cells)) for cells in zip(*columns)]


def table_rows(table: Any) -> List[List[tuple]]:
    """Return ``table`` as a list of rows of ``(column, value)`` pairs.

    Parameters
    ----------
    table:
        A :class:`pandas.DataFrame`, a mapping from column name to a
        sequence of cells, or a sequence whose elements are rows. A row may
        be a mapping from column name to cell or a plain sequence of cells.
        Scalars at the top level are treated as one-cell rows.

    Returns
    -------
    List[List[tuple]]
        One list per row holding ``(column_name_or_None, cell)`` pairs.

    Raises
    ------
    RaggedTableError
        If the columns of a mapping do not all have the same length.
    """

    if isinstance(table, pd.DataFrame):
        names = [str(name) for name in table.columns]
        return [
            list(zip(names, record))
            for record in table.itertuples(index=False, name=None)
        ]
    if isinstance(table, Mapping):
        return _column_mapping_rows(table)

    rows: List[List[tuple]] = []
    for element in table:
        if isinstance(element, Mapping):
            rows.append([(str(name), cell) for name, cell in element.items()])
        elif _is_row(element):
            rows.append([(None, cell) for cell in element])
        else:
            rows.append([(None, element)])
    return rows


def check_rectangular(rows: Sequence[Sequence[tuple]]) -> int:
    """Return the common row width, raising when the rows are ragged."""

    if not rows:
        return 0
    width = len(rows[0])
    for index, row in enumerate(rows, start=1):
        if len(row) != width:
            raise RaggedTableError(
                f"Row {index} has {len(row)} cells but row 1 has {width}; "
                "tables must be rectangular."
            )
    return width


def flatten_cells(table: Any) -> List[Any]:
    """Return every cell of ``table`` in row order, dropping column names."""

    if isinstance(table, (pd.DataFrame, Mapping)) or any(
        _is_row(item) for item in table
    ):
        return [cell for row in table_rows(table) for _, cell in row]
    return list(table)


def annotate_cells(
    cells: Sequence[Any], columns: Optional[Sequence[Optional[str]]] = None
) -> List[AnnotatedCell]:
    """Build the annotated vector for a flat list of cells.

    Parameters
    ----------
    cells:
        Flattened cell values in row order.
    columns:
        Optional column name for each cell. Reference tables carry no names.

    Returns
    -------
    List[AnnotatedCell]
        One record per cell with rounded and full-precision strings.
    """

    annotated: List[AnnotatedCell] = []
    for index, cell in enumerate(cells):
        column = columns[index] if columns is not None else None
        annotated.append(
            AnnotatedCell(
                value=format_cell(round_to_precision(cell)),
                full_value=format_cell(cell),
                column=column,
            )
        )
    return annotated


def annotate_rows(rows: Sequence[Sequence[tuple]]) -> List[AnnotatedCell]:
    """Flatten ``(column, cell)`` rows and annotate them with column names."""

    columns = [column for row in rows for column, _ in row]
    cells = [cell for row in rows for _, cell in row]
    return annotate_cells(cells, columns)


def take_first_match(pool: List[AnnotatedCell], value: str) -> bool:
    """Remove the first element of ``pool`` whose rounded value is ``value``.

    Returns ``True`` when a match was consumed.
    """

    for index, candidate in enumerate(pool):
        if candidate.value == value:
            del pool[index]
            return True
    return False


__all__ = [
    "AnnotatedCell",
    "PRECISION_DIGITS",
    "RaggedTableError",
    "UNICODE_MARKER",
    "annotate_cells",
    "annotate_rows",
    "check_rectangular",
    "exclude_unicode_mismatches",
    "flatten_cells",
    "format_cell",
    "is_numeric_cell",
    "is_unicode_mismatch",
    "round_to_precision",
    "signif",
    "table_rows",
    "take_first_match",
]
