"""Compare a freshly computed results table against a stored reference.

The comparison tolerates floating-point noise by rounding numbers to four
significant digits and tolerates reordering of cells within a row by matching
each row as a multiset. When the two tables hold a different number of cells
the comparison always fails; the report then tries to say whether rows,
columns or individual cells were added or removed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from table_compare.annotated import (
    AnnotatedCell,
    annotate_cells,
    annotate_rows,
    check_rectangular,
    exclude_unicode_mismatches,
    flatten_cells,
    is_unicode_mismatch,
    table_rows,
    take_first_match,
)
from table_compare.expectations import Expectation, raise_on_failure

LOGGER = logging.getLogger(__name__)

DEFAULT_LABEL = "New table"
FALLBACK_UNIT = "cells (possibly footnotes or per-cell flags)"


@dataclass(frozen=True)
class TableComparison:
    """Outcome of a single table comparison.

    Attributes
    ----------
    ok:
        ``True`` when the tables are considered equal.
    message:
        Human-readable failure report; empty when ``ok`` is ``True``.
    kind:
        ``"equal"``, ``"empty"``, ``"cell_mismatch"`` or ``"size_mismatch"``.
    """

    ok: bool
    message: str = ""
    kind: str = "equal"

    def __bool__(self) -> bool:
        return self.ok


def empty_table_message(caller: str) -> str:
    """Return the failure message used when the computed table is empty."""

    return (
        f"{caller}: the new table is empty. The analysis likely failed before "
        "the table was filled; run it interactively to see the error."
    )


def _describe_cell(cell: AnnotatedCell) -> str:
    column = cell.column if cell.column is not None else ""
    return f"`{cell.value}` (col: `{column}`)"


def _row_block(
    row: int, unmatched: Sequence[AnnotatedCell], remaining: Sequence[AnnotatedCell]
) -> List[str]:
    multiple = len(unmatched) > 1
    expected = exclude_unicode_mismatches([cell.full_value for cell in remaining])
    return [
        f"*** Row {row} ***",
        f"  Table {'cells' if multiple else 'cell'} that changed:",
        "    - " + "\n    - ".join(_describe_cell(cell) for cell in unmatched),
        "  Original "
        + ("values that were" if multiple else "value that was")
        + " expected:",
        "    - `" + "`, `".join(expected) + "`",
    ]


def find_row_mismatches(
    test_vec: Sequence[AnnotatedCell],
    ref_vec: Sequence[AnnotatedCell],
    n_rows: int,
    n_cols: int,
) -> str:
    """Return the per-row mismatch report for two equally sized tables.

    Each row of the reference is used as a consumable multiset: a test cell
    removes the first reference cell with the same rounded value, so repeated
    values within a row are matched once each. Test cells whose full value
    carries the unicode-mismatch marker are skipped when unmatched.

    Returns
    -------
    str
        Newline-joined report blocks, or an empty string when every row
        matched.
    """

    lines: List[str] = []
    for row in range(n_rows):
        start = row * n_cols
        stop = start + n_cols
        lookup = list(ref_vec[start:stop])
        unmatched: List[AnnotatedCell] = []

        for cell in test_vec[start:stop]:
            if take_first_match(lookup, cell.value):
                continue
            if is_unicode_mismatch(cell.full_value):
                continue
            unmatched.append(cell)

        if unmatched:
            lines.extend(_row_block(row + 1, unmatched, lookup))

    return "\n".join(lines)


def find_missing_values(
    test_vec: Sequence[AnnotatedCell], ref_vec: Sequence[AnnotatedCell]
) -> str:
    """Return the values of the larger table that the smaller cannot match."""

    if len(test_vec) > len(ref_vec):
        search_for, search_in = test_vec, list(ref_vec)
    else:
        search_for, search_in = ref_vec, list(test_vec)

    missing: List[str] = []
    for cell in search_for:
        if take_first_match(search_in, cell.value):
            continue
        text = f"`{cell.value}`"
        if cell.column is not None:
            text += f" (col `{cell.column}`)"
        missing.append(text)

    return ", ".join(missing)


def classify_size_difference(cell_diff: int, n_rows: int, n_cols: int) -> str:
    """Guess which unit was added or removed from the cell-count delta.

    Columns are checked first, then rows; anything else falls back to loose
    cells. This is a heuristic and is ambiguous for square tables.
    """

    if n_rows and cell_diff % n_rows == 0:
        return "columns"
    if n_cols and cell_diff % n_cols == 0:
        return "rows"
    return FALLBACK_UNIT


def compare_tables(
    test: Any, ref: Sequence[Any], label: Optional[str] = None
) -> TableComparison:
    """Compare a computed table against its stored reference.

    Parameters
    ----------
    test:
        Computed table: a sequence of rows (mappings from column name to
        cell, or plain sequences) or a :class:`pandas.DataFrame`.
    ref:
        Reference table, usually the flat cell list produced by
        :func:`table_compare.reference.make_test_table`. Nested rows are
        flattened in the same order as ``test``.
    label:
        Prefix for failure messages. Defaults to ``"New table"``.

    Returns
    -------
    TableComparison
        The outcome; mismatches are reported, never raised.

    Raises
    ------
    RaggedTableError
        If the rows of ``test`` do not all have the same width.
    """

    rows = table_rows(test)
    # Rows without cells, e.g. [[]] or a DataFrame with no columns, are empty too.
    if not any(rows):
        return TableComparison(
            ok=False,
            message=empty_table_message("expect_equal_tables()"),
            kind="empty",
        )

    n_rows = len(rows)
    n_cols = check_rectangular(rows)
    label = label or DEFAULT_LABEL

    test_vec = annotate_rows(rows)
    ref_vec = annotate_cells(flatten_cells(ref))

    if len(test_vec) == len(ref_vec):
        mismatches = find_row_mismatches(test_vec, ref_vec, n_rows, n_cols)
        if not mismatches:
            return TableComparison(ok=True)
        LOGGER.debug("%s differs from its reference table", label)
        return TableComparison(
            ok=False,
            message=f"{label} is not equal to old table:\n{mismatches}",
            kind="cell_mismatch",
        )

    missing = find_missing_values(test_vec, ref_vec)
    unit = classify_size_difference(abs(len(ref_vec) - len(test_vec)), n_rows, n_cols)
    if len(test_vec) > len(ref_vec):
        reason = (
            f"likely reason: there are one or more new {unit} in the new table "
            "that were not in the old table.\n"
            f"New table values that are not matched: {missing}"
        )
    else:
        reason = (
            f"likely reason: one or more {unit} are no longer in the new table "
            "that were in the old table.\n"
            f"Old table values that are not matched: {missing}"
        )
    return TableComparison(
        ok=False,
        message=(
            f"{label} (# cells: {len(test_vec)}) and old table "
            f"(# cells: {len(ref_vec)}) are not of equal length, {reason}"
        ),
        kind="size_mismatch",
    )


def expect_equal_tables(
    test: Any,
    ref: Sequence[Any],
    label: Optional[str] = None,
    expect: Expectation = raise_on_failure,
) -> TableComparison:
    """Compare two tables and report the outcome to ``expect``.

    ``expect`` receives ``(condition, message)``; the default raises
    :class:`table_compare.expectations.TableMismatchError` on failure so the
    helper can be called directly from a pytest test.
    """

    result = compare_tables(test, ref, label)
    expect(result.ok, result.message)
    return result


__all__ = [
    "DEFAULT_LABEL",
    "TableComparison",
    "classify_size_difference",
    "compare_tables",
    "empty_table_message",
    "expect_equal_tables",
    "find_missing_values",
    "find_row_mismatches",
]
