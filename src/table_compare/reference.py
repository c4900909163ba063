"""Build reference tables from computed results.

Reference tables are flat lists of cells in row order. They are created once
from a table the developer has checked by hand and then pasted into a test
module, where :func:`table_compare.comparator.expect_equal_tables` uses them
as the expected values.
"""

from __future__ import annotations

from typing import Any, List

import numpy as np

from table_compare.annotated import check_rectangular, table_rows


def _plain(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return value


def make_test_table(table: Any) -> List[Any]:
    """Return the flat reference list for ``table``.

    Cells keep their full precision; column names are dropped. numpy scalars
    are converted to the equivalent Python values so the result can be
    written out with :func:`repr` or :mod:`json`.
    """

    return [_plain(cell) for row in table_rows(table) for _, cell in row]


def format_reference_literal(table: Any, indent: int = 4) -> str:
    """Return ``table`` as a Python list literal with one row per line.

    Parameters
    ----------
    table:
        Computed table accepted by :func:`make_test_table`.
    indent:
        Number of spaces in front of every row line.

    Returns
    -------
    str
        Text such as ``"[\\n    'TRUE', 1, 58,\\n    'FALSE', 1, 42,\\n]"``.
    """

    rows = table_rows(table)
    check_rectangular(rows)
    if not any(rows):
        return "[]"
    pad = " " * indent
    lines = ["["]
    for row in rows:
        lines.append(pad + ", ".join(repr(_plain(cell)) for _, cell in row) + ",")
    lines.append("]")
    return "\n".join(lines)


__all__ = ["format_reference_literal", "make_test_table"]
