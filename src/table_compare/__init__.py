"""Regression helpers for comparing analysis results tables.

Submodules
----------
annotated
    Rounding, stringification and flattening of table cells.
comparator
    ``compare_tables`` and ``expect_equal_tables``.
expectations
    Assertion collaborators receiving comparison outcomes.
reference
    Builders for the flat reference lists stored in tests.
commands
    ``compare_tables`` console script.
"""

from __future__ import annotations

from table_compare.annotated import RaggedTableError
from table_compare.comparator import (
    TableComparison,
    compare_tables,
    expect_equal_tables,
)
from table_compare.expectations import (
    RecordingExpectation,
    TableMismatchError,
    raise_on_failure,
)
from table_compare.reference import format_reference_literal, make_test_table

__all__ = [
    "RaggedTableError",
    "RecordingExpectation",
    "TableComparison",
    "TableMismatchError",
    "compare_tables",
    "expect_equal_tables",
    "format_reference_literal",
    "make_test_table",
    "raise_on_failure",
]
