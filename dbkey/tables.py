"""Reading of two column csv side tables (modification masses, per-sequence overrides)."""

import typing
from collections.abc import Iterator

import pandas as pd

from dbkey.exceptions import ParseError

# the header line is skipped before tokenizing and only the first two fields of a row are read
HEADER_LINES = 1
TABLE_COLUMNS = ["key", "value"]


def _is_empty(cell: typing.Any) -> bool:
    return pd.isna(cell) or str(cell).strip() == ""


def read_two_column_table(
    source: typing.Any,
) -> Iterator[tuple[int, str, str]]:
    """Iterate over the rows of a comma separated table with a header row.

    The first line is always treated as header and skipped, blank lines are ignored.
    Rows may have any number of fields, columns beyond the second one are ignored.

    Parameters
    ----------
    source : str | os.PathLike | file-like
        Path or open text/binary stream.

    Yields
    ------
    tuple[int, str, str]
        1-based line number, first column and second column, both stripped.

    Raises
    ------
    ParseError
        If a row has fewer than two fields or the table cannot be tokenized.
    """
    try:
        table = pd.read_csv(
            source,
            header=None,
            skiprows=HEADER_LINES,
            names=TABLE_COLUMNS,
            usecols=[0, 1],
            index_col=False,
            dtype=str,
            skip_blank_lines=False,
            keep_default_na=False,
        )
    except pd.errors.EmptyDataError:
        return
    except pd.errors.ParserError as e:
        raise ParseError(f"malformed table: {e}") from e

    for row_idx, row in enumerate(table.itertuples(index=False, name=None)):
        line_number = row_idx + HEADER_LINES + 1

        if all(_is_empty(cell) for cell in row):
            continue

        if _is_empty(row[1]):
            raise ParseError(
                "invalid format, expected at least 2 comma-separated fields",
                line_number,
            )

        yield line_number, str(row[0]).strip(), str(row[1]).strip()


def parse_float(value: str, line_number: int, label: str) -> float:
    """Parse a numeric table cell, raising a line numbered `ParseError` on failure."""
    try:
        return float(value)
    except ValueError as e:
        raise ParseError(f"invalid {label} value '{value}'", line_number) from e
