"""
Per-row field extraction: title, year, watched/rated date and rating.

Each extractor takes one row plus the column descriptors produced by the
CSV analyzer and never touches the network.
"""
import re
from typing import List, Optional
import pandas as pd

from movie_matcher.models import ColumnDescriptor, ColumnType, ParsedTable, RowFields

YEAR_IN_CELL = re.compile(r"\b(19|20)\d{2}\b")
YEAR_IN_TITLE = re.compile(r"\((\d{4})\)")
SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
STAR = "★"


def _cell(row: List[str], columns: List[ColumnDescriptor], column_type: ColumnType) -> Optional[str]:
    """Trimmed value of the first column of the given type, None if there is none."""
    for col in columns:
        if col.type == column_type:
            if col.index >= len(row):
                return ""
            return (row[col.index] or "").strip()
    return None


def extract_title(row: List[str], columns: List[ColumnDescriptor]) -> str:
    title = _cell(row, columns, ColumnType.TITLE)
    if title is not None:
        return title

    # No title column: fall back to the first non-empty cell
    for value in row:
        if value and value.strip():
            return value.strip()
    return ""


def extract_year(row: List[str], columns: List[ColumnDescriptor]) -> Optional[int]:
    """
    Year from the year column, or from a "Title (1999)" style title.

    Args:
        row (List[str]): Cells of one CSV row.
        columns (List[ColumnDescriptor]): Column descriptors of the table.

    Returns:
        Optional[int]: Four-digit year, or None.
    """
    year_str = _cell(row, columns, ColumnType.YEAR)
    if year_str:
        match = YEAR_IN_CELL.search(year_str)
        if match:
            return int(match.group(0))

    match = YEAR_IN_TITLE.search(extract_title(row, columns))
    if match:
        return int(match.group(1))
    return None


def extract_date(row: List[str], columns: List[ColumnDescriptor]) -> Optional[str]:
    """
    Watched/rated date normalized to YYYY-MM-DD.

    Generic parsing is tried first; an explicit MM/DD/YYYY pattern is the
    fallback, accepted only when month <= 12 and day <= 31.
    """
    date_str = _cell(row, columns, ColumnType.DATE)
    if not date_str:
        return None

    parsed = pd.to_datetime(date_str, errors="coerce")
    if not pd.isna(parsed):
        return parsed.strftime("%Y-%m-%d")

    match = SLASH_DATE.match(date_str)
    if match:
        month, day, year = (int(part) for part in match.groups())
        if 1 <= month <= 12 and 1 <= day <= 31:
            return f"{year:04d}-{month:02d}-{day:02d}"

    return None


def extract_rating(row: List[str], columns: List[ColumnDescriptor]) -> Optional[float]:
    """
    Rating rescaled onto a 1-10 scale.

    Star glyph runs count one point per star. Numbers up to 5 are read as a
    five-star scale and doubled, up to 10 are kept, up to 100 are divided by
    10. Values below 0.5 or above 100 yield None.
    """
    rating_str = _cell(row, columns, ColumnType.RATING)
    if not rating_str:
        return None

    if STAR in rating_str:
        return float(rating_str.count(STAR))

    try:
        value = float(rating_str)
    except ValueError:
        return None

    # anything under half a star would land below 1 once doubled
    if value < 0.5:
        return None
    if value <= 5:
        return value * 2
    if value <= 10:
        return value
    if value <= 100:
        return value / 10
    return None


def extract_fields(row: List[str], columns: List[ColumnDescriptor]) -> RowFields:
    """Run every extractor over a single row."""
    return RowFields(
        title=extract_title(row, columns),
        year=extract_year(row, columns),
        date=extract_date(row, columns),
        rating=extract_rating(row, columns),
    )


def extract_all(table: ParsedTable) -> List[RowFields]:
    return [extract_fields(row, table.columns) for row in table.rows]
