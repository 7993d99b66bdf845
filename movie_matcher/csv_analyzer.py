"""
Structural analysis of user-supplied movie CSV exports.

Parses the raw text into rows, infers what each column holds (title, year,
date, rating) and guesses which service produced the export.
"""
import csv
import io
import re
from pathlib import Path
from typing import Sequence, Union
import pandas as pd
from loguru import logger

from movie_matcher.exceptions import ParseError
from movie_matcher.models import ColumnDescriptor, ColumnType, DetectedFormat, ParsedTable

SAMPLE_SIZE = 10

YEAR_VALUE = re.compile(r"^(19|20)\d{2}$")
DATE_VALUES = [
    re.compile(r"^\d{4}[-/]\d{1,2}[-/]\d{1,2}$"),  # YYYY-MM-DD, YYYY/MM/DD
    re.compile(r"^\d{1,2}[-/]\d{1,2}[-/]\d{4}$"),  # MM/DD/YYYY, MM-DD-YYYY
    re.compile(r"^\d{1,2}[-/][A-Za-z]{3}[-/]\d{4}$"),  # DD-MMM-YYYY
]
RATING_VALUES = [
    re.compile(r"^([0-9]|10)$"),
    re.compile(r"^([0-9]?\.[0-9]|10\.0)$"),
    re.compile(r"^★+½?$"),
]

TITLE_KEYWORDS = ("title", "name", "film")
DATE_KEYWORDS = ("date", "watched", "viewed", "rated on")
RATING_KEYWORDS = ("rating", "score", "stars")


def detect_column_type(header: str, values: Sequence[str]) -> ColumnType:
    """
    Infer the semantic type of a column.

    The header text wins when it is descriptive; otherwise a sample of the
    column's non-empty values is matched against per-type patterns.

    Args:
        header (str): Column header as it appears in the file.
        values (Sequence[str]): Cell values of the column, in row order.

    Returns:
        ColumnType: Inferred type, UNKNOWN when nothing fits.
    """
    name = header.lower().strip()

    if any(k in name for k in TITLE_KEYWORDS) or name == "movie":
        return ColumnType.TITLE
    if "year" in name or name == "yr":
        return ColumnType.YEAR
    if any(k in name for k in DATE_KEYWORDS):
        return ColumnType.DATE
    if any(k in name for k in RATING_KEYWORDS) or name == "rate":
        return ColumnType.RATING

    sample = [v.strip() for v in values if v and v.strip()][:SAMPLE_SIZE]
    if not sample:
        return ColumnType.UNKNOWN

    if all(YEAR_VALUE.match(v) for v in sample):
        return ColumnType.YEAR
    if any(p.match(v) for v in sample for p in DATE_VALUES):
        return ColumnType.DATE
    if any(p.match(v) for v in sample for p in RATING_VALUES):
        return ColumnType.RATING
    if any(len(v) > 10 for v in sample):
        return ColumnType.TITLE

    return ColumnType.UNKNOWN


def detect_csv_format(headers: Sequence[str]) -> DetectedFormat:
    """Guess which exporter produced the file from its header set."""
    names = [h.lower().strip() for h in headers]

    def contains(*keywords: str) -> bool:
        return any(k in h for h in names for k in keywords)

    if "name" in names and "date" in names and contains("rating"):
        return DetectedFormat.LETTERBOXD
    if "title" in names and "year" in names and contains("rating"):
        return DetectedFormat.IMDB
    if contains("tmdb") or ("title" in names and contains("id")):
        return DetectedFormat.TMDB

    has_title = contains("title", "name", "movie")
    if has_title and (contains("year") or contains("date", "watched") or contains("rating", "score")):
        return DetectedFormat.CUSTOM

    return DetectedFormat.UNKNOWN


def _header_width(text: str, delimiter: str) -> int:
    """Number of cells in the first line pandas treats as the header."""
    for row in csv.reader(io.StringIO(text), delimiter=delimiter):
        # pandas skips lines made only of whitespace
        if row and not (len(row) == 1 and not row[0].strip()):
            return len(row)
    return 0


def parse_csv(text: str, delimiter: str = ",") -> ParsedTable:
    """
    Parse CSV text with a header row into a ParsedTable.

    Blank lines are skipped; rows shorter than the header are padded with
    empty cells and longer rows are cut to the header width.

    Args:
        text (str): Raw CSV document.
        delimiter (str): Field separator (default=",").

    Returns:
        ParsedTable: Headers, typed columns, rows and detected format.

    Raises:
        ParseError: If the input is empty or no header can be read.
    """
    if not text or not text.strip():
        raise ParseError("CSV input is empty")

    width = _header_width(text, delimiter)
    if width == 0:
        raise ParseError("CSV input has no header row")

    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=delimiter,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=lambda fields: fields[:width],
        )
    except (pd.errors.EmptyDataError, pd.errors.ParserError, csv.Error) as e:
        raise ParseError(f"Could not parse CSV: {e}") from e

    df = df.fillna("")
    if df.empty:
        raise ParseError("CSV input has no header row")

    headers = [str(h) for h in df.iloc[0].tolist()]
    if not any(h.strip() for h in headers):
        raise ParseError("Could not determine CSV headers")

    rows = [[str(cell) for cell in row] for row in df.iloc[1:].values.tolist()]

    columns = [
        ColumnDescriptor(
            name=header,
            type=detect_column_type(header, [row[i] for row in rows]),
            index=i,
        )
        for i, header in enumerate(headers)
    ]
    detected_format = detect_csv_format(headers)

    logger.debug(
        f"📄 Parsed CSV: {len(rows)} rows, format={detected_format.value}, "
        f"columns={[(c.name, c.type.value) for c in columns]}"
    )
    return ParsedTable(
        headers=headers,
        columns=columns,
        rows=rows,
        detected_format=detected_format,
    )


def load_csv(file_path: Union[str, Path], delimiter: str = ",") -> ParsedTable:
    """Read a CSV file from disk and analyze it."""
    path = Path(file_path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise ParseError(f"CSV file not found: {path}") from e
    except UnicodeDecodeError as e:
        raise ParseError(f"CSV file is not valid UTF-8: {path}") from e
    return parse_csv(text, delimiter=delimiter)
