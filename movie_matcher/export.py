"""CSV reports written at the end of a matching run."""
import csv
import io
from pathlib import Path
from typing import List, Optional, Union

from movie_matcher.models import MatchRecord

UNMATCHED_HEADER = ["title", "year", "date", "rating", "rawData"]
RESULTS_HEADER = [
    "title",
    "year",
    "date",
    "rating",
    "tmdbId",
    "matchedTitle",
    "releaseDate",
    "confidence",
    "status",
    "error",
]


def _blank(value: Optional[object]) -> object:
    return "" if value is None else value


def _format_rating(rating: Optional[float]) -> str:
    if rating is None:
        return ""
    return f"{rating:g}"


def generate_unmatched_csv(records: List[MatchRecord]) -> str:
    """
    Build the unmatched-movies report.

    Args:
        records (List[MatchRecord]): Records to list, usually the unmatched ones.

    Returns:
        str: CSV text with columns title, year, date, rating, rawData, where
             rawData is the original row joined by ", ".
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(UNMATCHED_HEADER)
    for record in records:
        writer.writerow([
            record.detected_title,
            _blank(record.detected_year),
            _blank(record.detected_date),
            _format_rating(record.detected_rating),
            ", ".join(record.csv_data),
        ])
    return buffer.getvalue()


def write_unmatched_csv(records: List[MatchRecord], file_path: Union[str, Path]) -> None:
    with open(file_path, "w", newline="", encoding="utf-8") as f:
        f.write(generate_unmatched_csv(records))


def write_results_csv(records: List[MatchRecord], file_path: Union[str, Path]) -> None:
    """Write one line per row with its detected fields and selected movie."""
    with open(file_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(RESULTS_HEADER)
        for record in records:
            movie = record.matched_movie
            writer.writerow([
                record.detected_title,
                _blank(record.detected_year),
                _blank(record.detected_date),
                _format_rating(record.detected_rating),
                movie.id if movie else "",
                movie.title if movie else "",
                _blank(movie.release_date) if movie else "",
                f"{record.confidence:.2f}",
                record.status.value,
                _blank(record.error_message),
            ])
