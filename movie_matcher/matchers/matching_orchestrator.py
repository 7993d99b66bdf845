# movie_matcher/matchers/matching_orchestrator.py

import asyncio
import time
from dataclasses import replace
from typing import Iterator, List, Optional, Sequence, Tuple, TypeVar
from loguru import logger

from movie_matcher.clients import CatalogClient
from movie_matcher.config import BATCH_PAUSE, BATCH_SIZE, MAX_ALTERNATIVES
from movie_matcher.exceptions import CatalogError
from movie_matcher.extractors import extract_all
from movie_matcher.models import ColumnDescriptor, MatchRecord, MatchStatus, ParsedTable, RowFields
from movie_matcher.matchers.confidence import get_match_status, rank_candidates

T = TypeVar("T")


def batch_iter(items: Sequence[T], batch_size: int) -> Iterator[Tuple[int, Sequence[T]]]:
    """
    Yield start index and slices of size `batch_size` for batched processing.
    """
    n = len(items)
    for i in range(0, n, batch_size):
        yield i, items[i:i + batch_size]


async def find_best_match(
    client: CatalogClient,
    title: str,
    year: Optional[int] = None,
) -> MatchRecord:
    """
    Search the catalog for a title and pick the most likely movie.

    Args:
        client (CatalogClient): Catalog client used for the search.
        title (str): Title detected in the CSV row.
        year (Optional[int]): Year detected in the CSV row.

    Returns:
        MatchRecord: Best candidate with its confidence and up to five
                     alternatives. Catalog failures come back as an unmatched
                     record with an error message instead of raising.
    """
    try:
        candidates = await client.search_movies(title, year)
    except CatalogError as e:
        logger.debug(f"⚠️ Catalog search failed for '{title}': {e}")
        return MatchRecord(
            csv_data=[],
            columns=[],
            detected_title=title,
            detected_year=year,
            confidence=0.0,
            status=MatchStatus.UNMATCHED,
            error_message=f"Error searching for movie: {e}",
        )

    if not candidates:
        logger.debug(f"🔍 No catalog results for '{title}'")
        return MatchRecord(
            csv_data=[],
            columns=[],
            detected_title=title,
            detected_year=year,
            confidence=0.0,
            status=MatchStatus.UNMATCHED,
        )

    ranked = rank_candidates(candidates, title, year)
    best, confidence = ranked[0]
    alternatives = [cand for cand, _ in ranked[1:MAX_ALTERNATIVES + 1]]

    return MatchRecord(
        csv_data=[],
        columns=[],
        detected_title=title,
        detected_year=year,
        matched_movie=best,
        confidence=confidence,
        status=get_match_status(confidence, has_results=True),
        alternatives=alternatives,
    )


async def batch_process_matches(
    client: CatalogClient,
    csv_data: List[List[str]],
    fields: List[RowFields],
    columns: List[ColumnDescriptor],
    batch_size: int = BATCH_SIZE,
    pause: float = BATCH_PAUSE,
) -> List[MatchRecord]:
    """
    Match every row against the catalog, a few rows at a time.

    Rows are searched in groups of `batch_size` running concurrently; the
    next group starts only once the whole current group has resolved, after
    a short pause to stay under the catalog's rate limits.

    Args:
        client (CatalogClient): Configured catalog client.
        csv_data (List[List[str]]): Raw cells of each row.
        fields (List[RowFields]): Extracted fields, parallel to csv_data.
        columns (List[ColumnDescriptor]): Column descriptors of the table.
        batch_size (int): Concurrent lookups per group (default=5).
        pause (float): Seconds to wait between groups (default=0.5).

    Returns:
        List[MatchRecord]: One record per row, in input order.

    Raises:
        ConfigurationError: If the client has no API key; no row is searched.
    """
    if len(csv_data) != len(fields):
        raise ValueError("csv_data and fields must have the same length")

    client.require_configured()

    results: List[Optional[MatchRecord]] = [None] * len(fields)
    total = len(fields)

    for start_idx, batch_fields in batch_iter(fields, batch_size):
        batch_start = time.perf_counter()
        logger.info(f"Processing rows {start_idx}..{start_idx + len(batch_fields) - 1} of {total}")

        # Process all rows in the group in parallel
        batch_results = await asyncio.gather(
            *[find_best_match(client, row.title, row.year) for row in batch_fields]
        )

        for offset, (row, match) in enumerate(zip(batch_fields, batch_results)):
            row_idx = start_idx + offset
            results[row_idx] = replace(
                match,
                csv_data=list(csv_data[row_idx]),
                columns=list(columns),
                detected_date=row.date,
                detected_rating=row.rating,
            )

        logger.debug(f"🏁 Group starting at row {start_idx} done in {time.perf_counter() - batch_start:.2f}s")

        if start_idx + batch_size < total and pause > 0:
            await asyncio.sleep(pause)

    return results


async def match_table(
    client: CatalogClient,
    table: ParsedTable,
    batch_size: int = BATCH_SIZE,
    pause: float = BATCH_PAUSE,
) -> List[MatchRecord]:
    """Extract fields from a parsed table and match all of its rows."""
    fields = extract_all(table)
    return await batch_process_matches(
        client,
        table.rows,
        fields,
        table.columns,
        batch_size=batch_size,
        pause=pause,
    )
