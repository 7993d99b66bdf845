import asyncio
import sys
from loguru import logger

from movie_matcher.config import INPUT_CSV, OUTPUT_CSV, UNMATCHED_CSV, BATCH_SIZE, BATCH_PAUSE, LOG_LEVEL
from movie_matcher.clients import CatalogClient
from movie_matcher.csv_analyzer import load_csv
from movie_matcher.export import write_results_csv, write_unmatched_csv
from movie_matcher.matchers.matching_orchestrator import match_table
from movie_matcher.review import summarize, unmatched


async def main(input_path: str = INPUT_CSV):
    """
    Run the full matching pipeline over one CSV export.

    - Analyzes the CSV structure and extracts title/year/date/rating per row.
    - Matches every row against the catalog in rate-limited groups.
    - Writes all results and a separate report of the rows left unmatched.
    """
    # Initialize logs
    logger.remove()  # Remove default handler
    logger.add(sys.stderr, level=LOG_LEVEL, format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>")

    table = load_csv(input_path)
    logger.info(f"Loaded {len(table.rows)} rows from {input_path} (format: {table.detected_format.value})")

    async with CatalogClient.from_env() as client:
        records = await match_table(client, table, batch_size=BATCH_SIZE, pause=BATCH_PAUSE)

    write_results_csv(records, OUTPUT_CSV)

    leftovers = unmatched(records)
    if leftovers:
        write_unmatched_csv(leftovers, UNMATCHED_CSV)
        logger.info(f"Wrote {len(leftovers)} unmatched rows to {UNMATCHED_CSV}")

    summary = summarize(records)
    logger.info(
        f"Done: {summary.imported}/{summary.total} imported, {summary.failed} without a match. "
        f"Results in {OUTPUT_CSV}"
    )
    return summary


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else INPUT_CSV))
